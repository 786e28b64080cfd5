"""Signals: momentum state, streaming averages, ranking."""

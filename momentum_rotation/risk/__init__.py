"""Allocation: target weights and rebalancing."""

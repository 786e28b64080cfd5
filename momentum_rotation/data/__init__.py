"""Market data: price windows and the Hyperliquid loader."""

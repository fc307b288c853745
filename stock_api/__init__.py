"""HTTP surface for the stock price service."""

"""HTTP API for the StableSwap engine."""

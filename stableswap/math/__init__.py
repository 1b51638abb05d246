"""StableSwap invariant solvers."""

from stableswap.math.invariant import calculate_d, calculate_swap_output, calculate_y

__all__ = [
    "calculate_d",
    "calculate_y",
    "calculate_swap_output",
]

"""StableSwap invariant math for two-asset pools.

Core math functions for the Curve-style invariant:

    A*n^n*sum(x_i) + D = A*D*n^n + D^(n+1) / (n^n * prod(x_i))

Both solvers use Newton's method with the pool's raw amplification A
(no precision scaling) and n = 2.

IMPORTANT: All intermediate arithmetic uses SafeInt so overflow, negative
subtraction and division by zero surface as MathOverflow instead of
silently wrapping.
"""

from stableswap.constants import (
    CONVERGENCE_THRESHOLD,
    MAX_ITERATIONS,
    MIN_AMPLIFICATION,
    N_COINS,
)
from stableswap.errors import ConvergenceFailed, InvalidAmplification
from stableswap.safe_int import S, SafeInt


def _converged(current: SafeInt, previous: SafeInt) -> bool:
    return current.abs_diff(previous) <= CONVERGENCE_THRESHOLD


def _ann(amplification: int) -> SafeInt:
    if amplification < MIN_AMPLIFICATION:
        raise InvalidAmplification(f"Amplification must be >= {MIN_AMPLIFICATION}, got {amplification}")
    return S(amplification) * N_COINS


def calculate_d(balance_a: int, balance_b: int, amplification: int) -> int:
    """Calculate the StableSwap invariant D using Newton's method.

    Algorithm:
        1. Initial guess: D = sum(balances)
        2. D_P = D^(n+1) / (n^n * prod(balances)), built one balance at a time
        3. D = (Ann*S + D_P*n) * D / ((Ann-1)*D + (n+1)*D_P)
        4. Stop once |D_new - D_old| <= 1, at most 255 iterations

    Args:
        balance_a: Tracked balance of asset A
        balance_b: Tracked balance of asset B
        amplification: Amplification coefficient A (unscaled)

    Returns:
        The invariant D. Zero when the pool is empty or one side is zero.

    Raises:
        ConvergenceFailed: If iteration doesn't converge
        InvalidAmplification: If amplification is below the minimum
        MathOverflow: If any intermediate value overflows
    """
    balances = (S(balance_a), S(balance_b))
    sum_balances = balances[0] + balances[1]
    if sum_balances == 0:
        return 0

    ann = _ann(amplification)
    n = S(N_COINS)

    d = sum_balances
    for _ in range(MAX_ITERATIONS):
        d_p = d
        for balance in balances:
            if balance == 0:
                return 0
            # d_p = d_p * D / (x * n)
            d_p = (d_p * d) // (balance * n)

        d_prev = d

        numerator = (ann * sum_balances + d_p * n) * d
        denominator = (ann - 1) * d + (n + 1) * d_p
        d = numerator // denominator

        if _converged(d, d_prev):
            return d.value

    raise ConvergenceFailed(f"Invariant D did not converge after {MAX_ITERATIONS} iterations")


def calculate_y(x: int, d: int, amplification: int) -> int:
    """Solve for the other balance y given one balance x and the invariant D.

    Iterates y = (y^2 + c) / (2*y + b - D) from y0 = D, where
    c = D^2 / (x*n) * D / (Ann*n) and b = x + D/Ann.

    Args:
        x: New balance of the known side
        d: Invariant to preserve
        amplification: Amplification coefficient A (unscaled)

    Returns:
        The balance y of the other side. Zero if D or x is zero.

    Raises:
        ConvergenceFailed: If iteration doesn't converge
        InvalidAmplification: If amplification is below the minimum
        MathOverflow: If any intermediate value overflows or the
            denominator goes negative
    """
    if d == 0 or x == 0:
        return 0

    ann = _ann(amplification)
    n = S(N_COINS)
    sx, sd = S(x), S(d)

    c = (sd * sd) // (sx * n) * sd // (ann * n)
    b = sx + sd // ann

    y = sd
    for _ in range(MAX_ITERATIONS):
        y_prev = y

        numerator = y * y + c
        denominator = y * 2 + b - sd
        y = numerator // denominator

        if _converged(y, y_prev):
            return y.value

    raise ConvergenceFailed(f"Balance y did not converge after {MAX_ITERATIONS} iterations")


def calculate_swap_output(
    balance_in: int,
    balance_out: int,
    amount_in: int,
    amplification: int,
) -> int:
    """Calculate the gross output of a swap, before fees.

    Args:
        balance_in: Tracked balance of the input side
        balance_out: Tracked balance of the output side
        amount_in: Amount deposited on the input side
        amplification: Current amplification coefficient

    Returns:
        balance_out - y_new, where y_new keeps D constant after the deposit

    Raises:
        MathOverflow: If y_new exceeds balance_out
    """
    d = calculate_d(balance_in, balance_out, amplification)
    x_new = S(balance_in) + amount_in
    y_new = calculate_y(x_new.value, d, amplification)
    return (S(balance_out) - y_new).value

"""Tests for the StableSwap invariant solver."""

import pytest

from stableswap.errors import InvalidAmplification, MathOverflow
from stableswap.math import calculate_d, calculate_swap_output, calculate_y


class TestCalculateD:
    """Tests for calculate_d."""

    @pytest.mark.parametrize("amp", [1, 100, 10_000])
    def test_balanced_pool_is_sum(self, amp):
        """A perfectly balanced pool has D equal to the sum of balances."""
        x = 1_000_000_000_000
        assert calculate_d(x, x, amp) == 2 * x

    def test_empty_pool(self):
        assert calculate_d(0, 0, 100) == 0

    def test_one_side_empty(self):
        """D is zero when either side is empty."""
        assert calculate_d(1_000_000, 0, 100) == 0
        assert calculate_d(0, 1_000_000, 100) == 0

    def test_imbalanced_below_sum(self):
        """Imbalance lowers D below the plain sum."""
        d = calculate_d(1_000_000_000, 3_000_000_000, 100)
        assert d < 4_000_000_000
        assert d > 3_900_000_000

    def test_higher_amp_closer_to_sum(self):
        """A larger amplification makes the curve flatter."""
        low = calculate_d(1_000_000_000, 3_000_000_000, 10)
        high = calculate_d(1_000_000_000, 3_000_000_000, 1000)
        assert low < high <= 4_000_000_000

    def test_deposit_increases_d(self):
        d0 = calculate_d(1_000_000_000, 2_000_000_000, 100)
        d1 = calculate_d(1_100_000_000, 2_000_000_000, 100)
        assert d1 > d0

    def test_zero_amplification_rejected(self):
        with pytest.raises(InvalidAmplification):
            calculate_d(1_000_000, 1_000_000, 0)

    def test_overflow_raises(self):
        """Huge balances surface as MathOverflow, never a wrapped value."""
        with pytest.raises(MathOverflow):
            calculate_d(2**200, 2**200, 100)


class TestCalculateY:
    """Tests for calculate_y."""

    def test_recovers_balance(self):
        """Solving for y at the current x returns the current y within rounding."""
        x, y = 1_000_000_000, 1_500_000_000
        d = calculate_d(x, y, 100)
        assert abs(calculate_y(x, d, 100) - y) <= 2

    def test_zero_inputs(self):
        assert calculate_y(0, 1_000_000, 100) == 0
        assert calculate_y(1_000_000, 0, 100) == 0

    def test_more_x_means_less_y(self):
        d = calculate_d(1_000_000_000, 1_000_000_000, 100)
        assert calculate_y(1_100_000_000, d, 100) < calculate_y(1_000_000_000, d, 100)


class TestCalculateSwapOutput:
    """Tests for calculate_swap_output."""

    def test_near_parity_at_high_amp(self):
        """A small trade in a deep balanced pool is close to 1:1."""
        out = calculate_swap_output(10**12, 10**12, 1_000_000, 100)
        assert out == pytest.approx(1_000_000, abs=2)

    @pytest.mark.parametrize("amp", [1, 10, 100, 1000])
    def test_output_never_exceeds_input_when_balanced(self, amp):
        out = calculate_swap_output(10**12, 10**12, 10**9, amp)
        assert 0 < out <= 10**9

    def test_monotonic_in_amount(self):
        """Larger inputs never produce smaller outputs."""
        amounts = [100_000, 200_000, 500_000, 1_000_000, 5_000_000, 10_000_000]
        outputs = [calculate_swap_output(10**10, 10**10, a, 100) for a in amounts]
        assert outputs == sorted(outputs)
        assert len(set(outputs)) == len(outputs)

    def test_higher_amp_less_slippage(self):
        """A large trade gets more out of a flatter curve."""
        low = calculate_swap_output(10**10, 10**10, 5 * 10**9, 10)
        high = calculate_swap_output(10**10, 10**10, 5 * 10**9, 1000)
        assert low < high

"""Tests for the bounded bisection trade sizing search."""

import pytest

from rmm.constants import DEFAULT_SEARCH_EPSILON, WAD
from rmm.curve.search import SearchResult, is_a_smaller_approx_b, size_trade_for_target_input
from rmm.math.fixed_point import DomainError, InvalidProbability

TARGET = 50 * WAD
UPPER_BOUND = 1000 * WAD


def half(guess: int) -> int:
    """Net pull of half the trade size."""
    return guess // 2


class TestIsASmallerApproxB:
    def test_equal(self):
        assert is_a_smaller_approx_b(100, 100, 0)

    def test_above_target(self):
        assert not is_a_smaller_approx_b(101, 100, WAD)

    def test_within_epsilon(self):
        """1% of 100 is 1."""
        assert is_a_smaller_approx_b(99, 100, 10**16)
        assert not is_a_smaller_approx_b(98, 100, 10**16)


class TestSizeTradeForTargetInput:
    def test_converges_on_monotone_function(self):
        result = size_trade_for_target_input(half, TARGET, UPPER_BOUND)
        assert isinstance(result, SearchResult)
        assert result.converged
        assert is_a_smaller_approx_b(result.net_pull, TARGET, DEFAULT_SEARCH_EPSILON)
        assert result.net_pull == half(result.guess)

    def test_zero_epsilon_hits_target_exactly(self):
        result = size_trade_for_target_input(half, TARGET, UPPER_BOUND, epsilon=0)
        assert result.converged
        assert result.net_pull == TARGET

    def test_good_initial_guess_converges_immediately(self):
        result = size_trade_for_target_input(half, TARGET, UPPER_BOUND, initial_guess=2 * TARGET)
        assert result.converged
        assert result.iterations == 1
        assert result.guess == 2 * TARGET

    def test_initial_guess_outside_range_is_ignored(self):
        result = size_trade_for_target_input(
            half, TARGET, UPPER_BOUND, initial_guess=UPPER_BOUND + 1
        )
        assert result.converged

    def test_exhaustion_returns_without_raising(self):
        """Running out of iterations is reported, not raised."""
        result = size_trade_for_target_input(half, TARGET, UPPER_BOUND, max_iterations=3)
        assert not result.converged
        assert result.iterations == 3
        assert result.net_pull is not None

    def test_unpriceable_guesses_are_treated_as_too_large(self):
        def capped(guess: int) -> int:
            if guess > 200 * WAD:
                raise InvalidProbability("beyond curve capacity")
            return guess // 2

        result = size_trade_for_target_input(capped, TARGET, UPPER_BOUND)
        assert result.converged
        assert result.guess <= 200 * WAD

    def test_arithmetic_errors_are_treated_as_too_large(self):
        def capped(guess: int) -> int:
            if guess > 150 * WAD:
                raise ZeroDivisionError
            return guess // 2

        result = size_trade_for_target_input(capped, TARGET, UPPER_BOUND)
        assert result.converged

    def test_nothing_priceable(self):
        def always_fails(guess: int) -> int:
            raise DomainError("no curve")

        result = size_trade_for_target_input(always_fails, TARGET, UPPER_BOUND)
        assert not result.converged
        assert result.net_pull is None

    def test_unreachable_target(self):
        """A target above every achievable pull ends at the upper bound."""
        result = size_trade_for_target_input(half, TARGET, 80 * WAD)
        assert not result.converged
        assert result.guess == 80 * WAD
        assert result.net_pull == 40 * WAD

    def test_other_errors_propagate(self):
        def broken(guess: int) -> int:
            raise KeyError("reserve")

        with pytest.raises(KeyError):
            size_trade_for_target_input(broken, TARGET, UPPER_BOUND)

    @pytest.mark.parametrize("epsilon", [-1, WAD + 1])
    def test_invalid_epsilon_raises(self, epsilon):
        with pytest.raises(DomainError):
            size_trade_for_target_input(half, TARGET, UPPER_BOUND, epsilon=epsilon)

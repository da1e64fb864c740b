"""Bounded bisection for sizing a trade to a target input.

Buying yield claims with the wrapped asset works by wrapping and splitting
`guess` asset into principal and yield claims and selling the principal
claims back to the pool. The caller's net pull is what they must supply:

    net_pull(guess) = wrapped(guess) - quote_claim_in(guess).amount_out

The search finds the largest guess whose net pull does not exceed the
target, stopping as soon as it is within a relative epsilon of it.

Exhausting the iteration budget is NOT an error: the last priced guess is
returned with converged=False and the caller is expected to enforce its own
slippage bound on the resulting quote.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from rmm.constants import DEFAULT_SEARCH_EPSILON, MAX_SEARCH_ITERATIONS, WAD
from rmm.math.fixed_point import DomainError, mul_up

logger = structlog.get_logger()


@dataclass(frozen=True)
class SearchResult:
    """Outcome of size_trade_for_target_input.

    Attributes:
        guess: Trade size found
        net_pull: net_pull(guess), or None if no guess could be priced
        iterations: Number of net_pull evaluations
        converged: Whether the tolerance check was satisfied
    """

    guess: int
    net_pull: int | None
    iterations: int
    converged: bool


def is_a_smaller_approx_b(a: int, b: int, epsilon: int) -> bool:
    """Whether a <= b and a is within a relative epsilon of b.

    Args:
        a: Candidate value
        b: Target value
        epsilon: 18-decimal relative tolerance (e.g. 10^14 for 0.01%)
    """
    return a <= b and a >= b - mul_up(b, epsilon)


def size_trade_for_target_input(
    net_pull: Callable[[int], int],
    target: int,
    upper_bound: int,
    initial_guess: int | None = None,
    epsilon: int = DEFAULT_SEARCH_EPSILON,
    max_iterations: int = MAX_SEARCH_ITERATIONS,
) -> SearchResult:
    """Find the trade size whose net pull approximately equals target.

    Search space is [target, upper_bound]; net_pull is assumed to be
    non-decreasing over it. A guess that net_pull cannot price (the curve
    raises DomainError or an arithmetic error) is treated as too large.

    Args:
        net_pull: Callable mapping a trade size to the caller's net input
        target: Desired net input
        upper_bound: Largest trade size to consider
        initial_guess: Optional first guess, used if inside the search space
        epsilon: 18-decimal relative tolerance in [0, 1]
        max_iterations: Evaluation budget (default 256)

    Returns:
        SearchResult with the best guess found
    """
    if epsilon < 0 or epsilon > WAD:
        raise DomainError(f"Search epsilon must be in [0, 1], got {epsilon}")

    low, high = target, upper_bound
    if initial_guess is not None and low <= initial_guess <= high:
        guess = initial_guess
    else:
        guess = (low + high) // 2

    best_guess, best_pull = guess, None
    iterations = 0
    while iterations < max_iterations and low <= high:
        iterations += 1
        try:
            pull = net_pull(guess)
        except (DomainError, ArithmeticError) as err:
            logger.warning("search_guess_rejected", guess=guess, error=str(err))
            high = guess - 1
        else:
            best_guess, best_pull = guess, pull
            if pull <= target:
                if is_a_smaller_approx_b(pull, target, epsilon):
                    logger.debug(
                        "search_converged", guess=guess, net_pull=pull, iterations=iterations
                    )
                    return SearchResult(guess, pull, iterations, True)
                low = guess
            else:
                high = guess - 1

        next_guess = (low + high + 1) // 2
        if next_guess == guess:
            break
        guess = next_guess

    logger.warning(
        "search_did_not_converge",
        guess=best_guess,
        net_pull=best_pull,
        target=target,
        iterations=iterations,
    )
    return SearchResult(best_guess, best_pull, iterations, False)

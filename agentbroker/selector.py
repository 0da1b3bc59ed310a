"""
Crew selection.

Filters candidates through a reliability/liveness gate, ranks the survivors
and greedily fills a crew under a price ceiling and a size cap.
"""

from collections.abc import Iterable

from agentbroker.logging import get_logger
from agentbroker.types.offerings import Candidate

logger = get_logger()

MIN_SUCCESS_RATE = 50.0
MAX_INACTIVE_MINUTES = 1440
MAX_CREW = 4


def is_eligible(
    candidate: Candidate,
    min_success_rate: float = MIN_SUCCESS_RATE,
    max_inactive_minutes: int = MAX_INACTIVE_MINUTES,
) -> bool:
    """True if the candidate passes the hard reliability and liveness gate.

    Success rate is compared on the marketplace's 0-100 scale.
    """
    metrics = candidate.metrics
    return (
        metrics.success_rate >= min_success_rate
        and metrics.mins_from_last_online < max_inactive_minutes
    )


def rank(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Order by success rate descending, then price ascending."""
    return sorted(candidates, key=lambda c: (-c.metrics.success_rate, c.price))


def select_crew(
    candidates: Iterable[Candidate],
    price_ceiling: float,
    max_crew: int = MAX_CREW,
    min_success_rate: float = MIN_SUCCESS_RATE,
    max_inactive_minutes: int = MAX_INACTIVE_MINUTES,
) -> list[Candidate]:
    """
    Select the crew to dispatch.

    Greedy fill over the ranked, eligible candidates: stops at the first
    candidate that would push the running total over the ceiling, or once
    the crew is full. There is no backtracking.

    Args:
        candidates: Discovered candidates
        price_ceiling: Maximum combined price of the crew
        max_crew: Maximum crew size
        min_success_rate: Minimum success rate (0-100)
        max_inactive_minutes: Candidates inactive this long or longer are dropped

    Returns:
        Selected candidates in rank order
    """
    pool = list(candidates)
    verified = [c for c in pool if is_eligible(c, min_success_rate, max_inactive_minutes)]
    logger.info("%d/%d agents passed verification", len(verified), len(pool))

    crew: list[Candidate] = []
    total = 0.0
    for candidate in rank(verified):
        # a NaN ceiling admits nobody
        if not total + candidate.price <= price_ceiling:
            break
        if len(crew) >= max_crew:
            break
        crew.append(candidate)
        total += candidate.price

    return crew

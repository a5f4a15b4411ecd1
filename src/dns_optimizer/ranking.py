"""
Ranking of probe outcomes.

Successful outcomes are ordered by ascending latency; every failed
outcome follows them. Python's sort is stable, so ties and failures
keep the order in which the candidates were probed (catalog order).
"""

from .errors import NoReachableResolver
from .models import ProbeOutcome


def _rank_key(outcome: ProbeOutcome) -> tuple[int, float]:
    if outcome.is_success:
        return (0, outcome.latency_ms)
    return (1, 0.0)


def rank(outcomes: list[ProbeOutcome]) -> list[ProbeOutcome]:
    """
    Order outcomes fastest first.

    Args:
        outcomes: Probe outcomes in catalog order

    Returns:
        New list, successful outcomes by latency then failures
    """
    return sorted(outcomes, key=_rank_key)


def select_winner(ranked: list[ProbeOutcome]) -> ProbeOutcome:
    """
    Pick the fastest reachable resolver from ranked outcomes.

    Raises:
        NoReachableResolver: No outcome was successful
    """
    if ranked and ranked[0].is_success:
        return ranked[0]
    raise NoReachableResolver(len(ranked))


def improvement_over(winner: ProbeOutcome, ranked: list[ProbeOutcome]) -> dict[str, float]:
    """
    Percentage by which the winner is faster than each other reachable resolver.

    Returns:
        Mapping of candidate name to improvement percentage
    """
    improvements = {}
    for outcome in ranked:
        if outcome is winner or not outcome.is_success:
            continue
        if outcome.latency_ms > 0:
            improvement = ((outcome.latency_ms - winner.latency_ms) / outcome.latency_ms) * 100
            improvements[outcome.candidate.name] = improvement
    return improvements

"""Dedup, priority ordering and session capping of evaluated insights."""

from typing import Dict, List, Sequence, TypeVar

from insight_kernel.models.insight import Insight

DEFAULT_MAX_PER_SESSION = 3

T = TypeVar("T", bound=Insight)


def dedupe_insights(insights: Sequence[T]) -> List[T]:
    """
    Collapse entries sharing an id, keeping the lowest priority. Ties keep
    the first-seen entry. Output order is not meaningful.
    """
    strongest: Dict[str, T] = {}
    for insight in insights:
        existing = strongest.get(insight.id)
        if existing is None or insight.priority < existing.priority:
            strongest[insight.id] = insight
    return list(strongest.values())


def sort_by_priority(insights: Sequence[T]) -> List[T]:
    """The single ordering authority: ascending priority, stable."""
    return sorted(insights, key=lambda insight: insight.priority)


def apply_session_cap(insights: Sequence[T], max_per_session: int = DEFAULT_MAX_PER_SESSION) -> List[T]:
    """Positional truncation of an already-sorted sequence."""
    if max_per_session <= 0:
        return []
    return list(insights[:max_per_session])

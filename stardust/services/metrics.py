"""
Seam to the collaborators that count moderator activity.

Message and voice counts come from the stats API and action/case counts from
the moderation logs; neither is fetched here. Callers hand a ``MetricsSource``
to the weekly processing functions instead.
"""
from typing import Dict, Mapping, Optional, Protocol, Tuple

from stardust.schemas.points import RawMetrics


class MetricsSource(Protocol):
    async def fetch(self, guild_id: str, user_id: str, week: int, year: int) -> Optional[RawMetrics]:
        """Return the week's raw counts for a moderator, or None when nothing is known."""
        ...


class StaticMetricsSource:
    """Serves metrics already pushed to us, keyed by (user_id, week, year)."""

    def __init__(self, entries: Optional[Mapping[Tuple[str, int, int], RawMetrics]] = None):
        self._entries: Dict[Tuple[str, int, int], RawMetrics] = dict(entries or {})

    @classmethod
    def for_week(cls, week: int, year: int, by_user: Mapping[str, RawMetrics]) -> "StaticMetricsSource":
        return cls({(user_id, week, year): metrics for user_id, metrics in by_user.items()})

    def add(self, user_id: str, week: int, year: int, metrics: RawMetrics) -> None:
        self._entries[(user_id, week, year)] = metrics

    async def fetch(self, guild_id: str, user_id: str, week: int, year: int) -> Optional[RawMetrics]:
        return self._entries.get((user_id, week, year))

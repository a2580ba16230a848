"""Fold classified items into per-category totals and per-day stats."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .models import Category, CategoryTotals, Classified, DayStat, Item

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass
class Activity:
    """Totals and day buckets for every category."""

    totals: dict[Category, CategoryTotals] = field(
        default_factory=lambda: {category: CategoryTotals() for category in Category}
    )
    buckets: dict[Category, dict[str, list[Item]]] = field(
        default_factory=lambda: {category: {} for category in Category}
    )


def aggregate(classified: Iterable[Classified]) -> Activity:
    activity = Activity()
    for category, day, item in classified:
        activity.totals[category].add(item)
        activity.buckets[category].setdefault(day, []).append(item)

    for category in Category:
        totals = activity.totals[category]
        logger.debug(f"{category.plural}: {totals.open} open, {totals.closed} closed")
    return activity


def item_age_days(item: Item, now: datetime) -> int:
    """Age of an item in whole days, truncated toward zero.

    Closed items are measured as created_at - closed_at, which is zero or
    negative. Open items are measured from creation to now.
    """
    if item.is_closed:
        return int((item.created_at - item.closed_at) / ONE_DAY)
    return int((now - item.created_at) / ONE_DAY)


def build_stats(buckets: dict[str, list[Item]], now: datetime | None = None) -> list[DayStat]:
    """Build one DayStat per day, sorted by day."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    stats = []
    for day in sorted(buckets):
        items = buckets[day]
        closed = sum(1 for item in items if item.is_closed)
        stats.append(
            DayStat(
                day=day,
                items=tuple(items),
                open=len(items) - closed,
                closed=closed,
                ages=tuple(item_age_days(item, now) for item in items),
            )
        )
    return stats

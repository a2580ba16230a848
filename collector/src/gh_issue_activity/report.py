"""Render activity totals and per-day stats as text."""

from collections.abc import Callable
from datetime import datetime

import click

from .aggregator import Activity, build_stats
from .models import Category, CategoryTotals, DayStat

# Pull requests are reported before issues
REPORT_ORDER = (Category.PULL_REQUEST, Category.ISSUE)


def format_totals(category: Category, totals: CategoryTotals) -> str:
    return f"{category.plural}\n\topen {totals.open}\n\tclosed {totals.closed}"


def format_stat_line(category: Category, stat: DayStat) -> str:
    """Format one day, e.g. ``2024-03-05 -> 2 Issue ( +0 ) -> open (3), closed (-1)``."""
    entries = ", ".join(f"{item.state.value} ({age})" for item, age in zip(stat.items, stat.ages))
    return f"{stat.day} -> {stat.count} {category.label} ( {stat.net:+d} ) -> {entries}"


def render_report(
    activity: Activity,
    now: datetime | None = None,
    echo: Callable[[str], None] = click.echo,
) -> None:
    for category in REPORT_ORDER:
        echo(format_totals(category, activity.totals[category]))

    for category in REPORT_ORDER:
        echo(f"{category.label}s per day")
        for stat in build_stats(activity.buckets[category], now):
            echo(format_stat_line(category, stat))

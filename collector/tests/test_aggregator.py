"""Tests for aggregator module."""

from datetime import datetime, timezone

from gh_issue_activity.aggregator import aggregate, build_stats, item_age_days
from gh_issue_activity.classifier import classify_all
from gh_issue_activity.models import Category, Item

NOW = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def open_item(item_id, created, pr=False):
    return Item(
        id=item_id,
        state="open",
        created_at=created,
        pull_request_url="https://api.github.com/pulls/1" if pr else None,
    )


def closed_item(item_id, created, closed, pr=False):
    return Item(
        id=item_id,
        state="closed",
        created_at=created,
        closed_at=closed,
        pull_request_url="https://api.github.com/pulls/1" if pr else None,
    )


class TestAggregate:
    """Tests for aggregate function."""

    def test_totals_per_category(self):
        """Totals count open and closed items per category."""
        items = [
            open_item(1, datetime(2024, 3, 1)),
            closed_item(2, datetime(2024, 3, 1), datetime(2024, 3, 2)),
            open_item(3, datetime(2024, 3, 1), pr=True),
            closed_item(4, datetime(2024, 3, 1), datetime(2024, 3, 3), pr=True),
            closed_item(5, datetime(2024, 3, 1), datetime(2024, 3, 3), pr=True),
        ]

        activity = aggregate(classify_all(items))

        assert activity.totals[Category.ISSUE].open == 1
        assert activity.totals[Category.ISSUE].closed == 1
        assert activity.totals[Category.PULL_REQUEST].open == 1
        assert activity.totals[Category.PULL_REQUEST].closed == 2

    def test_each_item_in_exactly_one_bucket(self):
        """Items are split between the two category mappings by day."""
        issue = open_item(1, datetime(2024, 3, 5, 10))
        pr = closed_item(2, datetime(2024, 3, 1), datetime(2024, 3, 7, 18), pr=True)

        activity = aggregate(classify_all([issue, pr]))

        assert activity.buckets[Category.ISSUE] == {"2024-03-05": [issue]}
        assert activity.buckets[Category.PULL_REQUEST] == {"2024-03-07": [pr]}

    def test_bucket_keeps_insertion_order(self):
        """Items within a day stay in input order."""
        items = [open_item(i, datetime(2024, 3, 5, i)) for i in range(4)]

        activity = aggregate(classify_all(items))

        assert [item.id for item in activity.buckets[Category.ISSUE]["2024-03-05"]] == [0, 1, 2, 3]

    def test_empty_input(self):
        """No items gives zero totals and no buckets."""
        activity = aggregate([])

        for category in Category:
            assert activity.totals[category].open == 0
            assert activity.totals[category].closed == 0
            assert activity.buckets[category] == {}


class TestItemAgeDays:
    """Tests for item_age_days function."""

    def test_closed_item_age_is_created_minus_closed(self):
        """Closed three days after creation gives -3."""
        item = closed_item(1, datetime(2024, 1, 1), datetime(2024, 1, 4))

        assert item_age_days(item, NOW) == -3

    def test_closed_same_day_is_zero(self):
        """Created and closed at the same moment gives 0."""
        item = closed_item(1, datetime(2024, 1, 1, 9), datetime(2024, 1, 1, 9))

        assert item_age_days(item, NOW) == 0

    def test_closed_partial_day_truncates_toward_zero(self):
        """Two and a half days open gives -2."""
        item = closed_item(1, datetime(2024, 1, 1, 0), datetime(2024, 1, 3, 12))

        assert item_age_days(item, NOW) == -2

    def test_closed_within_the_hour_is_zero(self):
        """Closed one hour after creation gives 0."""
        item = closed_item(1, datetime(2024, 1, 1, 10), datetime(2024, 1, 1, 11))

        assert item_age_days(item, NOW) == 0

    def test_open_item_age_uses_now(self):
        """Open items are aged against the given clock."""
        item = open_item(1, datetime(2024, 3, 5, 10))

        assert item_age_days(item, NOW) == 5

    def test_open_item_partial_day_rounds_down(self):
        """Less than a full day old is 0."""
        item = open_item(1, datetime(2024, 3, 10, 1))

        assert item_age_days(item, NOW) == 0


class TestBuildStats:
    """Tests for build_stats function."""

    def test_sorted_by_day(self):
        """Stats come out in ascending day order."""
        buckets = {
            "2024-01-10": [open_item(1, datetime(2024, 1, 10))],
            "2024-01-02": [open_item(2, datetime(2024, 1, 2))],
            "2023-12-31": [open_item(3, datetime(2023, 12, 31))],
        }

        stats = build_stats(buckets, NOW)

        assert [stat.day for stat in stats] == ["2023-12-31", "2024-01-02", "2024-01-10"]

    def test_counts_and_net(self):
        """Three open and five closed gives net -2."""
        items = [open_item(i, datetime(2024, 3, 5)) for i in range(3)]
        items += [closed_item(10 + i, datetime(2024, 3, 1), datetime(2024, 3, 5)) for i in range(5)]

        [stat] = build_stats({"2024-03-05": items}, NOW)

        assert stat.count == 8
        assert stat.open == 3
        assert stat.closed == 5
        assert stat.net == -2

    def test_ages_match_items(self):
        """One age per item, in bucket order."""
        items = [
            open_item(1, datetime(2024, 3, 5, 10)),
            closed_item(2, datetime(2024, 3, 2, 10), datetime(2024, 3, 5, 10)),
        ]

        [stat] = build_stats({"2024-03-05": items}, NOW)

        assert stat.items == tuple(items)
        assert stat.ages == (5, -3)

    def test_naive_now_is_utc(self):
        """A naive clock is taken as UTC."""
        item = open_item(1, datetime(2024, 3, 5, 10))

        [stat] = build_stats({"2024-03-05": [item]}, datetime(2024, 3, 10, 12))

        assert stat.ages == (5,)

    def test_defaults_to_wall_clock(self):
        """Without now, open items are aged against the current time."""
        item = open_item(1, datetime(2000, 1, 1))

        [stat] = build_stats({"2000-01-01": [item]})

        assert stat.ages[0] > 365 * 20

    def test_empty_buckets(self):
        """No buckets gives no stats."""
        assert build_stats({}, NOW) == []

"""Tests for dashboard statistics and the review monitor."""

import pytest

from feedback_portal.admin.monitor import ReviewMonitor
from feedback_portal.admin.stats import (
    CompletionBadge,
    completion_badge,
    compute_stats,
    format_timestamp,
    location_checklist,
    truncate_review,
)
from feedback_portal.schemas.review_schema import ReviewIntent
from feedback_portal.store.memory import InMemoryStore
from feedback_portal.store.review_intents import TABLE

ALL = ["melbourne", "brunswick", "epping"]


def _intent(completed, rating=5, **extra):
    return ReviewIntent(id=extra.pop("id", "r"), completed_locations=completed, rating=rating, **extra)


@pytest.fixture
def window():
    return [
        _intent(ALL, rating=5),
        _intent(ALL, rating=4),
        _intent(["melbourne"], rating=3),
        _intent([], rating=5),
    ]


class TestComputeStats:
    def test_window_stats(self, window):
        stats = compute_stats(window, location_count=3)
        assert stats.total == 4
        assert stats.full_completion == 2
        assert stats.partial_completion == 1
        assert stats.avg_rating == 4.3  # 4.25 rounds half up
        assert stats.avg_locations_completed == 1.8  # 1.75 rounds half up

    def test_empty_window(self):
        stats = compute_stats([], location_count=3)
        assert stats.to_dict() == {
            "total": 0,
            "full_completion": 0,
            "partial_completion": 0,
            "avg_rating": 0.0,
            "avg_locations_completed": 0.0,
        }


class TestBadges:
    def test_badges(self):
        assert completion_badge(_intent(ALL), 3) == CompletionBadge.COMPLETE
        assert completion_badge(_intent(["epping"]), 3) == CompletionBadge.PARTIAL
        assert completion_badge(_intent([]), 3) == CompletionBadge.NOT_STARTED

    def test_badge_labels(self):
        assert CompletionBadge.NOT_STARTED.value == "Not Started"

    def test_checklist_follows_registry_order(self):
        checklist = location_checklist(_intent(["epping"]))
        assert [item["id"] for item in checklist] == ALL
        assert [item["completed"] for item in checklist] == [False, False, True]


class TestFormatting:
    def test_truncate_long_review(self):
        text = "a" * 150
        assert truncate_review(text) == "a" * 100 + "..."

    def test_short_review_untouched(self):
        assert truncate_review("Short and sweet") == "Short and sweet"
        assert truncate_review("b" * 100) == "b" * 100

    def test_format_timestamp(self):
        assert format_timestamp("2026-03-05T10:05:00+00:00") == "5 Mar 2026, 10:05 am"
        assert format_timestamp("2026-03-05T22:30:00Z") == "5 Mar 2026, 10:30 pm"
        assert format_timestamp("2026-03-05T00:07:00+00:00") == "5 Mar 2026, 12:07 am"

    def test_unparseable_timestamp_returned_as_is(self):
        assert format_timestamp("yesterday") == "yesterday"
        assert format_timestamp("") == ""


class TestReviewMonitor:
    @pytest.fixture
    def store(self):
        return InMemoryStore({TABLE: [
            {"id": "old", "customer_name": "Old", "rating": 3, "review_text": "x",
             "completed_locations": ["melbourne"], "created_at": "2026-01-01T09:00:00+00:00"},
            {"id": "new", "customer_name": "New", "rating": 5, "review_text": "y" * 120,
             "completed_locations": ALL, "created_at": "2026-02-01T09:00:00+00:00"},
        ]})

    def test_refresh_orders_newest_first(self, store):
        monitor = ReviewMonitor(store, limit=50)
        assert monitor.refresh()
        assert [r.id for r in monitor.reviews] == ["new", "old"]
        assert monitor.stats.total == 2

    def test_limit_caps_window(self, store):
        monitor = ReviewMonitor(store, limit=1)
        monitor.refresh()
        assert [r.id for r in monitor.reviews] == ["new"]

    def test_rows_for_display(self, store):
        monitor = ReviewMonitor(store)
        monitor.refresh()
        row = monitor.rows()[0]
        assert row["badge"] == "Complete"
        assert row["review_excerpt"].endswith("...")
        assert row["created_display"] == "1 Feb 2026, 9:00 am"

    def test_failed_refresh_keeps_previous_data(self, store):
        monitor = ReviewMonitor(store)
        monitor.refresh()
        store.fail_next = "permission denied"
        assert not monitor.refresh()
        assert monitor.error == "permission denied"
        assert len(monitor.reviews) == 2
        assert monitor.stats.total == 2

        assert monitor.refresh()
        assert monitor.error is None

    def test_null_columns_are_tolerated(self, store):
        monitor = ReviewMonitor(store)
        monitor.refresh()
        store.rows(TABLE).append({
            "id": "nulls", "customer_name": None, "customer_email": None, "rating": 4,
            "review_text": None, "completed_locations": None,
            "created_at": "2026-03-01T09:00:00+00:00",
        })
        assert monitor.refresh()
        assert [r.id for r in monitor.reviews] == ["nulls", "new", "old"]
        row = monitor.rows()[0]
        assert row["customer_name"] == ""
        assert row["badge"] == "Not Started"
        assert row["review_excerpt"] == ""

    def test_unreadable_row_is_left_out(self, store):
        store.rows(TABLE).append({
            "id": "bad", "rating": 9, "created_at": "2026-03-01T09:00:00+00:00",
        })
        monitor = ReviewMonitor(store)
        assert monitor.refresh()
        assert [r.id for r in monitor.reviews] == ["new", "old"]
        assert monitor.stats.total == 2
        assert monitor.error is None

"""Tests for shared utility functions."""

from datetime import datetime

from feedback_portal.utils import looks_like_email, round_half_up, utc_now_iso


class TestRoundHalfUp:
    def test_rounds_half_up_not_to_even(self):
        assert round_half_up(4.25) == 4.3

    def test_rounds_quarter_up(self):
        assert round_half_up(1.75) == 1.8

    def test_rounds_down_below_half(self):
        assert round_half_up(4.24) == 4.2

    def test_whole_numbers_unchanged(self):
        assert round_half_up(5.0) == 5.0

    def test_two_places(self):
        assert round_half_up(2.345, 2) == 2.35


class TestLooksLikeEmail:
    def test_plain_address(self):
        assert looks_like_email("jane@example.com")

    def test_strips_whitespace(self):
        assert looks_like_email("  jane@example.com ")

    def test_missing_at(self):
        assert not looks_like_email("jane.example.com")

    def test_missing_domain_dot(self):
        assert not looks_like_email("jane@example")

    def test_empty(self):
        assert not looks_like_email("")


class TestUtcNowIso:
    def test_is_timezone_aware(self):
        parsed = datetime.fromisoformat(utc_now_iso())
        assert parsed.tzinfo is not None

"""
Unit tests for calendar-day streak tracking.
"""

from datetime import datetime

import pytest

from vocab_srs.scheduling import streak

MONDAY_NIGHT = datetime(2026, 3, 9, 23, 50)
TUESDAY_EARLY = datetime(2026, 3, 10, 0, 5)
TUESDAY_LATE = datetime(2026, 3, 10, 22, 0)
THURSDAY = datetime(2026, 3, 12, 8, 0)


class TestAdvance:
    def test_first_activity_starts_at_one(self):
        assert streak.advance(None, 0, TUESDAY_EARLY) == 1

    def test_same_day_is_unchanged(self):
        assert streak.advance(TUESDAY_EARLY, 4, TUESDAY_LATE) == 4

    def test_twice_same_day_returns_same_value(self):
        first = streak.advance(None, 0, TUESDAY_EARLY)
        second = streak.advance(TUESDAY_EARLY, first, TUESDAY_LATE)
        assert first == second == 1

    def test_next_calendar_day_increments(self):
        # Ten minutes apart, but across midnight
        assert streak.advance(MONDAY_NIGHT, 3, TUESDAY_EARLY) == 4

    def test_consecutive_days(self):
        value = streak.advance(None, 0, MONDAY_NIGHT)
        value = streak.advance(MONDAY_NIGHT, value, TUESDAY_LATE)
        value = streak.advance(TUESDAY_LATE, value, datetime(2026, 3, 11, 7, 0))
        assert value == 3

    def test_gap_resets_to_one(self):
        assert streak.advance(TUESDAY_LATE, 9, THURSDAY) == 1

    def test_nearly_48h_same_next_day_still_increments(self):
        assert streak.advance(datetime(2026, 3, 9, 0, 1), 2, datetime(2026, 3, 10, 23, 59)) == 3


class TestObserve:
    def test_no_activity_is_zero(self):
        assert streak.observe(None, 0, TUESDAY_LATE) == 0

    @pytest.mark.parametrize("now", [TUESDAY_LATE, datetime(2026, 3, 11, 23, 0)])
    def test_within_one_day_reports_stored_value(self, now):
        assert streak.observe(TUESDAY_EARLY, 5, now) == 5

    def test_gap_reports_broken_streak(self):
        assert streak.observe(TUESDAY_EARLY, 5, THURSDAY) == 0


class TestLongest:
    @pytest.mark.parametrize("new,longest,expected", [(1, 0, 1), (3, 7, 7), (8, 7, 8)])
    def test_running_maximum(self, new, longest, expected):
        assert streak.next_longest(new, longest) == expected

"""
Tests for the next-available-slot search.
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from clinic.core.exceptions import InvalidArgumentError
from clinic.services.slot_service import (
    SEARCH_HORIZON,
    find_next_available_slot,
    find_next_slot,
    round_start_time,
    search_start_time,
)
from conftest import make_appointment

# Monday
DAY = datetime(2025, 3, 3)


def at(hour: int, minute: int = 0, days: int = 0) -> datetime:
    return DAY + timedelta(days=days, hours=hour, minutes=minute)


class TestStartTime:
    """Rounding of "now" and clamping into working hours."""

    @pytest.mark.parametrize(
        "now, expected",
        [
            (at(10, 15), at(10, 30)),
            (at(10, 0), at(10, 30)),
            (at(10, 29), at(10, 30)),
            (at(10, 30), at(11, 0)),
            (at(10, 59), at(11, 0)),
            (at(23, 40), at(0, 0, days=1)),
        ],
    )
    def test_round_start_time(self, now, expected):
        assert round_start_time(now) == expected

    def test_round_start_time_drops_seconds(self):
        now = at(10, 15).replace(second=42, microsecond=123456)
        assert round_start_time(now) == at(10, 30)

    def test_before_opening_clamps_to_same_day(self):
        assert search_start_time(at(7, 10)) == at(9, 0)

    def test_after_closing_moves_to_next_day(self):
        assert search_start_time(at(18, 0)) == at(9, 0, days=1)

    def test_exactly_closing_time_is_kept(self):
        # 16:40 rounds to 17:00, which is not after closing
        assert search_start_time(at(16, 40)) == at(17, 0)

    def test_late_evening_rolls_over_to_next_opening(self):
        assert search_start_time(at(23, 45)) == at(9, 0, days=1)


class TestFindNextSlot:
    def test_empty_calendar_returns_start_time(self):
        start = search_start_time(at(10, 15))
        assert find_next_slot([], 30, start) == at(10, 30)

    def test_after_hours_request_returns_next_opening(self):
        start = search_start_time(at(18, 0))
        assert find_next_slot([], 30, start) == at(9, 0, days=1)

    def test_skips_exact_conflict(self):
        busy = [make_appointment(at(10, 0), 30)]
        assert find_next_slot(busy, 30, at(10, 0)) == at(10, 30)

    def test_candidate_running_into_appointment_jumps_past_it(self):
        busy = [make_appointment(at(10, 0), 30)]
        assert find_next_slot(busy, 30, at(9, 45)) == at(10, 30)

    def test_slot_ending_at_existing_start_is_free(self):
        busy = [make_appointment(at(10, 0), 30)]
        assert find_next_slot(busy, 30, at(9, 30)) == at(9, 30)

    def test_end_of_day_overflow_moves_to_next_day(self):
        assert find_next_slot([], 30, at(16, 45)) == at(9, 0, days=1)

    def test_slot_ending_exactly_at_closing_fits(self):
        assert find_next_slot([], 30, at(16, 30)) == at(16, 30)

    def test_back_to_back_appointments(self):
        busy = [
            make_appointment(at(10, 30), 30),
            make_appointment(at(11, 0), 30),
            make_appointment(at(11, 30), 60),
        ]
        assert find_next_slot(busy, 30, at(10, 30)) == at(12, 30)

    def test_input_order_does_not_matter(self):
        busy = [
            make_appointment(at(11, 30), 60),
            make_appointment(at(10, 30), 30),
            make_appointment(at(11, 0), 30),
        ]
        assert find_next_slot(busy, 30, at(10, 30)) == at(12, 30)

    def test_gap_too_small_is_skipped(self):
        busy = [
            make_appointment(at(10, 30), 30),
            make_appointment(at(11, 10), 50),
        ]
        assert find_next_slot(busy, 30, at(10, 30)) == at(12, 0)

    def test_last_appointment_of_day_pushes_to_next_morning(self):
        busy = [make_appointment(at(16, 0), 60)]
        assert find_next_slot(busy, 30, at(16, 0)) == at(9, 0, days=1)

    def test_unscheduled_appointments_are_ignored(self):
        busy = [make_appointment(None, 120)]
        assert find_next_slot(busy, 30, at(10, 30)) == at(10, 30)

    def test_overnight_appointment_snaps_to_opening(self):
        # 16:30 -> 07:30 next day; the jump lands before opening time
        busy = [make_appointment(at(16, 30), 15 * 60)]
        assert find_next_slot(busy, 30, at(16, 30)) == at(9, 0, days=1)

    def test_next_morning_conflict_after_overflow(self):
        busy = [make_appointment(at(9, 0, days=1), 30)]
        assert find_next_slot(busy, 30, at(16, 45)) == at(9, 30, days=1)

    def test_fully_booked_week_falls_back_after_horizon(self):
        start = search_start_time(at(8, 10))
        assert start == at(9, 0)
        busy = [
            make_appointment(at(9, 0, days=d) + timedelta(minutes=30 * i), 30)
            for d in range(7)
            for i in range(16)
        ]
        assert find_next_slot(busy, 30, start) == start + timedelta(days=8)
        assert find_next_slot(busy, 30, start) == at(9, 0, days=8)

    def test_last_free_day_inside_horizon_is_used(self):
        busy = [
            make_appointment(at(9, 0, days=d), 480)
            for d in range(6)
        ]
        assert find_next_slot(busy, 30, at(9, 0)) == at(9, 0, days=6)

    def test_duration_longer_than_working_day_falls_back(self):
        assert find_next_slot([], 600, at(9, 0)) == at(9, 0) + SEARCH_HORIZON + timedelta(days=1)

    def test_huge_duration_falls_back_without_overflow(self):
        assert find_next_slot([], 10**12, at(9, 0)) == at(9, 0, days=8)

    def test_full_working_day_still_fits(self):
        assert find_next_slot([], 480, at(9, 0)) == at(9, 0)
        assert find_next_slot([], 480, at(9, 30)) == at(9, 0, days=1)


class TestFindNextAvailableSlotValidation:
    @pytest.mark.parametrize("required_time", [0, -15, True])
    def test_rejects_non_positive_duration(self, required_time):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(find_next_available_slot(None, "Gregory House", required_time, at(10, 0)))

    @pytest.mark.parametrize("doctor_name", ["", "   "])
    def test_rejects_empty_doctor(self, doctor_name):
        with pytest.raises(InvalidArgumentError):
            asyncio.run(find_next_available_slot(None, doctor_name, 30, at(10, 0)))

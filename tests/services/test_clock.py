from datetime import datetime, timedelta, timezone

import pytest

from matchdesk.models.match import MatchStatus
from matchdesk.schemas import MatchResponse
from matchdesk.services.clock import (
    MatchPhase,
    display_clock,
    elapsed_minutes,
    event_minute_hint,
    half_length,
    match_phase,
    status_label,
)

NOW = datetime(2025, 5, 10, 20, 0, tzinfo=timezone.utc)


def make_match(**fields) -> MatchResponse:
    return MatchResponse(**{"id": 1, "team_a_id": 10, "team_b_id": 20, **fields})


def live_first_half(minutes: float, **fields) -> MatchResponse:
    return make_match(
        status=MatchStatus.live,
        first_half_start=NOW - timedelta(minutes=minutes),
        **fields,
    )


def live_second_half(minutes: float, **fields) -> MatchResponse:
    return make_match(
        status=MatchStatus.live,
        first_half_start=NOW - timedelta(minutes=minutes + 60),
        second_half_start=NOW - timedelta(minutes=minutes),
        **fields,
    )


# ============================================================================
# display_clock
# ============================================================================


class TestDisplayClockNotLive:
    @pytest.mark.parametrize("status", [MatchStatus.scheduled, MatchStatus.finished])
    def test_returns_none_unless_live(self, status):
        match = make_match(
            status=status,
            first_half_start=NOW - timedelta(minutes=30),
            second_half_start=NOW - timedelta(minutes=5),
        )
        assert display_clock(match, NOW) is None

    def test_scheduled_without_timestamps(self):
        assert display_clock(make_match(), NOW) is None


class TestDisplayClockHalftime:
    def test_halftime_label(self):
        match = live_first_half(47, is_halftime=True)
        assert display_clock(match, NOW) == "HT"

    def test_halftime_ignores_timestamps(self):
        match = live_second_half(200, is_halftime=True)
        assert display_clock(match, NOW) == "HT"

    def test_halftime_without_kickoff_stamp(self):
        match = make_match(status=MatchStatus.live, is_halftime=True)
        assert display_clock(match, NOW) == "HT"


class TestDisplayClockFirstHalf:
    def test_first_minute_reads_zero(self):
        assert display_clock(live_first_half(0), NOW) == "0'"
        assert display_clock(live_first_half(0.9), NOW) == "0'"

    def test_whole_minutes_elapsed(self):
        assert display_clock(live_first_half(23.5), NOW) == "23'"

    def test_regulation_boundary(self):
        assert display_clock(live_first_half(45), NOW) == "45'"
        assert display_clock(live_first_half(45.99), NOW) == "45'"
        assert display_clock(live_first_half(46), NOW) == "45+"

    def test_fifty_minutes_without_added_time(self):
        assert display_clock(live_first_half(50), NOW) == "45+"

    def test_added_time_extends_running_minute(self):
        match = live_first_half(48, additional_time_first_half=3)
        assert display_clock(match, NOW) == "48'"

        match = live_first_half(49, additional_time_first_half=3)
        assert display_clock(match, NOW) == "45+"

    def test_shorter_regulation(self):
        # 80 minute match: 40 minute halves
        assert display_clock(live_first_half(40, total_time=80), NOW) == "40'"
        assert display_clock(live_first_half(41, total_time=80), NOW) == "40+"

    def test_naive_kickoff_treated_as_utc(self):
        match = make_match(
            status=MatchStatus.live,
            first_half_start=(NOW - timedelta(minutes=12)).replace(tzinfo=None),
        )
        assert display_clock(match, NOW) == "12'"


class TestDisplayClockSecondHalf:
    def test_ten_minutes_into_second_half(self):
        assert display_clock(live_second_half(10), NOW) == "55'"

    def test_restart_reads_half_length(self):
        assert display_clock(live_second_half(0), NOW) == "45'"

    def test_full_time_boundary(self):
        assert display_clock(live_second_half(45), NOW) == "90'"
        assert display_clock(live_second_half(46), NOW) == "90+"

    def test_added_time_extends_running_minute(self):
        match = live_second_half(49, additional_time_second_half=4)
        assert display_clock(match, NOW) == "94'"

        match = live_second_half(50, additional_time_second_half=4)
        assert display_clock(match, NOW) == "90+"

    def test_first_half_added_time_does_not_apply(self):
        match = live_second_half(46, additional_time_first_half=5)
        assert display_clock(match, NOW) == "90+"


class TestDisplayClockMissingStamp:
    def test_live_without_kickoff_stamp(self):
        match = make_match(status=MatchStatus.live)
        assert display_clock(match, NOW) == "0'"


# ============================================================================
# Phase and helpers
# ============================================================================


class TestMatchPhase:
    def test_phases(self):
        assert match_phase(make_match()) == MatchPhase.scheduled
        assert match_phase(live_first_half(10)) == MatchPhase.first_half
        assert match_phase(live_first_half(47, is_halftime=True)) == MatchPhase.halftime
        assert match_phase(live_second_half(5)) == MatchPhase.second_half
        assert match_phase(make_match(status=MatchStatus.finished)) == MatchPhase.finished

    def test_half_length_defaults_to_45(self):
        assert half_length(make_match()) == 45
        assert half_length(make_match(total_time=None)) == 45


class TestElapsedMinutes:
    def test_before_kickoff(self):
        assert elapsed_minutes(make_match(), NOW) is None

    def test_second_half_offset(self):
        assert elapsed_minutes(live_second_half(3), NOW) == 48


class TestEventMinuteHint:
    def test_not_live_seeds_first_minute(self):
        assert event_minute_hint(make_match(), NOW) == 1

    def test_first_minute_is_never_zero(self):
        assert event_minute_hint(live_first_half(0), NOW) == 1

    def test_running_minute(self):
        assert event_minute_hint(live_first_half(17), NOW) == 17
        assert event_minute_hint(live_second_half(10), NOW) == 55

    def test_halftime(self):
        assert event_minute_hint(live_first_half(47, is_halftime=True), NOW) == 45

    def test_stoppage_time_keeps_counting(self):
        assert event_minute_hint(live_first_half(48), NOW) == 48


class TestStatusLabel:
    def test_labels(self):
        assert status_label(make_match(), NOW) == "Scheduled"
        assert status_label(make_match(status=MatchStatus.finished), NOW) == "FT"
        assert status_label(live_first_half(30), NOW) == "30'"
        assert status_label(live_first_half(30, is_halftime=True), NOW) == "HT"

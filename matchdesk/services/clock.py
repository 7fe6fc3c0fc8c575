"""
Match clock derived from stored half-start timestamps.

Everything here is a pure function of the match snapshot and an injected
``now``; the live ticker simply calls these again on every tick.

Minute convention (shown to end users, keep stable):
- first half: whole minutes since kickoff, "0'" during the first minute;
- second half: whole minutes since the restart plus the half length;
- past the half's regulation + added time the label freezes at "45+" / "90+".
"""

import enum
from datetime import datetime

from matchdesk.models.match import MatchStatus
from matchdesk.schemas.match import MatchResponse
from matchdesk.utils.timestamps import ensure_aware

HALFTIME_LABEL = "HT"
FULLTIME_LABEL = "FT"
SCHEDULED_LABEL = "Scheduled"
LIVE_LABEL = "Live"


class MatchPhase(str, enum.Enum):
    scheduled = "scheduled"
    first_half = "first_half"
    halftime = "halftime"
    second_half = "second_half"
    finished = "finished"


def match_phase(match: MatchResponse) -> MatchPhase:
    """Derive the phase from (status, is_halftime, second_half_start)."""
    if match.status == MatchStatus.finished:
        return MatchPhase.finished
    if match.status != MatchStatus.live:
        return MatchPhase.scheduled
    if match.is_halftime:
        return MatchPhase.halftime
    if match.second_half_start is not None:
        return MatchPhase.second_half
    return MatchPhase.first_half


def half_length(match: MatchResponse) -> int:
    return (match.total_time or 90) // 2


def _whole_minutes(start: datetime, now: datetime) -> int:
    seconds = (ensure_aware(now) - ensure_aware(start)).total_seconds()
    return int(seconds // 60)


def elapsed_minutes(match: MatchResponse, now: datetime) -> int | None:
    """Raw running minute (second half already offset), None before kickoff."""
    if match.second_half_start is not None:
        return _whole_minutes(match.second_half_start, now) + half_length(match)
    if match.first_half_start is not None:
        return _whole_minutes(match.first_half_start, now)
    return None


def display_clock(match: MatchResponse, now: datetime) -> str | None:
    """
    Clock label for a live match.

    Returns:
        None unless the match is live, "HT" at halftime, "45+"/"90+" once the
        half runs past regulation plus added time, otherwise e.g. "23'".
    """
    if match.status != MatchStatus.live:
        return None
    if match.is_halftime:
        return HALFTIME_LABEL

    elapsed = elapsed_minutes(match, now)
    if elapsed is None:
        # Live without a kickoff stamp
        return "0'"

    half = half_length(match)
    if match.second_half_start is not None:
        full = match.total_time or 90
        if elapsed > full + (match.additional_time_second_half or 0):
            return f"{full}+"
    elif elapsed > half + (match.additional_time_first_half or 0):
        return f"{half}+"

    return f"{elapsed}'"


def event_minute_hint(match: MatchResponse, now: datetime) -> int:
    """
    Minute to pre-fill in the goal/card/substitution forms.

    Always positive; the ledger accepts any positive minute so officials can
    still correct it by hand.
    """
    if match.status != MatchStatus.live:
        return 1
    if match.is_halftime:
        return half_length(match)
    elapsed = elapsed_minutes(match, now)
    if elapsed is None:
        return 1
    return max(1, elapsed)


def status_label(match: MatchResponse, now: datetime) -> str:
    """Badge text: "FT", the running clock (or "Live"), or "Scheduled"."""
    if match.status == MatchStatus.finished:
        return FULLTIME_LABEL
    if match.status == MatchStatus.live:
        return display_clock(match, now) or LIVE_LABEL
    return SCHEDULED_LABEL

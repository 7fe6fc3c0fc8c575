"""
Match lifecycle: scheduled -> live (1st half) -> halftime -> live (2nd half) -> finished.

Transitions are computed here as the partial field update to persist. A
transition whose precondition does not hold returns ``None`` so the caller
can treat it as a no-op without sending anything. Nothing in this module
talks to the persistence layer.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any

from matchdesk.exceptions import MatchLocked, ValidationError
from matchdesk.models.match import MatchStatus
from matchdesk.schemas.lineup import LineupEntry
from matchdesk.schemas.match import MatchResponse
from matchdesk.utils.formations import STARTING_SLOTS

logger = logging.getLogger(__name__)


def is_locked(match: MatchResponse) -> bool:
    """A finished match rejects every further mutation."""
    return match.status == MatchStatus.finished


def ensure_unlocked(match: MatchResponse) -> None:
    if is_locked(match):
        raise MatchLocked(match.id)


def starting_counts(match: MatchResponse, entries: list[LineupEntry] | None = None) -> dict[int, int]:
    """Distinct starting players per team of the match."""
    rows = match.lineups if entries is None else entries
    seen: set[tuple[int, int]] = set()
    counts: Counter[int] = Counter()
    for entry in rows:
        if not entry.is_starting:
            continue
        key = (entry.team_id, entry.player_id)
        if key in seen:
            continue
        seen.add(key)
        counts[entry.team_id] += 1
    return {
        match.team_a_id: counts.get(match.team_a_id, 0),
        match.team_b_id: counts.get(match.team_b_id, 0),
    }


def has_full_lineups(match: MatchResponse, entries: list[LineupEntry] | None = None) -> bool:
    return all(count == STARTING_SLOTS for count in starting_counts(match, entries).values())


def ensure_kickoff_ready(match: MatchResponse) -> None:
    """Both teams need exactly 11 distinct starters before kickoff."""
    counts = starting_counts(match)
    if any(count != STARTING_SLOTS for count in counts.values()):
        logger.warning("Match %s kickoff rejected, starting counts %s", match.id, counts)
        raise ValidationError(code="lineup_incomplete")


def start(match: MatchResponse, now: datetime, *, require_lineups: bool = True) -> dict[str, Any] | None:
    """scheduled -> live, stamping the first half kickoff."""
    if match.status != MatchStatus.scheduled:
        return None
    if require_lineups:
        ensure_kickoff_ready(match)
    return {"status": MatchStatus.live, "first_half_start": now}


def set_halftime(match: MatchResponse, flag: bool) -> dict[str, Any] | None:
    if match.status != MatchStatus.live or match.is_halftime == flag:
        return None
    return {"is_halftime": flag}


def check_halftime_edit(match: MatchResponse, flag: bool) -> bool:
    """
    Whether an edited halftime flag changes the match.

    Unlike ``set_halftime`` an illegal edit is an error, not a no-op: the
    flag moves only while live, and never back to halftime once the second
    half has started.
    """
    if match.is_halftime == flag:
        return False
    if match.status != MatchStatus.live or (flag and match.second_half_start is not None):
        logger.warning("Match %s halftime edit rejected (%s)", match.id, match.status.value)
        raise ValidationError(code="halftime_not_allowed")
    return True


def start_second_half(match: MatchResponse, now: datetime) -> dict[str, Any] | None:
    """halftime -> live second half."""
    if match.status != MatchStatus.live or not match.is_halftime:
        return None
    if match.second_half_start is not None:
        return None
    return {"is_halftime": False, "second_half_start": now}


def finish(match: MatchResponse, now: datetime) -> dict[str, Any] | None:
    """Any non-finished state -> finished. Terminal."""
    if match.status == MatchStatus.finished:
        return None
    return {"status": MatchStatus.finished, "finished_at": now}

"""Two-legged knockout ties: sibling fixture lookup and aggregate score."""

import logging

from matchdesk.repositories.base import MatchRepository
from matchdesk.schemas import AggregateScore, MatchFilter, MatchResponse
from matchdesk.services.query_cache import QueryCache, other_leg_key

logger = logging.getLogger(__name__)

TWO_LEGS = 2


def is_two_legged(match: MatchResponse) -> bool:
    return bool(
        match.stage
        and match.tournament is not None
        and match.tournament.knockout_legs == TWO_LEGS
    )


def is_other_leg(match: MatchResponse, candidate: MatchResponse) -> bool:
    """Same tie: same stage, different fixture, same pair in either orientation."""
    if candidate.id == match.id or candidate.stage != match.stage:
        return False
    return {candidate.team_a_id, candidate.team_b_id} == {match.team_a_id, match.team_b_id}


def compute_aggregate(match: MatchResponse, other_leg: MatchResponse) -> AggregateScore:
    """Sum both legs per team, oriented like ``match``."""
    return AggregateScore(
        match_id=match.id,
        other_leg_id=other_leg.id,
        team_a_id=match.team_a_id,
        team_b_id=match.team_b_id,
        team_a_total=match.score_for(match.team_a_id) + other_leg.score_for(match.team_a_id),
        team_b_total=match.score_for(match.team_b_id) + other_leg.score_for(match.team_b_id),
    )


class AggregateResolver:
    def __init__(self, matches: MatchRepository, cache: QueryCache | None = None):
        self.matches = matches
        self.cache = cache or QueryCache()

    async def find_other_leg(self, match: MatchResponse) -> MatchResponse | None:
        """The paired fixture, or None when the tie is single-legged or unpaired."""
        if not is_two_legged(match):
            return None

        async def fetch() -> MatchResponse | None:
            candidates = await self.matches.list(
                MatchFilter(tournament_id=match.tournament_id, stage=match.stage)
            )
            for candidate in candidates:
                if is_other_leg(match, candidate):
                    return candidate
            logger.debug("No other leg found for match %s (stage %s)", match.id, match.stage)
            return None

        return await self.cache.get_or_fetch(other_leg_key(match.id), fetch)

    async def aggregate(self, match: MatchResponse) -> AggregateScore | None:
        other_leg = await self.find_other_leg(match)
        if other_leg is None:
            return None
        return compute_aggregate(match, other_leg)

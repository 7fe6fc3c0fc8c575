"""
API endpoints for officiating a match: lifecycle, events, lineups and live views.
"""

from fastapi import APIRouter, Depends, Query

from matchdesk.api.deps import get_officiating_service
from matchdesk.models.match import MatchStatus
from matchdesk.schemas import (
    AggregateScore,
    CardCreate,
    CardResponse,
    ClockResponse,
    GoalCreate,
    GoalResponse,
    LineupEntry,
    LineupSetRequest,
    MatchFilter,
    MatchResponse,
    MatchUpdate,
    OkResponse,
    SubstitutionCreate,
    SubstitutionResponse,
    TimelineEntry,
)
from matchdesk.services.officiating import MatchOfficiatingService


router = APIRouter(prefix="/matches", tags=["matches"])


# ==================== Match ====================


@router.get("", response_model=list[MatchResponse])
async def list_matches(
    tournament_id: int | None = None,
    stage: str | None = None,
    status: MatchStatus | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    filters = MatchFilter(
        tournament_id=tournament_id,
        stage=stage,
        status=status,
        offset=offset,
        limit=limit,
    )
    return await service.list_matches(filters)


@router.get("/{match_id}", response_model=MatchResponse)
async def get_match(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.get_match(match_id)


@router.patch("/{match_id}", response_model=MatchResponse)
async def update_match(
    match_id: int,
    data: MatchUpdate,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """Edit scores, regulation and added time, halftime flag or shootout score."""
    return await service.update_match(match_id, data)


@router.delete("/{match_id}", response_model=OkResponse)
async def delete_match(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    await service.delete_match(match_id)
    return OkResponse(ok=True)


# ==================== Lifecycle ====================


@router.post("/{match_id}/start", response_model=MatchResponse)
async def start_match(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """
    Kick off a scheduled match.

    - Requires 11 starters per team unless the kickoff gate is disabled
    - Stamps first_half_start
    """
    return await service.start(match_id)


@router.post("/{match_id}/halftime", response_model=MatchResponse)
async def set_halftime(
    match_id: int,
    active: bool = Query(default=True),
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.set_halftime(match_id, active)


@router.post("/{match_id}/second-half", response_model=MatchResponse)
async def start_second_half(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.start_second_half(match_id)


@router.post("/{match_id}/finish", response_model=MatchResponse)
async def finish_match(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """Finish the match. It is locked for further changes afterwards."""
    return await service.finish(match_id)


# ==================== Live views ====================


@router.get("/{match_id}/clock", response_model=ClockResponse)
async def get_clock(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.clock(match_id)


@router.get("/{match_id}/timeline", response_model=list[TimelineEntry])
async def get_timeline(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """Goals, cards and substitutions merged by minute."""
    return await service.timeline(match_id)


@router.get("/{match_id}/aggregate", response_model=AggregateScore | None)
async def get_aggregate(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """Two-leg aggregate, null for single-leg ties or when the other leg is missing."""
    return await service.aggregate(match_id)


# ==================== Events ====================


@router.get("/{match_id}/goals", response_model=list[GoalResponse])
async def list_goals(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.goals.list(match_id)


@router.post("/{match_id}/goals", response_model=GoalResponse, status_code=201)
async def add_goal(
    match_id: int,
    data: GoalCreate,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.goals.add(match_id, data)


@router.delete("/{match_id}/goals/{goal_id}", response_model=OkResponse)
async def delete_goal(
    match_id: int,
    goal_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    await service.goals.delete(match_id, goal_id)
    return OkResponse(ok=True)


@router.get("/{match_id}/cards", response_model=list[CardResponse])
async def list_cards(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.cards.list(match_id)


@router.post("/{match_id}/cards", response_model=CardResponse, status_code=201)
async def add_card(
    match_id: int,
    data: CardCreate,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.cards.add(match_id, data)


@router.delete("/{match_id}/cards/{card_id}", response_model=OkResponse)
async def delete_card(
    match_id: int,
    card_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    await service.cards.delete(match_id, card_id)
    return OkResponse(ok=True)


@router.get("/{match_id}/substitutions", response_model=list[SubstitutionResponse])
async def list_substitutions(
    match_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.substitutions.list(match_id)


@router.post("/{match_id}/substitutions", response_model=SubstitutionResponse, status_code=201)
async def add_substitution(
    match_id: int,
    data: SubstitutionCreate,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    return await service.substitutions.add(match_id, data)


@router.delete("/{match_id}/substitutions/{substitution_id}", response_model=OkResponse)
async def delete_substitution(
    match_id: int,
    substitution_id: int,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    await service.substitutions.delete(match_id, substitution_id)
    return OkResponse(ok=True)


# ==================== Lineups ====================


@router.put("/{match_id}/lineups", response_model=list[LineupEntry])
async def save_lineups(
    match_id: int,
    data: LineupSetRequest,
    service: MatchOfficiatingService = Depends(get_officiating_service),
):
    """Replace both teams' formations, starting slots and benches."""
    return await service.save_lineups(match_id, data)

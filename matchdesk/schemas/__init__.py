from matchdesk.schemas.common import OkResponse, ErrorResponse
from matchdesk.schemas.team import PlayerBrief, TeamRoster, TeamDetail
from matchdesk.schemas.lineup import (
    LineupEntry,
    LineupFormations,
    LineupSetRequest,
    SlotView,
    TeamLineupRequest,
)
from matchdesk.schemas.match import (
    MatchFilter,
    MatchResponse,
    MatchUpdate,
    TeamInMatch,
    TournamentBrief,
)
from matchdesk.schemas.events import (
    CardCreate,
    CardResponse,
    GoalCreate,
    GoalResponse,
    MatchEvent,
    SubstitutionCreate,
    SubstitutionResponse,
    TimelineEntry,
)
from matchdesk.schemas.live import AggregateScore, ClockResponse

__all__ = [
    "OkResponse",
    "ErrorResponse",
    "PlayerBrief",
    "TeamRoster",
    "TeamDetail",
    "LineupEntry",
    "LineupFormations",
    "LineupSetRequest",
    "SlotView",
    "TeamLineupRequest",
    "MatchFilter",
    "MatchResponse",
    "MatchUpdate",
    "TeamInMatch",
    "TournamentBrief",
    "CardCreate",
    "CardResponse",
    "GoalCreate",
    "GoalResponse",
    "MatchEvent",
    "SubstitutionCreate",
    "SubstitutionResponse",
    "TimelineEntry",
    "AggregateScore",
    "ClockResponse",
]

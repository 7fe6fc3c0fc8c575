from matchdesk.models.tournament import Tournament
from matchdesk.models.team import Team, Player
from matchdesk.models.match import Match, MatchStatus
from matchdesk.models.match_event import Goal, Card, CardType, Substitution
from matchdesk.models.match_lineup import MatchLineup

__all__ = [
    "Tournament",
    "Team",
    "Player",
    "Match",
    "MatchStatus",
    "Goal",
    "Card",
    "CardType",
    "Substitution",
    "MatchLineup",
]

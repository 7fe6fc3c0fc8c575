from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from matchdesk.config import get_settings
from matchdesk.database import get_db
from matchdesk.repositories import sql
from matchdesk.services.officiating import MatchOfficiatingService


def get_officiating_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> MatchOfficiatingService:
    """Dependency to get a MatchOfficiatingService bound to the request session.

    Pending mutations are tracked app-wide so identical concurrent requests
    coalesce even though each request gets its own service.
    """
    return MatchOfficiatingService(
        matches=sql.SqlMatchRepository(db),
        goals=sql.goal_repository(db),
        cards=sql.card_repository(db),
        substitutions=sql.substitution_repository(db),
        lineups=sql.SqlLineupRepository(db),
        teams=sql.SqlTeamService(db),
        settings=get_settings(),
        in_flight=request.app.state.in_flight_mutations,
    )


__all__ = ["get_db", "get_officiating_service"]

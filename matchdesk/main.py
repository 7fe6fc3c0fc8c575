import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from matchdesk.config import get_settings
from matchdesk.database import engine
from matchdesk.exceptions import MatchDeskError
from matchdesk.schemas.common import ErrorResponse

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="MatchDesk",
    description="Live match officiating API: clock, lifecycle, events and lineups",
    version="1.0.0",
    lifespan=lifespan,
)

# Pending mutations shared by every request-bound service
app.state.in_flight_mutations = {}

# CORS
_origins = (
    settings.allowed_origins.split(",")
    if settings.allowed_origins != "*"
    else ["*"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MatchDeskError)
async def match_desk_error_handler(request: Request, exc: MatchDeskError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    lang = request.query_params.get("lang", "en")
    body = ErrorResponse(detail=exc.localized(lang), code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Import and include routers after app is created
from matchdesk.api.router import api_router
app.include_router(api_router, prefix="/api/v1")

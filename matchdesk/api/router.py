from fastapi import APIRouter

from matchdesk.api.matches import router as matches_router

api_router = APIRouter()

# Match officiating
api_router.include_router(matches_router)

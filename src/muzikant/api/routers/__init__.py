"""API router initialization."""

# Hey future me, this is the API router aggregator. It gets mounted at /api in main.py, so the
# playlist endpoints end up at /api/playlist/{id} and /api/playlist. The OAuth and health routers
# live OUTSIDE /api (they are not for the browser front-end) and are mounted separately in main.py.

from fastapi import APIRouter

from muzikant.api.routers import health, oauth, playlists

api_router = APIRouter()

api_router.include_router(playlists.router, tags=["Playlists"])

__all__ = ["api_router", "health", "oauth", "playlists"]

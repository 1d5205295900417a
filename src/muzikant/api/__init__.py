"""API module for Muzikant.

Structure:
- routers/: HTTP endpoints (playlists under /api, oauth, health)
- schemas/: Pydantic models for request/response
- dependencies.py: pulls the lifespan-built services off app.state
- exception_handlers.py: maps domain errors to status codes
- cors.py: CORS limited to the /api prefix
"""

from muzikant.api.routers import api_router

__all__ = ["api_router"]

"""Process liveness for container health checks (HEALTHCHECK curl /health/live)."""

from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from muzikant import __version__

router = APIRouter()


class LivenessStatus(BaseModel):
    status: str = "alive"
    version: str = __version__
    checked_at: datetime


# No Spotify call here: a probe must not consume rate-limit permits.
@router.get("/live", response_model=LivenessStatus)
async def live() -> LivenessStatus:
    """Answer 200 as long as the event loop is serving requests."""
    return LivenessStatus(checked_at=datetime.now(UTC))

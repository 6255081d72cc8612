from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Response, status

from roster.core.config import settings
from roster.core.dependencies import get_current_user, get_optional_roster_service
from roster.models.auth import UserInfo
from roster.services.roster_service import RosterService

router = APIRouter(prefix="/health", tags=["health"])

_HEALTHY_STATES = ("ok", "not_configured", "not_created")


def _store_state(roster: RosterService | None) -> str:
    if roster is None:
        return "not_configured"
    return "ok" if roster.check_connection() else "error"


def _photo_state() -> str:
    # The directory is created on first upload.
    photo_dir = Path(settings.PHOTO_DIR)
    if not photo_dir.exists():
        return "not_created"
    return "ok" if photo_dir.is_dir() else "error"


@router.get("")
def health_check(roster: RosterService | None = Depends(get_optional_roster_service)):  # noqa: B008
    services = {
        "roster_store": _store_state(roster),
        "photo_storage": _photo_state(),
    }
    return {
        "status": "healthy" if all(v in _HEALTHY_STATES for v in services.values()) else "degraded",
        "version": settings.APP_VERSION,
        "backend": settings.STORE_BACKEND,
        "services": services,
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
def readiness_probe(
    response: Response,
    roster: RosterService | None = Depends(get_optional_roster_service),  # noqa: B008
):
    if roster is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"ready": False, "reason": "Roster store is not configured"}
    return {"ready": True}

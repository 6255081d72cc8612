from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Request, status

from roster.core.auth import is_allowed_editor, validate_token
from roster.core.config import settings
from roster.models.auth import UserInfo
from roster.services.actions import ActionDispatcher
from roster.services.photo_service import PhotoService
from roster.services.roster_service import RosterService

logger = logging.getLogger(__name__)

ANONYMOUS_USER = UserInfo(id="anonymous", name="Anonymous")


async def get_current_user(authorization: str | None = Header(None)) -> UserInfo:
    if not settings.AUTH_ENABLED:
        return ANONYMOUS_USER

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]

    try:
        payload = validate_token(token, settings.GOOGLE_CLIENT_ID)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return UserInfo(
        id=payload.get("sub"),
        name=payload.get("name"),
        email=payload.get("email"),
        email_verified=bool(payload.get("email_verified", False)),
    )


async def require_editor(user: UserInfo = Depends(get_current_user)) -> UserInfo:
    if settings.AUTH_ENABLED and not is_allowed_editor(user.email, settings.ALLOWED_EDITORS):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to edit the roster",
        )
    return user


def get_optional_roster_service(request: Request) -> RosterService | None:
    return getattr(request.app.state, "roster_service", None)


def get_roster_service(
    service: RosterService | None = Depends(get_optional_roster_service),
) -> RosterService:
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Roster store is not configured",
        )
    return service


def get_action_dispatcher(
    request: Request,
    roster: RosterService | None = Depends(get_optional_roster_service),
) -> ActionDispatcher | None:
    photos: PhotoService | None = getattr(request.app.state, "photo_service", None)
    if roster is None or photos is None:
        return None
    return ActionDispatcher(roster, photos)

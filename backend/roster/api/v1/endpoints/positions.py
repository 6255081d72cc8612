from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from roster.core.dependencies import get_current_user, get_roster_service
from roster.models.auth import UserInfo
from roster.models.roster import Position
from roster.services.roster_service import RosterService
from roster.storage.base import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/positions", tags=["positions"])


@router.get("", response_model=list[Position])
def list_positions(
    roster: RosterService = Depends(get_roster_service),  # noqa: B008
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        return roster.list_positions()
    except StoreError as err:
        logger.exception("Failed to list positions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve positions",
        ) from err

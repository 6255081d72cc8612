from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from roster.core.dependencies import get_current_user, get_roster_service
from roster.models.auth import UserInfo
from roster.models.employee import Employee
from roster.services.roster_service import RosterService
from roster.storage.base import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[Employee])
def list_employees(
    roster: RosterService = Depends(get_roster_service),  # noqa: B008
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        return roster.list_employees()
    except StoreError as err:
        logger.exception("Failed to list employees")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve employees",
        ) from err


@router.get("/{emp_id}", response_model=Employee)
def get_employee(
    emp_id: str,
    roster: RosterService = Depends(get_roster_service),  # noqa: B008
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    try:
        employee = roster.get_employee(emp_id)
    except StoreError as err:
        logger.exception("Failed to get employee %s", emp_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve employee",
        ) from err

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with ID '{emp_id}' not found",
        )

    return employee

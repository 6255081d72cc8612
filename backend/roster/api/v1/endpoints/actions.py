from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError

from roster.core.dependencies import get_action_dispatcher, require_editor
from roster.models.actions import ActionRequest
from roster.models.auth import UserInfo
from roster.services.actions import ActionDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["actions"])


def _invalid_request(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"Invalid action request: {loc}: {message}" if loc else f"Invalid action request: {message}"


@router.post("")
def run_action(
    body: Any = Body(None),  # noqa: B008
    dispatcher: ActionDispatcher | None = Depends(get_action_dispatcher),  # noqa: B008
    user: UserInfo = Depends(require_editor),  # noqa: B008
) -> dict[str, Any]:
    # Malformed bodies are answered with success=false, not a 422.
    try:
        request = ActionRequest.model_validate(body)
    except ValidationError as e:
        error = _invalid_request(e)
        logger.warning("%s (user=%s)", error, user.email or user.id)
        return {"success": False, "error": error}

    if dispatcher is None:
        logger.error("Action %s requested but the roster store is not available", request.action)
        return {"success": False, "error": "Roster store is not available"}

    logger.info("Action %s from user=%s", request.action, user.email or user.id)
    return dispatcher.dispatch(request.action, request.payload)

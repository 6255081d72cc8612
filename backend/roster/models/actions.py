from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ActionRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator("payload", mode="before")
    @classmethod
    def _null_payload(cls, value: Any) -> Any:
        return {} if value is None else value

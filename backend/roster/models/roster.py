"""Positions, bulk-replace results and backup metadata."""

from __future__ import annotations

from datetime import datetime

from pydantic import field_validator

from roster.core.cells import clean_text
from roster.models.employee import CamelModel

DEFAULT_ICON = "•"


class Position(CamelModel):
    name: str
    icon: str = DEFAULT_ICON

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, value: object) -> str:
        return clean_text(value)

    @field_validator("icon", mode="before")
    @classmethod
    def _default_icon(cls, value: object) -> str:
        return clean_text(value) or DEFAULT_ICON


DEFAULT_POSITIONS: tuple[Position, ...] = (
    Position(name="Bartender", icon="🍸"),
    Position(name="Server", icon="🍽️"),
    Position(name="Host", icon="🙋"),
    Position(name="Barback", icon="🧊"),
    Position(name="Cook", icon="🍳"),
    Position(name="Dishwasher", icon="🧽"),
    Position(name="Manager", icon="💼"),
    Position(name="Security", icon="🛡️"),
)


class RecordError(CamelModel):
    index: int
    message: str


class ReplaceResult(CamelModel):
    written: int
    errors: list[RecordError] = []


class BackupInfo(CamelModel):
    timestamp: datetime | None = None
    count: int = 0

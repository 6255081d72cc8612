"""Employee record as stored in one row of the roster sheet."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from roster.core.cells import clean_text, parse_bool, parse_datetime


class CamelModel(BaseModel):
    """Serializes as camelCase, accepts both camelCase and snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Employee(CamelModel):
    emp_id: str = Field(default="", validate_default=True)
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    position: str = ""
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    note: str = ""
    photo_url: str | None = None
    created_date: datetime | None = None
    last_modified: datetime | None = None
    is_manager: bool = False
    is_assistant_manager: bool = False
    is_me: bool = False

    @field_validator("emp_id", mode="before")
    @classmethod
    def _require_emp_id(cls, value: Any) -> str:
        text = clean_text(value)
        if not text:
            raise ValueError("Employee ID is required")
        return text

    @field_validator("first_name", "last_name", "phone", "email", "position", "note", mode="before")
    @classmethod
    def _trim_text(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> EmployeeStatus:
        if isinstance(value, EmployeeStatus):
            return value
        if clean_text(value).lower() == "inactive":
            return EmployeeStatus.INACTIVE
        return EmployeeStatus.ACTIVE

    @field_validator("photo_url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return clean_text(value) or None

    @field_validator("created_date", "last_modified", mode="before")
    @classmethod
    def _lenient_datetime(cls, value: Any) -> datetime | None:
        return parse_datetime(value)

    @field_validator("is_manager", "is_assistant_manager", "is_me", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return parse_bool(value)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

"""Authentication models for Google Sign-In ID tokens."""

from __future__ import annotations

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    email_verified: bool = False

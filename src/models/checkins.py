"""Pydantic models for feeling check-ins."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from src.models.base import MumtazBase


class FeelingOption(MumtazBase):
    category_id: str
    label: str


class FeelingCheckInCreate(MumtazBase):
    category_id: str = Field(min_length=1, max_length=64)
    occurred_at: datetime | None = None  # defaults to server time

    @field_validator("category_id")
    @classmethod
    def _lowercase(cls, v: str) -> str:
        return v.lower()


class FeelingCheckInRead(MumtazBase):
    id: str
    subject_id: str
    category_id: str
    label: str
    occurred_at: datetime

"""Form models, validated before anything is sent to the store."""

import math
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator


def _required(v) -> str:
    if v is None or not str(v).strip():
        raise ValueError("is required")
    return str(v).strip()


def _blank_as_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


RequiredStr = Annotated[str, BeforeValidator(_required)]
OptionalStr = Annotated[str | None, BeforeValidator(_blank_as_none)]


class GameForm(BaseModel):
    """Add or edit a game."""

    title: RequiredStr
    platform: RequiredStr
    genre: RequiredStr
    publisher: OptionalStr = None
    release_year: int | None = None

    @field_validator("release_year", mode="before")
    @classmethod
    def parse_year(cls, v):
        v = _blank_as_none(v)
        if v is None:
            return None
        try:
            return int(str(v).strip())
        except ValueError:
            raise ValueError("Must be a valid year")


class AchievementForm(BaseModel):
    """Add or edit an achievement of a game."""

    name: RequiredStr
    description: OptionalStr = None
    xp_value: int = Field(default=10, ge=0)

    @field_validator("xp_value", mode="before")
    @classmethod
    def coerce_xp(cls, v):
        # Empty number inputs count as 0
        v = _blank_as_none(v)
        if v is None:
            return 0
        try:
            xp = float(v)
        except (TypeError, ValueError):
            raise ValueError("Must be a positive number")
        if not math.isfinite(xp):
            raise ValueError("Must be a positive number")
        return int(xp)


class PlaytimeForm(BaseModel):
    """Log total hours played for a library entry."""

    hours_played: float = Field(ge=0)

    @field_validator("hours_played", mode="before")
    @classmethod
    def parse_hours(cls, v):
        try:
            hours = float(v)
        except (TypeError, ValueError):
            raise ValueError("Must be a valid number")
        # inf and nan cannot be sent as JSON
        if not math.isfinite(hours):
            raise ValueError("Must be a valid number")
        return hours


class LoginForm(BaseModel):
    email: RequiredStr
    password: RequiredStr


class SignupForm(BaseModel):
    email: RequiredStr
    password: RequiredStr
    username: RequiredStr

    @field_validator("password", mode="after")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class ProfileForm(BaseModel):
    username: RequiredStr

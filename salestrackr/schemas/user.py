"""Pydantic schemas for registration, login and the public user projection."""

from __future__ import annotations

from typing import Literal

from pydantic import EmailStr, Field, field_validator

from salestrackr.schemas.common import CamelModel


def _normalise_email(v: str) -> str:
    return v.strip().lower()


class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Literal["agent", "admin"] = "agent"

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    role: str


class UserResponse(CamelModel):
    user: UserRead
    message: str | None = None


class UserListResponse(CamelModel):
    users: list[UserRead]

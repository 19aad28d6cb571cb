# PURPOSE: plain-data schemas handed to and returned from the API and task store.

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Priority = Literal["high", "medium", "low"]
Status = Literal["pending", "completed"]

TITLE_MAX_LENGTH = 200


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    due_date: date | None = None
    priority: Priority = "medium"
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"title": "Buy milk", "priority": "low"},
                {"title": "File taxes", "due_date": "2026-04-15", "priority": "high"},
            ]
        },
    )


class TaskUpdate(BaseModel):
    """Partial edit; only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    due_date: date | None = None
    priority: Priority | None = None
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"priority": "high"},
                {"title": "New title"},
                {"description": None, "due_date": None},
            ]
        },
    )


class Task(BaseModel):
    id: str
    user_id: str
    title: str
    description: str | None
    due_date: date | None
    priority: Priority
    status: Status
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)  # ORM -> schema


# --- User / Auth schemas ---


class UserBase(BaseModel):
    email: EmailStr


class UserCreate(UserBase):
    # Raw password only in create request
    password: str = Field(min_length=1)
    name: str | None = None


class UserPublic(UserBase):
    id: str
    name: str | None = None
    model_config = ConfigDict(from_attributes=True)  # allow ORM -> schema


class TokenResponse(BaseModel):
    # Simple JWT response
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    model_config = ConfigDict(
        json_schema_extra={"examples": [{"access_token": "<jwt>", "token_type": "bearer"}]}
    )

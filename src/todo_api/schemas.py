from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shared type for incoming dueDate which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


def _parse_due_date(s: str) -> None:
    """
    Raise ValueError unless ``s`` is an ISO8601 date or datetime.

    Accepts a trailing 'Z' (as produced by JS ``Date.toISOString()``) and the
    compact date form ('20250210') on every supported interpreter.
    """
    try:
        date.fromisoformat(s)
        return
    except ValueError:
        pass
    try:
        datetime.strptime(s, "%Y%m%d")
        return
    except ValueError:
        pass
    if s[-1:] in ("Z", "z"):
        s = s[:-1] + "+00:00"
    datetime.fromisoformat(s)


def _validate_due_date(value: Optional[DueDateInput]) -> Optional[str]:
    """
    Internal helper to validate dueDate input. Strings are stored exactly as sent
    (surrounding whitespace removed); the parse only rejects malformed input.
    - Empty string is treated as absent.
    """
    if value is None:
        return None

    if isinstance(value, (date, datetime)):
        return value.isoformat()

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            _parse_due_date(s)
        except ValueError as e:
            raise ValueError(
                "Invalid dueDate format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
            ) from e
        return s

    raise ValueError("Invalid type for dueDate; expected ISO8601 string.")


# PUBLIC_INTERFACE
class SignupRequest(BaseModel):
    """
    Body of POST /signup. Presence of email/password is checked by the handler
    so the response can carry the exact 400 message.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "a@x.com", "password": "secret1", "name": "Ada"}}
    )

    email: Optional[str] = Field(default=None, description="Account email")
    password: Optional[str] = Field(default=None, description="Account password")
    name: Optional[str] = Field(default=None, description="Optional display name")


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """Body of POST /login."""

    model_config = ConfigDict(json_schema_extra={"example": {"email": "a@x.com", "password": "secret1"}})

    email: Optional[str] = Field(default=None, description="Account email")
    password: Optional[str] = Field(default=None, description="Account password")


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy Groceries",
                "description": "Get milk and bread",
                "dueDate": "2025-02-10",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    dueDate: Optional[str] = Field(
        default=None,
        description="Due date of the todo item. Accepts ISO8601 date or datetime",
    )

    @field_validator("dueDate", mode="before")
    @classmethod
    def validate_due_date(cls, v: Optional[DueDateInput]) -> Optional[str]:
        return _validate_due_date(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for PATCH /todos/{id}. ``completed`` is stored as sent, whatever its JSON type;
    when the field is absent it is left untouched.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"completed": True}})

    completed: Any = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "hL2Yx0aZ1mQw9cTnR4pE",
                "userId": "Vb8kPz3sWq0aYtR2nM1c",
                "title": "Buy Groceries",
                "description": "Get milk and bread",
                "dueDate": "2025-02-10",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-25T10:15:30.123456Z",
            }
        }
    )

    id: str = Field(..., description="Store-assigned identifier of the todo item")
    userId: str = Field(..., description="uid of the owning user")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(default="", description="Detailed description")
    dueDate: Optional[str] = Field(default=None, description="Due date as an ISO8601 string")
    completed: Any = Field(default=False, description="Completion status flag")
    createdAt: datetime = Field(..., description="Creation timestamp")
    updatedAt: datetime = Field(..., description="Last update timestamp")


class MessageOut(BaseModel):
    message: str


class TokenOut(BaseModel):
    token: str = Field(..., description="Signed ID token to send in the Authorization header")

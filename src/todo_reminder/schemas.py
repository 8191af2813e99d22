from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import TodoStatus
from .utils import TimestampInput, parse_timestamp

# JSON on the wire is camelCase; models also accept their snake_case field names
_WIRE_CONFIG = dict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class UserCreate(BaseModel):
    """
    Schema for creating a new user.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={"example": {"email": "ada@example.com", "name": "Ada"}},
    )

    email: str = Field(..., description="Contact email", min_length=1)
    name: str = Field(..., description="Display name", min_length=1)


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """
    Schema returned by the API for a user.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={
            "example": {
                "id": "0f8e7a0c-5c7e-4f7e-9d55-2b3c4d5e6f70",
                "email": "ada@example.com",
                "name": "Ada",
                "createdAt": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the user")
    email: str = Field(..., description="Contact email")
    name: str = Field(..., description="Display name")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new todo.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={
            "example": {
                "userId": "0f8e7a0c-5c7e-4f7e-9d55-2b3c4d5e6f70",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "remindAt": "2025-02-01T09:00:00Z",
            }
        },
    )

    user_id: str = Field(..., description="Owner of the todo", min_length=1)
    title: str = Field(..., description="Short title for the todo item", min_length=1)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    remind_at: Optional[datetime] = Field(
        default=None,
        description=(
            "When the reminder becomes due. Accepts ISO8601 date or datetime (dates are set to "
            "00:00 UTC, naive datetimes are read as UTC) or epoch milliseconds"
        ),
    )

    @field_validator("remind_at", mode="before")
    @classmethod
    def parse_remind_at(cls, v: Optional[TimestampInput]) -> Optional[datetime]:
        """
        Normalize remind_at from str/date/datetime/epoch ms to a UTC datetime.
        A blank string means no reminder.
        """
        if isinstance(v, str) and not v.strip():
            return None
        return parse_timestamp(v)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a todo.
    """

    model_config = ConfigDict(
        **_WIRE_CONFIG,
        json_schema_extra={
            "example": {
                "id": "6a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d",
                "userId": "0f8e7a0c-5c7e-4f7e-9d55-2b3c4d5e6f70",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "status": "PENDING",
                "remindAt": "2025-02-01T09:00:00Z",
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo")
    user_id: str = Field(..., description="Owner of the todo")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: TodoStatus = Field(..., description="PENDING, REMINDER_DUE or DONE")
    remind_at: Optional[datetime] = Field(default=None, description="Reminder timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

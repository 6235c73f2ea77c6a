from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 200


def _clean_title(value: str) -> str:
    s = value.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


def _clean_email(value: str) -> str:
    s = value.strip().lower()
    if "@" not in s or s.startswith("@") or s.endswith("@"):
        raise ValueError("email must look like name@domain")
    return s


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a task. The owner always comes from the caller's
    identity, so it is not accepted here.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy milk"}})

    title: str = Field(..., description="Short title for the task", min_length=1)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)


class TaskPatch(BaseModel):
    """
    Partial change applied by a store's update(). Only fields that are set are
    written.
    """

    title: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _clean_title(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "5f0c1d6e9a2b4c7e8f9a0b1c2d3e4f50",
                "owner_id": "0a1b2c3d4e5f60718293a4b5c6d7e8f9",
                "title": "Buy milk",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-25T10:15:30.123456Z",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the task")
    owner_id: str = Field(..., description="Id of the user who owns the task")
    title: str = Field(..., description="Short title for the task")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class ProfileOut(BaseModel):
    """The caller's own profile."""

    id: str
    name: str
    email: str


# PUBLIC_INTERFACE
class ProfileUpdate(BaseModel):
    """
    Schema for updating the caller's profile.
    Absent or blank fields are left unchanged rather than cleared.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Ada Lovelace", "email": "ada@example.com"}}
    )

    name: Optional[str] = Field(default=None, max_length=100, description="New display name")
    email: Optional[str] = Field(default=None, max_length=254, description="New account email")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        # blank means "keep the current email"
        if v is None or not v.strip():
            return v
        return _clean_email(v)

    def changes(self) -> dict:
        """Return only the fields that carry a non-blank value, trimmed."""
        out = {}
        if self.name is not None and self.name.strip():
            out["name"] = self.name.strip()
        if self.email is not None and self.email.strip():
            out["email"] = self.email.strip().lower()
        return out


# PUBLIC_INTERFACE
class ProfileUpdated(BaseModel):
    """Response of a profile update."""

    name: str
    email: str


# PUBLIC_INTERFACE
class RegisterRequest(BaseModel):
    """Sign up request body."""

    name: str = Field(default="", max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _clean_email(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """Sign in request body."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# PUBLIC_INTERFACE
class AuthResponse(BaseModel):
    """Identity record returned by register/login; the client keeps it as its session."""

    id: str
    name: str
    email: str
    token: str


class MessageOut(BaseModel):
    message: str

"""Request and response schemas for the user API."""

import re
from datetime import datetime
from typing import List

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from .models.user import Role
from .password_policy import check_password
from .security import MAX_BCRYPT_BYTES

PHONE_PATTERN = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,4}[-\s.]?[0-9]{1,9}$")
ROLE_VALUES = [role.value for role in Role]


def enforce_password_policy(password: str) -> str:
    """Raise a validation error naming the first rule the password breaks."""
    failures = check_password(password).failed_messages()
    if failures:
        raise PydanticCustomError("password_policy", failures[0])
    if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        raise PydanticCustomError(
            "password_too_long", f"Password must be at most {MAX_BCRYPT_BYTES} bytes"
        )
    return password


class UserUpdate(BaseModel):
    """Request body for updating a user.

    Every field is checked independently so a rejected request reports all
    of its violations at once. A missing or blank password keeps the stored
    hash.
    """

    name: str
    email: str
    password: str | None = None
    role: Role = Role.USER
    phone: str | None = None
    skills: List[str]

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise PydanticCustomError("name_length", "Name must be at least 2 characters")
        return value

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("email", "Invalid email address") from None
        return value

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return enforce_password_policy(value)

    @field_validator("role", mode="before")
    @classmethod
    def check_role(cls, value):
        if value not in ROLE_VALUES:
            raise PydanticCustomError("role", "Invalid role")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not PHONE_PATTERN.match(value):
            raise PydanticCustomError("phone", "Invalid phone number format")
        return value

    @field_validator("skills", mode="before")
    @classmethod
    def check_skills(cls, value):
        if not isinstance(value, list):
            raise PydanticCustomError("skills", "Skills must be an array")
        return value


class UserCreate(UserUpdate):
    """Request body for registering a new user; the password is required."""

    password: str

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str) -> str:
        return enforce_password_policy(value)


class UserResponse(BaseModel):
    """Serialized user record; the password hash is never part of it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None = None
    role: Role
    skills: List[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MessageResponse(BaseModel):
    message: str

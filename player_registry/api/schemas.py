"""
Request schemas for the registry API.
Field names are snake_case in Python and camelCase on the wire.
RegistrationRequest is the authoritative server-side field validator; pass
context={"today": date} to evaluate the age rule against a fixed day.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from player_registry import config
from player_registry.core.errors import SchemaValidationError
from player_registry.core.validation import (
    MIN_PASSWORD_LENGTH,
    BattingOrder,
    BattingStyle,
    BowlingArm,
    BowlingStyle,
    Gender,
    Role,
    is_age_allowed,
    is_valid_email,
    is_valid_phone,
    validate_username,
)

# Trimmed before validation (passwords are taken verbatim)
_TRIMMED_FIELDS = (
    "first_name",
    "middle_name",
    "last_name",
    "gender",
    "email",
    "phone",
    "street_address",
    "city",
    "state",
    "postal_code",
    "country",
    "primary_sport",
    "role",
    "batting_order_preference",
    "bowling_style",
    "batting_style",
    "bowling_arm",
    "username",
    "client_random",
)


class RegistrationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # Personal
    first_name: str = Field(..., min_length=1, max_length=50)
    middle_name: str | None = Field(None, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    date_of_birth: date
    gender: Gender

    # Contact
    email: str = Field(..., max_length=255)
    phone: str

    # Address
    street_address: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    postal_code: str = Field(..., min_length=1, max_length=10)
    country: str = Field(config.DEFAULT_COUNTRY, max_length=50)

    # Sports profile
    primary_sport: str = Field(config.DEFAULT_PRIMARY_SPORT, max_length=30)
    role: Role
    batting_order_preference: BattingOrder
    bowling_style: BowlingStyle = "None"
    batting_style: BattingStyle
    bowling_arm: BowlingArm | None = None

    # Account
    username: str
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    # Client metadata (debugging only, never verified)
    client_timestamp: int | None = None
    client_random: str | None = Field(None, max_length=64)

    @field_validator(*_TRIMMED_FIELDS, mode="before")
    @classmethod
    def _trim(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("middle_name", "bowling_arm", "client_random", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("country", "primary_sport", "bowling_style", mode="before")
    @classmethod
    def _blank_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("gender", "email", mode="before")
    @classmethod
    def _lowercase(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _date_part(cls, v: Any) -> Any:
        # Accept full ISO timestamps from date pickers; only the day matters
        if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
            return v[:10]
        return v

    @field_validator("date_of_birth")
    @classmethod
    def _age_in_range(cls, v: date, info: ValidationInfo) -> date:
        today = (info.context or {}).get("today") or date.today()
        if not is_age_allowed(v, today):
            raise ValueError(f"Age must be between {config.MIN_AGE} and {config.MAX_AGE} years")
        return v

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("Please enter a valid phone number")
        return v

    @field_validator("username")
    @classmethod
    def _username_format(cls, v: str) -> str:
        if not validate_username(v):
            raise ValueError("Username must be 3-30 characters and contain only letters, numbers, and underscores")
        return v


class LoginRequest(BaseModel):
    login: str  # username or email
    password: str


def _error_message(err: dict[str, Any]) -> str:
    msg = err.get("msg", "Invalid value")
    prefix = "Value error, "
    if msg.startswith(prefix):
        msg = msg[len(prefix):]
    return msg


def parse_registration(data: dict[str, Any], today: date | None = None) -> RegistrationRequest:
    """Validate a raw body; every failing field is reported in one SchemaValidationError."""
    try:
        return RegistrationRequest.model_validate(data, context={"today": today or date.today()})
    except ValidationError as exc:
        errors = []
        for err in exc.errors():
            loc = err.get("loc") or ("body",)
            errors.append({"field": str(loc[0]), "message": _error_message(err)})
        raise SchemaValidationError(errors) from exc

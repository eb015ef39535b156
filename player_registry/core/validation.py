"""
Registration field rules shared by the request schema and the store.
The browser form mirrors these rules for early feedback; the server copy here
is the authoritative one.
"""

import re
from datetime import date
from typing import Any, Literal, Mapping, get_args

from player_registry import config

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Phone: 10-15 characters in total, optional leading +
PHONE_PATTERN = re.compile(r"^(?=.{10,15}$)[+]?[\d\s\-()]+$")
# Username: alphanumeric and underscore only, 3-30 chars
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,30}$")
MIN_PASSWORD_LENGTH = 6

Gender = Literal["male", "female", "other"]
Role = Literal["Batsman", "Bowler", "All Rounder", "Keeper Batsman"]
BattingOrder = Literal["Opening", "Top Order", "Middle Order", "Lower Order"]
BowlingStyle = Literal["Fast", "Medium", "Spin", "None"]
BattingStyle = Literal["Right Handed Bat", "Left Handed Bat"]
BowlingArm = Literal["Right-arm Fast", "Left-arm Fast", "Right-arm Spin", "Left-arm Spin"]
Status = Literal["Active", "Inactive", "Suspended", "Pending"]

GENDERS = get_args(Gender)
ROLES = get_args(Role)
BATTING_ORDERS = get_args(BattingOrder)
BOWLING_STYLES = get_args(BowlingStyle)
BATTING_STYLES = get_args(BattingStyle)
BOWLING_ARMS = get_args(BowlingArm)
STATUSES = get_args(Status)

# Wire names, in form order
REQUIRED_FIELDS = (
    "firstName",
    "lastName",
    "dateOfBirth",
    "gender",
    "email",
    "phone",
    "streetAddress",
    "city",
    "state",
    "postalCode",
    "role",
    "battingOrderPreference",
    "battingStyle",
    "username",
    "password",
)


def find_missing_fields(data: Mapping[str, Any]) -> list[str]:
    """Every required field that is absent, null or blank. Never stops at the first."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def calculate_age(date_of_birth: date, today: date) -> int:
    """Completed years between date_of_birth and today.

    Counted by calendar birthdays rather than days / 365.25: the day-based
    approximation rejects some exact 10th birthdays (spans holding only two
    leap days), and a player must be accepted on that day.
    """
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def is_age_allowed(date_of_birth: date, today: date) -> bool:
    return config.MIN_AGE <= calculate_age(date_of_birth, today) <= config.MAX_AGE


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone))


def validate_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.match(username))


def full_name(first_name: str, last_name: str, middle_name: str | None = None) -> str:
    parts = [first_name]
    if middle_name:
        parts.append(middle_name)
    parts.append(last_name)
    return " ".join(parts)

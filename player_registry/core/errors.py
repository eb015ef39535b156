"""
Error kinds raised while registering or reading players.
Each carries the HTTP status it maps to and renders its own JSON body, so the
API layer can handle them all in one exception handler.
"""

from typing import Any

# Wire name -> label used in duplicate messages
FIELD_LABELS = {
    "playerId": "Player ID",
    "userId": "User ID",
    "sequenceNumber": "Sequence number",
    "email": "Email",
    "username": "Username",
    "phone": "Phone",
}


class RegistrationError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class MissingFieldError(RegistrationError):
    """One or more required fields are absent or blank. Lists all of them."""
    status_code = 400

    def __init__(self, fields: list[str]):
        super().__init__("Missing required fields")
        self.fields = list(fields)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "missingFields": self.fields}


class SchemaValidationError(RegistrationError):
    """Fields that fail a format, length, enum or range rule."""
    status_code = 400

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__("Validation error")
        self.errors = errors  # [{"field": ..., "message": ...}]

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors]

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "errors": self.errors}


class DuplicateKeyError(RegistrationError):
    """A unique field (email, username, phone, playerId, userId) is already taken."""
    status_code = 400

    def __init__(self, field: str):
        label = FIELD_LABELS.get(field, field[:1].upper() + field[1:])
        super().__init__(f"{label} already exists. Please try again.")
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field}


class IdGenerationError(RegistrationError):
    """Sequence allocation failed or the user id retry budget ran out."""
    status_code = 500


class StorageUnavailableError(RegistrationError):
    """The database could not be reached or timed out."""
    status_code = 500


class AuthenticationError(RegistrationError):
    status_code = 401


class AccountInactiveError(RegistrationError):
    """Login refused because the player is not Active."""
    status_code = 403

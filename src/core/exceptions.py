"""
Domain errors raised by the settings services.

Each carries the HTTP status and the user-facing message; the handlers in
src/api/main.py render them into the standard response envelope.
"""
from fastapi import status


class SettingsError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(SettingsError):
    default_message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailure":
        return cls({field: [message]}, message)


class NotFound(SettingsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class Expired(SettingsError):
    default_message = "Verification token has expired. Please request a new one."


class InvalidToken(SettingsError):
    default_message = "Invalid verification token."

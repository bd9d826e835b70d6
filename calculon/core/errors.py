# calculon/core/errors.py
from typing import Dict, Union


class TrackerError(Exception):
    """Base class for every error an operation reports back to the user."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: Union[str, None] = None):
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class FormValidationError(TrackerError):
    """A form failed validation. `fields` maps field name -> message."""

    user_message = "Please check the form and try again."

    def __init__(self, fields: Dict[str, str]):
        self.fields = fields
        details = "; ".join(f"{name}: {msg}" for name, msg in fields.items())
        super().__init__(details or None)


class AuthenticationError(TrackerError):
    user_message = "You must be logged in to do that."


class StorageError(TrackerError):
    user_message = "Could not reach the server. Please try again later."


class ConflictError(StorageError):
    user_message = "This record already exists."


class NotFoundError(TrackerError):
    user_message = "Not found."


class RateLimitError(TrackerError):
    user_message = "Too many expenses added. Please wait a minute."

"""Domain exceptions for MekarPad.

Every error carries the HTTP status it maps to and, where a browser client
should be sent somewhere else, a ``location`` hint. main.py renders them all
through a single exception handler.
"""

from typing import Dict, List, Optional


class MekarPadError(Exception):
    """Base exception for MekarPad"""

    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None, location: Optional[str] = None):
        self.message = message or self.default_message
        self.location = location
        super().__init__(self.message)

    def to_dict(self) -> Dict:
        payload = {
            "status": "error",
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.location:
            payload["location"] = self.location
        return payload


class ConfigError(MekarPadError):
    """Configuration error"""
    status_code = 500


class ValidationError(MekarPadError):
    """Caller-correctable input error. No mutation was performed."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None,
                 location: Optional[str] = None):
        self.errors = errors
        super().__init__(message or "; ".join(self.full_messages()) or None, location=location)

    def full_messages(self) -> List[str]:
        return [f"{field.capitalize()} {msg}" for field, msgs in self.errors.items() for msg in msgs]

    def to_dict(self) -> Dict:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class EmptyEmail(ValidationError):
    def __init__(self):
        super().__init__({"email": ["can't be blank"]},
                         message="Please enter your email address",
                         location="/session/new")


class InvalidEmailFormat(ValidationError):
    def __init__(self):
        super().__init__({"email": ["is invalid"]},
                         message="Invalid email address",
                         location="/session/new")


class Unauthenticated(MekarPadError):
    status_code = 401
    default_message = "You must be signed in to perform this action."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, location="/session/new")


class Forbidden(MekarPadError):
    status_code = 403
    default_message = "You are not authorized to perform this action."


class NotFound(MekarPadError):
    status_code = 404
    default_message = "Not found"


class SessionExpired(MekarPadError):
    """No pending sign-in, or it points at an account that no longer exists."""

    status_code = 401
    default_message = "Session expired. Please sign in again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, location="/session/new")


class InvalidCode(MekarPadError):
    status_code = 401
    default_message = "Invalid verification code. Please check and try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, location="/session/verify")


class ExpiredCode(MekarPadError):
    status_code = 401
    default_message = "Your verification code has expired. Please request a new one below."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, location="/session/verify")

"""
Application-level exceptions.

Configuration errors are fatal. Identity errors carry one of a small fixed
set of codes which callers turn into user-facing strings with user_message().
"""

from typing import Dict


class VendorGateError(Exception):
    """Base class for all VendorGate errors."""


class ConfigurationError(VendorGateError):
    """A required setting (e.g. the model API key) is missing."""


class SessionNotFound(VendorGateError, LookupError):
    """No pending signup session exists for the given id."""


class InvalidTransition(VendorGateError):
    """An account gate operation was attempted from the wrong state."""


class NoDocumentsSubmitted(VendorGateError, ValueError):
    """A document submission carried no files."""


class DocumentProcessingError(VendorGateError):
    """The upload pipeline failed outside of the model call."""

    user_message = "Failed to process documents. Please try again."


AUTH_MESSAGES: Dict[str, str] = {
    "email-already-in-use": "An account with this email already exists.",
    "weak-password": "Password should be at least 6 characters.",
    "invalid-email": "Please enter a valid email address.",
    "user-disabled": "This account has been disabled.",
    "network-request-failed": "Network error. Please check your connection and try again.",
    "invalid-credential": "Invalid email or password.",
}


def user_message(code: str) -> str:
    return AUTH_MESSAGES.get(code, "Something went wrong. Please try again.")


class AuthError(VendorGateError):
    """Identity provider failure with a fixed error code."""

    def __init__(self, code: str, detail: str = ""):
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: {detail}" if detail else code)

    @property
    def user_message(self) -> str:
        return user_message(self.code)

# src/registry/core/errors.py
from typing import Optional


class RegistryError(Exception):
    """Base class for errors surfaced to API clients with a stable code."""

    status_code = 500
    code = "internal_error"
    message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(RegistryError):
    status_code = 400
    code = "validation_error"
    message = "Invalid submission"

    def __init__(self, message: Optional[str] = None, fields: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.fields:
            payload["fields"] = self.fields
        return payload


class DuplicateEntry(RegistryError):
    status_code = 400
    code = "duplicate_entry"
    message = "Duplicate entry"


class AuthError(RegistryError):
    status_code = 401
    code = "invalid_or_expired_token"
    message = "Invalid or expired token"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


class PasswordChangeRequired(RegistryError):
    status_code = 403
    code = "password_change_required"
    message = "Password change required before accessing admin data"


class NotFound(RegistryError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class StoreError(RegistryError):
    # message stays opaque, details go to the log only
    status_code = 500
    code = "store_error"
    message = "Database error"

"""Domain errors.

Every error is an ``HTTPException`` with a structured ``detail`` so services can
raise them directly and the app-level handler renders the standard envelope
(``{"code", "message"}``).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException


class AppError(HTTPException):
    status_code = 400
    code = "APP_ERROR"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        detail: Dict[str, Any] = {"code": self.code, "message": self.message}
        if details:
            detail["details"] = details
        super().__init__(status_code=self.status_code, detail=detail)

    def __str__(self) -> str:
        return self.message


# ----- validation -----

class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class SelfReferenceError(ValidationError):
    code = "SELF_REFERENCE"
    default_message = "Cannot send friend request to yourself"


# ----- lookup -----

class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


# ----- auth -----

class AuthError(AppError):
    status_code = 401
    code = "AUTH_ERROR"
    default_message = "Not authenticated"


class InvalidCredentialsError(AuthError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class PermissionDeniedError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Not allowed"


# ----- conflicting state -----

class ConflictError(AppError):
    status_code = 400
    code = "CONFLICT"
    default_message = "Conflicting state"


class DuplicateUsernameError(ConflictError):
    code = "DUPLICATE_USERNAME"
    default_message = "Username already exists"


class AlreadyFriendsError(ConflictError):
    code = "ALREADY_FRIENDS"
    default_message = "Already friends"


class DuplicateRequestError(ConflictError):
    code = "DUPLICATE_REQUEST"
    default_message = "Friend request already sent"


class ReverseRequestExistsError(ConflictError):
    code = "REVERSE_REQUEST_EXISTS"
    default_message = "User has sent you a request"


class NoSuchRequestError(ConflictError):
    code = "NO_SUCH_REQUEST"
    default_message = "No friend request between these users"


# ----- configuration -----

class ConfigurationError(AppError):
    status_code = 400
    code = "CONFIGURATION_ERROR"
    default_message = "Invalid configuration"


class InvalidExamConfigurationError(ConfigurationError):
    code = "INVALID_EXAM_CONFIGURATION"
    default_message = "Exam total points must be greater than zero"

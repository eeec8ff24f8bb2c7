"""
core/errors.py -- Application error taxonomy.

Every error a handler reports to a client is one of these. api/main.py maps
them onto the ErrorResponse envelope with a single exception handler, so route
code raises and never builds error responses by hand.

  AuthError        401  missing / invalid / expired token
  ValidationError  400  short password, bad field
  ConflictError    400  duplicate email or id
  InvalidCredentialsError  400  unknown email or wrong password at login
  NotFoundError    404  missing resource or ownership mismatch
  InternalError    500  storage failure (detail logged server-side only)

Layer rule: core/ is the kernel. No imports from api/, auth/, or todos/.
"""

from __future__ import annotations


class TodoAppError(Exception):
    """Base class for errors rendered as an HTTP error envelope."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class AuthError(TodoAppError):
    status_code = 401
    code = "unauthorized"


class ValidationError(TodoAppError):
    status_code = 400
    code = "validation_error"


class ConflictError(TodoAppError):
    # Duplicates are 400, not 409.
    status_code = 400
    code = "conflict"


class InvalidCredentialsError(TodoAppError):
    # Login failures are 400, not 401: no token was presented.
    status_code = 400
    code = "bad_credentials"


class NotFoundError(TodoAppError):
    status_code = 404
    code = "not_found"


class InternalError(TodoAppError):
    status_code = 500
    code = "internal_error"

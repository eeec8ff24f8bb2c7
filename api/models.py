"""
API request and response models for the Todo API REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
todos/models.py, which own the internal domain representation. Route handlers
map between the two.

Password length rules are split: the minimum (MIN_PASSWORD_LENGTH)
is checked in the route so a short password gets the documented 400 rather
than a 422, while the 72-byte bcrypt ceiling is a schema constraint.
"""

from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from auth.passwords import MAX_PASSWORD_BYTES
from todos.models import Todo

# ---------------------------------------------------------------------------
# Constrained field types
# ---------------------------------------------------------------------------


def _within_bcrypt_limit(value: str) -> str:
    """Reject passwords bcrypt cannot hash (over 72 UTF-8 bytes)."""
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


_Password = Annotated[str, AfterValidator(_within_bcrypt_limit)]
_Identifier = Annotated[str, Field(min_length=1, max_length=64)]
_Label = Annotated[str, Field(min_length=1, max_length=32)]


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every exception handler."""

    error: ErrorDetail


class MessageResponse(BaseModel):
    """Success body for routes that only confirm an action."""

    message: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /register/.

    No whitespace stripping: leading and trailing spaces are part of a password.
    """

    id: _Identifier
    username: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: _Password


class LoginRequest(BaseModel):
    """Request body for POST /login/."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(max_length=255)


class LoginResponse(BaseModel):
    """Response for POST /login/. Serialized with jwtToken as the key."""

    model_config = ConfigDict(populate_by_name=True)

    jwt_token: str = Field(serialization_alias="jwtToken")
    token_type: str = "bearer"
    expires_in: int


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


class TodoCreate(BaseModel):
    """Request body for POST /todos/."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: _Identifier
    title: str = Field(min_length=1, max_length=500)
    priority: _Label
    status: _Label
    category: Annotated[str, Field(min_length=1, max_length=64)]


class TodoUpdate(BaseModel):
    """Request body for PUT /todos/{todo_id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=500)
    priority: _Label
    status: _Label
    category: Annotated[str, Field(min_length=1, max_length=64)]


class TodoStatusUpdate(BaseModel):
    """Request body for PATCH /todos/{todo_id}/status."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: _Label


class TodoResponse(BaseModel):
    """One todo item as returned by GET /todos/."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    priority: str
    status: str
    category: str

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoResponse":
        return cls(
            id=todo.id,
            user_id=todo.user_id,
            title=todo.title,
            priority=todo.priority,
            status=todo.status,
            category=todo.category,
        )


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class ProfileResponse(BaseModel):
    """Response for GET /profile/. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str


class ProfileUpdate(BaseModel):
    """Request body for PUT /profile/. Omit password to keep the current one."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: Optional[_Password] = None

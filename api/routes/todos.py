"""
api/routes/todos.py -- Todo CRUD routes.

Routes:
  GET    /todos/                   -- list the caller's todos
  POST   /todos/                   -- create a todo owned by the caller
  PUT    /todos/{todo_id}          -- replace title/priority/status/category
  DELETE /todos/{todo_id}          -- delete
  PATCH  /todos/{todo_id}/status   -- change status only

Every route requires a bearer token (router-level dependency). The owner is
always the token's user_id; a client can never name another owner. Updates
and deletes pass (todo_id, user_id) to the store together, so touching
someone else's todo yields the same 404 as a missing one.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from api.models import MessageResponse, TodoCreate, TodoResponse, TodoStatusUpdate, TodoUpdate
from auth.dependencies import get_current_identity
from auth.models import Identity
from core.errors import ConflictError, InternalError, NotFoundError
from todos.models import Todo
from todos.store import TodoStore

logger = logging.getLogger("todoapi.api")

router = APIRouter(dependencies=[Depends(get_current_identity)])

_TODO_NOT_FOUND = "Todo Not Found"


@router.get("/todos/", response_model=list[TodoResponse])
def list_todos(request: Request, identity: Identity = Depends(get_current_identity)) -> list[TodoResponse]:
    """Return every todo owned by the caller."""
    store: TodoStore = request.app.state.todo_store
    return [TodoResponse.from_todo(t) for t in store.list_for_user(identity.user_id)]


@router.post("/todos/", response_model=MessageResponse, status_code=201)
def create_todo(
    request: Request,
    body: TodoCreate,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Add a todo for the caller.

    404 if the caller's account no longer exists (token outlived the user),
    400 if the todo id is taken, 500 on any other storage failure.
    """
    store: TodoStore = request.app.state.todo_store
    todo = Todo(
        id=body.id,
        user_id=identity.user_id,
        title=body.title,
        priority=body.priority,
        status=body.status,
        category=body.category,
    )
    try:
        created = store.create_todo(todo)
    except IntegrityError as exc:
        raise ConflictError("Todo already exists", code="todo_exists") from exc
    except SQLAlchemyError as exc:
        logger.exception("Error adding todo %s for user %s", todo.id, identity.user_id)
        raise InternalError("Error adding todo") from exc

    if not created:
        raise NotFoundError("User Not Found", code="user_not_found")
    return MessageResponse(message="Todo Successfully Added")


@router.put("/todos/{todo_id}", response_model=MessageResponse)
def update_todo(
    request: Request,
    todo_id: str,
    body: TodoUpdate,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Replace the editable fields of one of the caller's todos."""
    store: TodoStore = request.app.state.todo_store
    updated = store.update_todo(
        todo_id,
        identity.user_id,
        title=body.title,
        priority=body.priority,
        status=body.status,
        category=body.category,
    )
    if not updated:
        raise NotFoundError(_TODO_NOT_FOUND)
    return MessageResponse(message="Todo Successfully Updated")


@router.delete("/todos/{todo_id}", response_model=MessageResponse)
def delete_todo(
    request: Request,
    todo_id: str,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Delete one of the caller's todos."""
    store: TodoStore = request.app.state.todo_store
    if not store.delete_todo(todo_id, identity.user_id):
        raise NotFoundError(_TODO_NOT_FOUND)
    return MessageResponse(message="Todo Successfully Deleted")


@router.patch("/todos/{todo_id}/status", response_model=MessageResponse)
def update_todo_status(
    request: Request,
    todo_id: str,
    body: TodoStatusUpdate,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Change only the status of one of the caller's todos."""
    store: TodoStore = request.app.state.todo_store
    if not store.update_status(todo_id, identity.user_id, body.status):
        raise NotFoundError(_TODO_NOT_FOUND)
    return MessageResponse(message="Todo Status Updated Successfully")

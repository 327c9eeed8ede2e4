from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ..auth import get_current_user_id
from ..repositories import TodoRepository
from ..schemas import MessageOut, TodoCreate, TodoOut, TodoUpdate
from ..services import get_todo_repository

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    responses={401: {"description": "Missing or invalid token"}},
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item owned by the caller and return it with its id.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Title is required or dueDate is malformed"},
        500: {"description": "Document store failure"},
    },
)
def create_todo(
    payload: Optional[TodoCreate] = None,
    user_id: str = Depends(get_current_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoOut:
    payload = payload or TodoCreate()
    created = repo.create(user_id, payload.title, payload.description, payload.dueDate)
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every Todo owned by the caller. No pagination or ordering is applied.",
    responses={
        200: {"description": "List retrieved successfully"},
        500: {"description": "Document store failure"},
    },
)
def list_todos(
    user_id: str = Depends(get_current_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
) -> List[TodoOut]:
    return [TodoOut(**item) for item in repo.list_for_user(user_id)]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Delete Todo",
    description="Delete a Todo owned by the caller.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found or unauthorized"},
        500: {"description": "Document store failure"},
    },
)
def delete_todo(
    todo_id: str,
    user_id: str = Depends(get_current_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
) -> MessageOut:
    repo.delete(todo_id, user_id)
    return MessageOut(message="Todo deleted successfully")


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Update Todo",
    description="Set the completed flag of a Todo owned by the caller and refresh updatedAt.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found or unauthorized"},
        500: {"description": "Document store failure"},
    },
)
def patch_todo(
    todo_id: str,
    payload: Optional[TodoUpdate] = None,
    user_id: str = Depends(get_current_user_id),
    repo: TodoRepository = Depends(get_todo_repository),
) -> MessageOut:
    # Absent fields are not written; a missing body only refreshes updatedAt
    changes = payload.model_dump(exclude_unset=True) if payload is not None else {}
    repo.update(todo_id, user_id, changes)
    return MessageOut(message="Todo updated successfully")

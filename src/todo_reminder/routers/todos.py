from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_todo_service
from ..schemas import TodoCreate, TodoOut
from ..service import TodoService

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new PENDING todo for an existing user and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Validation error"},
        404: {"description": "User not found"},
    },
)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Create a new todo.
    """
    created = service.create_todo(
        payload.user_id,
        payload.title,
        description=payload.description,
        remind_at=payload.remind_at,
    )
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description=(
        "List all todos of a user in creation order, regardless of status.\n\n"
        "An unknown userId yields an empty list."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "userId query parameter missing"},
    },
)
def list_todos(
    user_id: str = Query(..., alias="userId", min_length=1, description="Owner of the todos"),
    service: TodoService = Depends(get_todo_service),
) -> List[TodoOut]:
    return [TodoOut(**t) for t in service.get_todos_by_user(user_id)]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single todo by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
    },
)
def get_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Retrieve a single todo by its ID.
    """
    return TodoOut(**service.get_todo(todo_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/complete",
    response_model=TodoOut,
    summary="Complete Todo",
    description="Mark a todo as DONE. Completing a DONE todo returns it unchanged.",
    responses={
        200: {"description": "Todo completed"},
        404: {"description": "Todo not found"},
    },
)
def complete_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    return TodoOut(**service.complete_todo(todo_id))

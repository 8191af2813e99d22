from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ..dependencies import get_todo_service
from ..schemas import UserCreate, UserOut
from ..service import TodoService

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create a new user and return the created resource.",
    responses={
        201: {"description": "User created successfully"},
        400: {"description": "Email or name missing"},
    },
)
def create_user(payload: UserCreate, service: TodoService = Depends(get_todo_service)) -> UserOut:
    """
    Create a new user.
    """
    created = service.create_user(payload.email, payload.name)
    return UserOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserOut],
    summary="List Users",
    description="List all users in creation order.",
)
def list_users(service: TodoService = Depends(get_todo_service)) -> List[UserOut]:
    return [UserOut(**u) for u in service.list_users()]


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserOut,
    summary="Get User",
    description="Get a single user by ID.",
    responses={
        200: {"description": "User found"},
        404: {"description": "User not found"},
    },
)
def get_user(user_id: str, service: TodoService = Depends(get_todo_service)) -> UserOut:
    return UserOut(**service.get_user(user_id))

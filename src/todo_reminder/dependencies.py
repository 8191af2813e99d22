from __future__ import annotations

from fastapi import Request

from .service import TodoService


# PUBLIC_INTERFACE
def get_todo_service(request: Request) -> TodoService:
    """Return the TodoService owned by the running application (see main.create_app)."""
    return request.app.state.todo_service

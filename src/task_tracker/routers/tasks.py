from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, status

from ..auth import AuthContext, get_auth_context
from ..schemas import MessageOut, TaskCreate, TaskOut
from ..services import TaskService

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def _get_service(request: Request) -> TaskService:
    """
    Dependency building the task service over the app's configured store.
    """
    return TaskService(request.app.state.stores.tasks)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task owned by the caller.",
    responses={
        201: {"description": "Task created successfully"},
        401: {"description": "Not authenticated"},
        422: {"description": "Validation error"},
    },
)
def create_task(
    payload: TaskCreate,
    ctx: AuthContext = Depends(get_auth_context),
    service: TaskService = Depends(_get_service),
) -> TaskOut:
    """
    Create a new task for the authenticated user.
    """
    created = service.create_task(ctx, payload.title)
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="List the caller's tasks, newest first.",
    responses={
        200: {"description": "List retrieved successfully"},
        401: {"description": "Not authenticated"},
    },
)
def list_tasks(
    ctx: AuthContext = Depends(get_auth_context),
    service: TaskService = Depends(_get_service),
) -> List[TaskOut]:
    return [TaskOut(**t) for t in service.list_tasks(ctx)]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Toggle Task",
    description=(
        "Flip the completion status of a task. Any request body is ignored; "
        "the server decides the new value."
    ),
    responses={
        200: {"description": "Task toggled"},
        401: {"description": "Not authenticated"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
    },
)
def toggle_task(
    task_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    service: TaskService = Depends(_get_service),
) -> TaskOut:
    return TaskOut(**service.toggle_task(ctx, task_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageOut,
    summary="Delete Task",
    description="Delete one of the caller's tasks.",
    responses={
        200: {"description": "Task deleted"},
        401: {"description": "Not authenticated"},
        403: {"description": "Task belongs to another user"},
        404: {"description": "Task not found"},
    },
)
def delete_task(
    task_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    service: TaskService = Depends(_get_service),
) -> MessageOut:
    """
    Delete a task. Deleting a missing task or someone else's task fails.
    """
    service.delete_task(ctx, task_id)
    return MessageOut(message="Task deleted")

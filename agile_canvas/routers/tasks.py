"""Task router - API endpoints for project tasks."""
from fastapi import APIRouter, Depends, HTTPException, status

from agile_canvas.database import get_store
from agile_canvas.models.task import Task, TaskCreate, TaskUpdate
from agile_canvas.routers.projects import project_not_found
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/projects/{project_id}/tasks", tags=["tasks"])


def task_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Task not found",
    )


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def add_task(
    project_id: str,
    task: TaskCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Add a task to a project.

    Raises:
        HTTPException: If project not found (404)
    """
    created = store.add_task(project_id, task.title)
    if created is None:
        raise project_not_found()
    return created


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(
    project_id: str,
    task_id: str,
    store: ProjectStore = Depends(get_store),
):
    """
    Complete or reopen a task.

    Raises:
        HTTPException: If project or task not found (404)
    """
    task = store.toggle_task(project_id, task_id)
    if task is None:
        raise task_not_found()
    return task


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    project_id: str,
    task_id: str,
    task_update: TaskUpdate,
    store: ProjectStore = Depends(get_store),
):
    """
    Rename a task or set its completed flag.

    Raises:
        HTTPException: If project or task not found (404)
    """
    task = store.update_task(project_id, task_id, task_update)
    if task is None:
        raise task_not_found()
    return task

"""Project router - API endpoints for project management."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from agile_canvas.database import get_store
from agile_canvas.models.project import Project, ProjectCreate, ProjectPhase, ProjectStatus, ProjectUpdate
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/projects", tags=["projects"])


def project_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Project not found",
    )


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Create a new project.

    Args:
        project: Project creation data
        store: Project store

    Returns:
        Created project object
    """
    return store.create_project(project)


@router.get("", response_model=list[Project])
async def list_projects(
    search: Optional[str] = Query(None, description="Search name, client and description"),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status", description="Filter by status"),
    phase: Optional[ProjectPhase] = Query(None, description="Filter by phase"),
    tag: Optional[list[str]] = Query(None, description="Filter by tag (any of)"),
    store: ProjectStore = Depends(get_store),
):
    """
    List projects, optionally filtered.

    Filtering by status ``overdue`` selects open projects past their end date.
    """
    return store.list_projects(
        search=search,
        status=status_filter,
        phase=phase,
        tags=tag,
    )


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_store),
):
    """
    Get a project by id.

    Raises:
        HTTPException: If project not found (404)
    """
    project = store.get_project(project_id)
    if project is None:
        raise project_not_found()
    return project


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    store: ProjectStore = Depends(get_store),
):
    """
    Update a project. Setting status to ``deleted`` soft-deletes it.

    Raises:
        HTTPException: If project not found (404)
    """
    project = store.update_project(project_id, project_update)
    if project is None:
        raise project_not_found()
    return project


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    store: ProjectStore = Depends(get_store),
):
    """
    Permanently delete a project and everything it owns.

    Returns:
        Dictionary with deleted flag

    Raises:
        HTTPException: If project not found (404)
    """
    if not store.delete_project(project_id):
        raise project_not_found()
    return {"deleted": True}

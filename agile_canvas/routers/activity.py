"""Comment and file router - API endpoints for project activity."""
from fastapi import APIRouter, Depends, HTTPException, status

from agile_canvas.database import get_store
from agile_canvas.models.activity import Comment, CommentCreate, FileCreate, ProjectFile
from agile_canvas.routers.projects import project_not_found
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/projects/{project_id}", tags=["activity"])


@router.post("/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    project_id: str,
    comment: CommentCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Comment on a project.

    Raises:
        HTTPException: If the text is blank (400) or project not found (404)
    """
    try:
        created = store.add_comment(project_id, comment.text, author=comment.author)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    if created is None:
        raise project_not_found()
    return created


@router.post("/files", response_model=ProjectFile, status_code=status.HTTP_201_CREATED)
async def add_file(
    project_id: str,
    project_file: FileCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Attach file metadata to a project.

    Raises:
        HTTPException: If project not found (404)
    """
    created = store.add_file(project_id, project_file)
    if created is None:
        raise project_not_found()
    return created

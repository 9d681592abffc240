"""Risk router - API endpoints for project risks."""
from fastapi import APIRouter, Depends, HTTPException, status

from agile_canvas.database import get_store
from agile_canvas.models.risk import Risk, RiskCreate, RiskUpdate
from agile_canvas.routers.projects import project_not_found
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/projects/{project_id}/risks", tags=["risks"])


@router.post("", response_model=Risk, status_code=status.HTTP_201_CREATED)
async def add_risk(
    project_id: str,
    risk: RiskCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Register a risk on a project.

    Raises:
        HTTPException: If project not found (404)
    """
    created = store.add_risk(project_id, risk)
    if created is None:
        raise project_not_found()
    return created


@router.patch("/{risk_id}", response_model=Risk)
async def update_risk(
    project_id: str,
    risk_id: str,
    risk_update: RiskUpdate,
    store: ProjectStore = Depends(get_store),
):
    """
    Update a risk, typically its status.

    Raises:
        HTTPException: If project or risk not found (404)
    """
    risk = store.update_risk(project_id, risk_id, risk_update)
    if risk is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Risk not found",
        )
    return risk

"""Export router - PDF reports of selected projects."""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import Field

from agile_canvas.database import get_currency_service, get_store
from agile_canvas.models.base import CamelModel
from agile_canvas.models.project import Currency
from agile_canvas.services.currency_service import CurrencyService
from agile_canvas.services.export_service import ExportService
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/export", tags=["export"])


class ExportRequest(CamelModel):
    """Export request model."""

    project_ids: list[str] = Field(default_factory=list)
    currency: Currency = Currency.BRL


@router.post("/pdf")
async def export_pdf(
    request: ExportRequest,
    store: ProjectStore = Depends(get_store),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """
    Export the selected projects as a PDF, one page each.

    Unknown ids are skipped. An empty ``projectIds`` exports nothing.

    Raises:
        HTTPException: If the export fails (400) with a user-facing message
    """
    wanted = set(request.project_ids)
    projects = [p for p in store.projects if p.id in wanted]

    result = ExportService(currency_service).export_projects(projects, request.currency)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message,
        )

    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )

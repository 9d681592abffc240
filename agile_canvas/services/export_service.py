"""Export service - one-page-per-project PDF reports."""
import io
import logging
import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from agile_canvas.models.project import Currency, Project
from agile_canvas.services.analytics import effective_status
from agile_canvas.services.currency_service import CurrencyService


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
LABEL_WIDTH = 45 * mm
MAX_TASKS = 10
MAX_RISKS = 5

EXPORT_FAILED_MESSAGE = "Failed to export PDF. Please try again."


class ExportResult(BaseModel):
    """Outcome of an export: the document, or a message for the user."""

    success: bool
    filename: Optional[str] = None
    content: Optional[bytes] = None
    message: Optional[str] = None


def export_filename(projects: list[Project], today: Optional[date] = None) -> str:
    """
    Name of the exported file.

    Examples:
        A single project "Site v2" -> 'project-Site-v2.pdf'
        Several projects -> 'projects-export-2025-06-01.pdf'
    """
    if len(projects) == 1:
        return f"project-{re.sub(r'[^a-zA-Z0-9]', '-', projects[0].name)}.pdf"
    today = today or date.today()
    return f"projects-export-{today.isoformat()}.pdf"


class _PageWriter:
    """Top-down text cursor over one reportlab page."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.y = PAGE_HEIGHT - MARGIN

    def line(self, text: str, size: int = 12, bold: bool = False, indent: float = 0, step: float = 7 * mm):
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.pdf.drawString(MARGIN + indent, self.y, text)
        self.y -= step

    def field(self, label: str, value: str):
        self.pdf.setFont("Helvetica-Bold", 12)
        self.pdf.drawString(MARGIN, self.y, label)
        self.pdf.setFont("Helvetica", 12)
        self.pdf.drawString(MARGIN + LABEL_WIDTH, self.y, value)
        self.y -= 7 * mm

    def paragraph(self, text: str, size: int = 12):
        lines = simpleSplit(text, "Helvetica", size, PAGE_WIDTH - 2 * MARGIN)
        for text_line in lines:
            self.line(text_line, size=size, step=5 * mm)
        self.y -= 5 * mm

    def heading(self, text: str):
        self.line(text, bold=True, step=10 * mm)

    def gap(self, amount: float = 5 * mm):
        self.y -= amount


class ExportService:
    """Service for exporting projects to PDF."""

    def __init__(self, currency_service: CurrencyService):
        self.currency_service = currency_service

    def export_projects(
        self,
        projects: list[Project],
        display_currency: Currency = Currency.BRL,
    ) -> ExportResult:
        """
        Render the given projects, one page each.

        Rendering errors are reported in the result, never raised.

        Args:
            projects: Projects to export, in page order
            display_currency: Currency for financial values

        Returns:
            ExportResult with the PDF bytes, or a failure message
        """
        if not projects:
            return ExportResult(success=False, message="No projects selected for export")

        try:
            buffer = io.BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=A4)
            pdf.setTitle("Project report")

            generated_at = datetime.now()
            for project in projects:
                self._add_project_page(pdf, project, display_currency, generated_at)
                pdf.showPage()
            pdf.save()
        except Exception:
            logger.exception("Error exporting PDF for %d projects", len(projects))
            return ExportResult(success=False, message=EXPORT_FAILED_MESSAGE)

        filename = export_filename(projects)
        logger.info("Exported %d projects to %s", len(projects), filename)
        return ExportResult(success=True, filename=filename, content=buffer.getvalue())

    def _add_project_page(
        self,
        pdf: canvas.Canvas,
        project: Project,
        display_currency: Currency,
        generated_at: datetime,
    ) -> None:
        page = _PageWriter(pdf)

        page.line("PROJECT REPORT", size=20, bold=True, step=15 * mm)
        page.line(project.name, size=16, bold=True, step=10 * mm)

        page.field("Client:", project.client)
        page.field("Status:", effective_status(project, generated_at.date()).value.replace("_", " "))
        page.field("Phase:", project.phase.value)
        page.field("Start date:", _format_date(project.start_date))
        page.field("Expected end:", _format_date(project.end_date))
        page.field("Progress:", f"{project.progress}%")
        page.gap()

        if project.initial_value or project.final_value:
            convert = self.currency_service.convert
            fmt = self.currency_service.format_currency
            initial = convert(project.initial_value or 0, project.currency, display_currency)
            final = convert(project.final_value or 0, project.currency, display_currency)

            page.heading("FINANCIAL INFORMATION")
            page.line(f"Initial value: {fmt(initial, display_currency)}")
            page.line(f"Final value: {fmt(final, display_currency)}", step=10 * mm)

        if project.description:
            page.heading("DESCRIPTION")
            page.paragraph(project.description)

        if project.team:
            page.heading("TEAM")
            for member in project.team:
                page.line(f"- {member}", indent=5 * mm)
            page.gap()

        if project.tasks:
            completed = sum(1 for task in project.tasks if task.completed)
            page.heading("TASKS")
            page.line(
                f"Total: {len(project.tasks)} | Completed: {completed} | "
                f"Pending: {len(project.tasks) - completed}",
                step=10 * mm,
            )
            for task in project.tasks[:MAX_TASKS]:
                mark = "[x]" if task.completed else "[ ]"
                page.line(f"{mark} {task.title}", indent=5 * mm, step=6 * mm)
            if len(project.tasks) > MAX_TASKS:
                page.line(f"... and {len(project.tasks) - MAX_TASKS} more tasks", indent=5 * mm, step=6 * mm)
            page.gap()

        if project.risks:
            page.heading("IDENTIFIED RISKS")
            for risk in project.risks[:MAX_RISKS]:
                page.line(
                    f"- {risk.name} (Impact: {risk.impact.value} - Probability: {risk.probability.value})",
                    indent=5 * mm,
                    step=6 * mm,
                )
            if len(project.risks) > MAX_RISKS:
                page.line(f"... and {len(project.risks) - MAX_RISKS} more risks", indent=5 * mm, step=6 * mm)
            page.gap()

        if project.tags:
            page.heading("TAGS")
            page.line(", ".join(f"#{tag}" for tag in project.tags), step=10 * mm)

        pdf.setFont("Helvetica-Oblique", 10)
        pdf.drawString(MARGIN, 15 * mm, f"Report generated on {generated_at:%Y-%m-%d %H:%M}")
        pdf.drawRightString(PAGE_WIDTH - MARGIN, 15 * mm, "Agile Canvas - Project Management")


def _format_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"

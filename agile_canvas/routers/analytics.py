"""Analytics router - dashboard and aggregate endpoints."""
from fastapi import APIRouter, Depends, Query

from agile_canvas.database import get_alert_monitor, get_currency_service, get_store
from agile_canvas.models.analytics import (
    AnalyticsBreakdown,
    DashboardSummary,
    FinancialSummary,
    OverdueAlert,
    ProjectStats,
)
from agile_canvas.models.project import Currency
from agile_canvas.services import analytics
from agile_canvas.services.analytics import OverdueAlertMonitor
from agile_canvas.services.currency_service import CurrencyService
from agile_canvas.services.project_store import ProjectStore


router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/stats", response_model=ProjectStats)
async def get_stats(store: ProjectStore = Depends(get_store)):
    """Headline project counters."""
    return analytics.project_stats(store.projects)


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(store: ProjectStore = Depends(get_store)):
    """Dashboard counters, rates and project lists."""
    return analytics.dashboard_summary(store.projects)


@router.get("/breakdown", response_model=AnalyticsBreakdown)
async def get_breakdown(store: ProjectStore = Depends(get_store)):
    """Projects by tag and team member, most overdue and lowest progress."""
    return analytics.analytics_breakdown(store.projects)


@router.get("/financial", response_model=FinancialSummary)
async def get_financial(
    currency: Currency = Query(Currency.BRL, description="Display currency"),
    store: ProjectStore = Depends(get_store),
    currency_service: CurrencyService = Depends(get_currency_service),
):
    """Financial totals converted into the display currency."""
    return analytics.financial_summary(store.projects, currency_service, currency)


@router.get("/overdue-alert", response_model=OverdueAlert)
async def check_overdue_alert(
    store: ProjectStore = Depends(get_store),
    monitor: OverdueAlertMonitor = Depends(get_alert_monitor),
):
    """Whether the overdue-projects alert should be shown now."""
    return monitor.check(store.projects)


@router.post("/overdue-alert/dismiss")
async def dismiss_overdue_alert(monitor: OverdueAlertMonitor = Depends(get_alert_monitor)):
    """Dismiss the overdue-projects alert."""
    monitor.dismiss()
    return {"dismissed": True}

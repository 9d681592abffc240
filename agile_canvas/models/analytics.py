"""Aggregate result models for dashboard and analytics queries."""
from pydantic import Field

from agile_canvas.models.base import CamelModel
from agile_canvas.models.project import Currency, Project
from agile_canvas.models.risk import RiskLevel


class ProjectStats(CamelModel):
    """Headline counters over a project collection."""

    total: int = 0
    active: int = 0
    completed: int = 0
    overdue: int = 0
    deleted: int = 0
    avg_progress: int = 0
    total_value: float = 0
    completed_value: float = 0


class DashboardSummary(ProjectStats):
    """Stats plus the lists and rates shown on the dashboard."""

    canceled: int = 0
    budget_variation: float = 0
    delivery_rate: int = 100
    total_tasks: int = 0
    completed_tasks: int = 0
    task_completion_rate: int = 0
    completion_rate: int = 0
    risk_level: RiskLevel = RiskLevel.LOW
    recent_projects: list[Project] = Field(default_factory=list)
    upcoming_deadlines: list[Project] = Field(default_factory=list)
    overdue_projects: list[Project] = Field(default_factory=list)


class OverdueDetail(CamelModel):
    """An overdue project and by how many days."""

    project_id: str
    name: str
    client: str
    days_overdue: int


class ProgressDetail(CamelModel):
    """An in-progress project and its progress."""

    project_id: str
    name: str
    progress: int


class AnalyticsBreakdown(CamelModel):
    """Distribution of projects by tag and team member, plus outliers."""

    tag_stats: dict[str, int] = Field(default_factory=dict)
    team_stats: dict[str, int] = Field(default_factory=dict)
    overdue_details: list[OverdueDetail] = Field(default_factory=list)
    poor_performance: list[ProgressDetail] = Field(default_factory=list)


class FinancialSummary(CamelModel):
    """Financial totals converted into one display currency."""

    currency: Currency
    total_initial: float = 0
    total_final: float = 0
    variation: float = 0
    variation_percent: int = 0
    completed_revenue: float = 0


class OverdueAlert(CamelModel):
    """Whether the overdue alert should be shown now."""

    should_show: bool
    overdue_count: int

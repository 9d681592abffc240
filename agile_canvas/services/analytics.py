"""Read-only aggregate queries over the project collection.

"Overdue" is decided here and only here: a project is overdue when its end
date has passed and its status is not closed. Nothing in this module mutates
projects.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from agile_canvas.models.analytics import (
    AnalyticsBreakdown,
    DashboardSummary,
    FinancialSummary,
    OverdueAlert,
    OverdueDetail,
    ProgressDetail,
    ProjectStats,
)
from agile_canvas.models.project import (
    CLOSED_STATUSES,
    Currency,
    Project,
    ProjectPhase,
    ProjectStatus,
)
from agile_canvas.models.risk import RiskLevel


RECENT_WINDOW_DAYS = 7
UPCOMING_WINDOW_DAYS = 7

# Overdue share of live projects above which the portfolio risk is raised
HIGH_RISK_OVERDUE_SHARE = 30
MEDIUM_RISK_OVERDUE_SHARE = 10


def local_now() -> datetime:
    """Current local time, timezone-aware. The one clock for overdue checks."""
    return datetime.now().astimezone()


def local_today() -> date:
    return local_now().date()


def percent(part: float, whole: float) -> int:
    """Rounded percentage (half up), 0 when whole is 0."""
    if not whole:
        return 0
    ratio = part * 100 / whole
    return int(ratio + 0.5) if ratio >= 0 else -int(-ratio + 0.5)


def is_overdue(project: Project, today: Optional[date] = None) -> bool:
    """True when the end date has passed and the project is still open."""
    today = today or local_today()
    if project.end_date is None or project.status in CLOSED_STATUSES:
        return False
    return project.end_date < today


def effective_status(project: Project, today: Optional[date] = None) -> ProjectStatus:
    """Status to display: the stored status, or OVERDUE when the date says so."""
    return ProjectStatus.OVERDUE if is_overdue(project, today) else project.status


def days_overdue(project: Project, today: Optional[date] = None) -> int:
    """Whole days past the end date, 0 when not overdue."""
    today = today or local_today()
    if not is_overdue(project, today):
        return 0
    return (today - project.end_date).days


def project_value(project: Project) -> float:
    """Final value when set, otherwise the initial value."""
    return project.final_value or project.initial_value or 0


def filter_projects(
    projects: Iterable[Project],
    search: Optional[str] = None,
    status: Optional[Union[ProjectStatus, str]] = None,
    phase: Optional[Union[ProjectPhase, str]] = None,
    tags: Optional[list[str]] = None,
    today: Optional[date] = None,
) -> list[Project]:
    """
    Filter projects the way the project list does.

    Args:
        projects: Projects to filter
        search: Case-insensitive text matched against name, client and description
        status: Status to match; OVERDUE uses the derived predicate
        phase: Phase to match
        tags: Keep projects having any of these tags
        today: Reference date for the overdue predicate

    Returns:
        Matching projects, in their original order
    """
    status = ProjectStatus(status) if status else None
    phase = ProjectPhase(phase) if phase else None
    needle = search.lower() if search else None

    result = []
    for project in projects:
        if status == ProjectStatus.OVERDUE:
            if not is_overdue(project, today):
                continue
        elif status and project.status != status:
            continue

        if phase and project.phase != phase:
            continue

        if needle and not any(
            needle in field.lower()
            for field in (project.name, project.client, project.description)
        ):
            continue

        if tags and not any(tag in project.tags for tag in tags):
            continue

        result.append(project)
    return result


def project_stats(projects: list[Project], today: Optional[date] = None) -> ProjectStats:
    """Headline counters used by the dashboard and project list."""
    live = [p for p in projects if p.status != ProjectStatus.DELETED]
    in_progress = [p for p in projects if p.status == ProjectStatus.IN_PROGRESS]
    completed = [p for p in projects if p.status == ProjectStatus.COMPLETED]

    avg_progress = 0
    if in_progress:
        avg_progress = percent(sum(p.progress for p in in_progress), 100 * len(in_progress))

    return ProjectStats(
        total=len(live),
        active=len(in_progress),
        completed=len(completed),
        overdue=sum(1 for p in projects if is_overdue(p, today)),
        deleted=len(projects) - len(live),
        avg_progress=avg_progress,
        total_value=sum(project_value(p) for p in live),
        completed_value=sum(project_value(p) for p in completed),
    )


def dashboard_summary(projects: list[Project], today: Optional[date] = None) -> DashboardSummary:
    """Everything the dashboard shows, computed from the real collection."""
    today = today or local_today()
    stats = project_stats(projects, today)
    live = [p for p in projects if p.status != ProjectStatus.DELETED]
    completed = [p for p in projects if p.status == ProjectStatus.COMPLETED]

    # Completed projects whose end date has not passed count as delivered on time
    on_time = sum(1 for p in completed if p.end_date is not None and p.end_date >= today)
    delivery_rate = percent(on_time, len(completed)) if completed else 100

    total_tasks = sum(len(p.tasks) for p in live)
    completed_tasks = sum(1 for p in live for t in p.tasks if t.completed)

    week_ago = today - timedelta(days=RECENT_WINDOW_DAYS)
    next_week = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    recent = [
        p for p in live
        if p.start_date is not None and week_ago <= p.start_date <= today
    ]
    upcoming = [
        p for p in projects
        if p.end_date is not None
        and today <= p.end_date <= next_week
        and p.status not in (ProjectStatus.COMPLETED, ProjectStatus.DELETED)
    ]

    return DashboardSummary(
        **stats.model_dump(),
        canceled=sum(1 for p in projects if p.status == ProjectStatus.CANCELED),
        budget_variation=sum(p.final_value - p.initial_value for p in live),
        delivery_rate=delivery_rate,
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        task_completion_rate=percent(completed_tasks, total_tasks),
        completion_rate=percent(len(completed), len(live)),
        risk_level=risk_level(stats.overdue, len(live)),
        recent_projects=recent,
        upcoming_deadlines=upcoming,
        overdue_projects=[p for p in projects if is_overdue(p, today)],
    )


def risk_level(overdue: int, live: int) -> RiskLevel:
    """
    Portfolio risk from the share of live projects that are overdue.

    Examples:
        4 of 10 overdue -> HIGH, 3 of 10 -> MEDIUM, 1 of 10 -> LOW
    """
    if overdue * 100 > live * HIGH_RISK_OVERDUE_SHARE:
        return RiskLevel.HIGH
    if overdue * 100 > live * MEDIUM_RISK_OVERDUE_SHARE:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def tag_stats(projects: list[Project]) -> dict[str, int]:
    """Number of projects carrying each tag."""
    return dict(Counter(tag for p in projects for tag in p.tags))


def team_stats(projects: list[Project]) -> dict[str, int]:
    """Number of projects each team member is on."""
    return dict(Counter(member for p in projects for member in p.team))


def overdue_details(projects: list[Project], today: Optional[date] = None, limit: int = 5) -> list[OverdueDetail]:
    """Most overdue projects first."""
    today = today or local_today()
    details = [
        OverdueDetail(
            project_id=p.id,
            name=p.name,
            client=p.client,
            days_overdue=days_overdue(p, today),
        )
        for p in projects
        if is_overdue(p, today)
    ]
    details.sort(key=lambda d: d.days_overdue, reverse=True)
    return details[:limit]


def poor_performance(projects: list[Project], limit: int = 3) -> list[ProgressDetail]:
    """In-progress projects with the lowest progress."""
    in_progress = sorted(
        (p for p in projects if p.status == ProjectStatus.IN_PROGRESS),
        key=lambda p: p.progress,
    )
    return [
        ProgressDetail(project_id=p.id, name=p.name, progress=p.progress)
        for p in in_progress[:limit]
    ]


def analytics_breakdown(projects: list[Project], today: Optional[date] = None) -> AnalyticsBreakdown:
    """Tag and team distribution plus overdue and lagging projects."""
    return AnalyticsBreakdown(
        tag_stats=tag_stats(projects),
        team_stats=team_stats(projects),
        overdue_details=overdue_details(projects, today),
        poor_performance=poor_performance(projects),
    )


def financial_summary(projects: list[Project], currency_service, display_currency: Currency) -> FinancialSummary:
    """
    Financial totals of non-deleted projects in the display currency.

    Args:
        projects: Projects to total
        currency_service: CurrencyService used for conversion
        display_currency: Currency of the returned amounts

    Returns:
        FinancialSummary
    """
    def converted(amount: float, project: Project) -> float:
        return currency_service.convert(amount, project.currency, display_currency)

    live = [p for p in projects if p.status != ProjectStatus.DELETED]
    total_initial = sum(converted(p.initial_value, p) for p in live)
    total_final = sum(converted(project_value(p), p) for p in live)
    variation = total_final - total_initial

    return FinancialSummary(
        currency=display_currency,
        total_initial=round(total_initial, 2),
        total_final=round(total_final, 2),
        variation=round(variation, 2),
        variation_percent=percent(variation, total_initial),
        completed_revenue=round(sum(
            converted(project_value(p), p)
            for p in projects
            if p.status == ProjectStatus.COMPLETED
        ), 2),
    )


class OverdueAlertMonitor:
    """Decides when to raise the overdue-projects alert.

    The alert fires at most once per cooldown window while overdue projects
    exist.
    """

    def __init__(self, cooldown: timedelta = timedelta(minutes=60)):
        self.cooldown = cooldown
        self.last_alert_at: Optional[datetime] = None
        self.showing = False

    def check(self, projects: list[Project], now: Optional[datetime] = None) -> OverdueAlert:
        now = now or local_now()
        overdue_count = sum(1 for p in projects if is_overdue(p, now.date()))

        if overdue_count == 0:
            self.showing = False
        elif self.last_alert_at is None or now - self.last_alert_at > self.cooldown:
            self.showing = True
            self.last_alert_at = now
        else:
            self.showing = False

        return OverdueAlert(should_show=self.showing, overdue_count=overdue_count)

    def dismiss(self) -> None:
        self.showing = False

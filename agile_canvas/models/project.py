"""Project model definitions."""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from agile_canvas.models.activity import Comment, HistoryEntry, ProjectFile
from agile_canvas.models.base import CamelModel, new_id
from agile_canvas.models.risk import Risk
from agile_canvas.models.task import Task


class ProjectStatus(str, Enum):
    """Project lifecycle status.

    OVERDUE is never stored on a project: it is derived at read time from
    the status and end date (see ``services.analytics.effective_status``).
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELED = "canceled"
    DELETED = "deleted"


# Statuses for which a past end date does not make a project overdue
CLOSED_STATUSES = frozenset({
    ProjectStatus.COMPLETED,
    ProjectStatus.CANCELED,
    ProjectStatus.DELETED,
})


class ProjectPhase(str, Enum):
    """Project-management phase, independent of status."""

    INITIATION = "initiation"
    PLANNING = "planning"
    EXECUTION = "execution"
    MONITORING = "monitoring"
    CLOSURE = "closure"


class Currency(str, Enum):
    """Supported currencies."""

    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"


def _reject_overdue(value: Optional[ProjectStatus]) -> Optional[ProjectStatus]:
    if value == ProjectStatus.OVERDUE:
        raise ValueError("'overdue' is derived from the end date and cannot be set")
    return value


def _unique(values: Optional[list[str]]) -> Optional[list[str]]:
    if values is None:
        return None
    return list(dict.fromkeys(values))


class ProjectCreate(CamelModel):
    """Project creation model."""

    name: str = Field(min_length=1)
    client: str = Field(min_length=1)
    description: str = Field(min_length=1)
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    phase: ProjectPhase = ProjectPhase.INITIATION
    tags: list[str] = Field(default_factory=list)
    team: list[str] = Field(default_factory=list)
    initial_value: float = Field(default=0, ge=0)
    final_value: float = Field(default=0, ge=0)
    currency: Optional[Currency] = None  # store default when omitted

    @field_validator("status")
    @classmethod
    def _check_status(cls, value):
        return _reject_overdue(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value):
        return _unique(value)


class ProjectUpdate(CamelModel):
    """Project update model - all fields optional, absent means unchanged.

    Owned collections and progress are not part of the patch; they change
    only through the dedicated task, comment, risk and file operations.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    client: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    phase: Optional[ProjectPhase] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tags: Optional[list[str]] = None
    team: Optional[list[str]] = None
    initial_value: Optional[float] = Field(default=None, ge=0)
    final_value: Optional[float] = Field(default=None, ge=0)
    currency: Optional[Currency] = None

    @field_validator("status")
    @classmethod
    def _check_status(cls, value):
        return _reject_overdue(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value):
        return _unique(value)


class Project(CamelModel):
    """Full project model as held by the store and persisted.

    Every field except ``id`` has a default so that collections written by
    older versions load with creation defaults.
    """

    id: str = Field(default_factory=new_id)
    name: str = ""
    client: str = ""
    description: str = ""
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    phase: ProjectPhase = ProjectPhase.INITIATION
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tags: list[str] = Field(default_factory=list)
    team: list[str] = Field(default_factory=list)
    progress: int = Field(default=0, ge=0, le=100)
    tasks: list[Task] = Field(default_factory=list)
    files: list[ProjectFile] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    history: list[HistoryEntry] = Field(default_factory=list)
    initial_value: float = Field(default=0, ge=0)
    final_value: float = Field(default=0, ge=0)
    currency: Currency = Currency.BRL

    @field_validator("status")
    @classmethod
    def _overdue_is_not_stored(cls, value: ProjectStatus) -> ProjectStatus:
        """Legacy collections may hold a stored 'overdue'; the date decides now."""
        if value == ProjectStatus.OVERDUE:
            return ProjectStatus.IN_PROGRESS
        return value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value):
        return _unique(value)

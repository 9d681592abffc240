"""Risk model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from agile_canvas.models.base import CamelModel, new_id, utcnow


class RiskLevel(str, Enum):
    """Impact and probability scale."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskStatus(str, Enum):
    """Risk lifecycle states."""

    ACTIVE = "active"
    MITIGATED = "mitigated"
    CLOSED = "closed"


class RiskBase(CamelModel):
    """Base risk fields."""

    name: str
    impact: RiskLevel = RiskLevel.MEDIUM
    probability: RiskLevel = RiskLevel.MEDIUM
    contingency_plan: str = ""
    status: RiskStatus = RiskStatus.ACTIVE


class RiskCreate(RiskBase):
    """Risk creation model."""

    name: str = Field(min_length=1)


class RiskUpdate(CamelModel):
    """Risk update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1)
    impact: Optional[RiskLevel] = None
    probability: Optional[RiskLevel] = None
    contingency_plan: Optional[str] = None
    status: Optional[RiskStatus] = None


class Risk(RiskBase):
    """Full risk model as stored on a project."""

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utcnow)

"""Task model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from agile_canvas.models.base import CamelModel, new_id, utcnow


class Task(CamelModel):
    """A checklist item owned by a project."""

    id: str = Field(default_factory=new_id)
    title: str
    completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class TaskCreate(CamelModel):
    """Task creation model."""

    title: str = Field(min_length=1)


class TaskUpdate(CamelModel):
    """Task update model - all fields optional."""

    title: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None

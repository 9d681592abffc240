"""Comment, file attachment and audit history models."""
from datetime import datetime

from pydantic import AliasChoices, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agile_canvas.models.base import CamelModel, new_id, utcnow


SYSTEM_ACTOR = "System"
DEFAULT_AUTHOR = "User"


class Comment(CamelModel):
    """A note left on a project. Comments are append-only."""

    id: str = Field(default_factory=new_id)
    author: str = DEFAULT_AUTHOR
    text: str
    created_at: datetime = Field(default_factory=utcnow)


class CommentCreate(CamelModel):
    """Comment creation model."""

    text: str = Field(min_length=1)
    author: str = DEFAULT_AUTHOR


class ProjectFile(CamelModel):
    """Metadata of a file attached to a project. Contents live elsewhere."""

    id: str = Field(default_factory=new_id)
    name: str
    type: str = ""
    size: int = Field(default=0, ge=0)
    uploaded_at: datetime = Field(default_factory=utcnow)
    url: str = ""


class FileCreate(CamelModel):
    """File attachment model."""

    name: str = Field(min_length=1)
    type: str = ""
    size: int = Field(default=0, ge=0)
    url: str = ""


class HistoryEntry(CamelModel):
    """Immutable audit record of one project mutation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_id)
    action: str
    details: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    # Older collections stored the actor under "user"
    actor: str = Field(default=SYSTEM_ACTOR, validation_alias=AliasChoices("actor", "user"))

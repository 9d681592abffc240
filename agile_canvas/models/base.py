"""Shared model configuration and field factories."""
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names.

    Python code uses snake_case attributes; the HTTP API and the persisted
    collection use camelCase (``startDate``, ``initialValue``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ValidationInfo, field_validator

from ..models.enums import TimelineType
from .common import CamelModel, blank_to_none, require_min_length, to_utc


class TimelineEntryCreate(CamelModel):
    label: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    type: TimelineType = TimelineType.MARCO
    task_id: Optional[uuid.UUID] = None

    @field_validator("label")
    @classmethod
    def _label(cls, v: str) -> str:
        return require_min_length(v, 3, "Informe um título.")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _required_date(cls, v):
        if blank_to_none(v) is None:
            raise ValueError("Informe a data.")
        return v

    @field_validator("start_date")
    @classmethod
    def _start_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = to_utc(v)
        start = info.data.get("start_date")
        if start is not None and v < start:
            raise ValueError("Data final deve ser maior ou igual à inicial.")
        return v

    @field_validator("task_id", mode="before")
    @classmethod
    def _blank_task(cls, v):
        return blank_to_none(v)


class TimelineEntryUpdate(CamelModel):
    """Partial update; ``taskId: null`` unlinks the task."""

    label: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    type: Optional[TimelineType] = None
    task_id: Optional[uuid.UUID] = None

    @field_validator("label")
    @classmethod
    def _label(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return require_min_length(v, 3, "Informe um título.")

    @field_validator("description", "start_date", "end_date", "task_id", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)

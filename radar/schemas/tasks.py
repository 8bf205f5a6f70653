from datetime import datetime
from typing import Optional

from pydantic import EmailStr, field_validator

from ..models.enums import TaskStatus
from .common import CamelModel, blank_to_none, require_min_length, to_utc


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    responsible_email: Optional[EmailStr] = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return require_min_length(v, 3, "Informe um titulo com pelo menos 3 caracteres.")

    @field_validator("start_date", "due_date", "responsible_email", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("start_date", "due_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)


class TaskUpdate(CamelModel):
    """Partial update; only keys present in the body are applied.

    ``responsibleEmail: ""`` removes the responsible user, and blank dates or
    description clear those fields.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    responsible_email: Optional[EmailStr] = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return require_min_length(v, 3, "Informe um titulo com pelo menos 3 caracteres.")

    @field_validator("description", "start_date", "due_date", "responsible_email", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("start_date", "due_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)

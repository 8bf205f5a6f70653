import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import AnyUrl, Field, ValidationInfo, field_validator

from ..models.enums import Area, CropPosition, FileCategory, Priority, ProjectStatus, Visibility
from .common import CamelModel, blank_to_none, require_min_length, to_utc


class ProjectFileIn(CamelModel):
    id: Optional[uuid.UUID] = None
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    mime_type: str = Field(min_length=1)
    # Unknown categories/positions are stored as the fallback value, not rejected
    category: Optional[str] = None
    position: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id(cls, v):
        return blank_to_none(v)

    @property
    def category_value(self) -> str:
        return FileCategory.decode(self.category).value

    @property
    def position_value(self) -> str:
        return CropPosition.decode(self.position).value


class ProjectIn(CamelModel):
    """Full project payload, used for both create and update."""

    name: str
    description: str
    area: Area
    status: ProjectStatus
    priority: Priority
    start_date: datetime
    end_date: datetime
    visibility: Visibility
    featured: Optional[bool] = None
    image: Optional[AnyUrl] = None
    image_position: Optional[CropPosition] = None
    files: Optional[List[ProjectFileIn]] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return require_min_length(v, 3, "Informe um nome com pelo menos 3 caracteres.")

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return require_min_length(v, 10, "Descrição precisa ter no mínimo 10 caracteres.")

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

    @field_validator("image", "image_position", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @property
    def image_url(self) -> Optional[str]:
        return str(self.image) if self.image else None

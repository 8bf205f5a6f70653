from typing import Any, Dict, List, Optional

from pydantic import AnyUrl, Field, field_validator

from .common import CamelModel, require_min_length


class CommentAttachment(CamelModel):
    name: str = Field(min_length=1)
    url: AnyUrl
    mime_type: str = Field(min_length=1)

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "url": str(self.url), "mimeType": self.mime_type}


class CommentIn(CamelModel):
    content: str
    attachments: Optional[List[CommentAttachment]] = None

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        return require_min_length(v, 3, "Informe um comentario.")

    def attachments_json(self) -> Optional[List[Dict[str, Any]]]:
        if self.attachments is None:
            return None
        return [a.to_json() for a in self.attachments]

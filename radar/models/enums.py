"""
Closed value sets stored as plain strings.

Persisted rows keep free-form strings; ``decode`` is where an unknown value
is turned into the documented fallback.
"""
from enum import Enum
from typing import Optional


class Area(str, Enum):
    TRANSPARENCIA = "transparencia"
    INOVACAO = "inovacao"
    EFICIENCIA = "eficiencia"
    DIALOGO = "dialogo"


class ProjectStatus(str, Enum):
    PLANEJADO = "planejado"
    EM_ANDAMENTO = "em_andamento"
    PAUSADO = "pausado"
    CONCLUIDO = "concluido"
    ATRASADO = "atrasado"
    PENDENTE = "pendente"


class Priority(str, Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"


class Visibility(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"

    @classmethod
    def decode(cls, value: Optional[str]) -> "Visibility":
        if (value or "").lower() == cls.RESTRICTED.value:
            return cls.RESTRICTED
        return cls.PUBLIC


class TaskStatus(str, Enum):
    NAO_INICIADA = "nao_iniciada"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDA = "concluida"

    @classmethod
    def decode(cls, value: Optional[str]) -> "TaskStatus":
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.NAO_INICIADA


class TimelineType(str, Enum):
    MARCO = "marco"
    TAREFA = "tarefa"
    FASE = "fase"

    @classmethod
    def decode(cls, value: Optional[str]) -> "TimelineType":
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.MARCO


class FileCategory(str, Enum):
    ANEXO = "anexo"
    COMPROVACAO = "comprovacao"
    DESTAQUE = "destaque"
    BACKGROUND = "background"

    @classmethod
    def decode(cls, value: Optional[str]) -> "FileCategory":
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.ANEXO


class CropPosition(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"

    @classmethod
    def decode(cls, value: Optional[str]) -> "CropPosition":
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.CENTER

"""Esquemas para formatos descargables."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.formato import EstadoFormato


class FormatoItem(BaseModel):
    """Fila de la lista de formatos."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre_documento: str
    nombre_archivo: str | None
    estado: str
    ultima_modificacion_manual: datetime | None


class FormatoListResponse(BaseModel):
    formatos: list[FormatoItem]


class FormatoEstadoRequest(BaseModel):
    """Cambio manual de estado de un formato."""
    nombre_documento: str = Field(min_length=1, description="Nombre del formato")
    estado: str = Field(description="Activo o Bloqueado")

    @field_validator("estado")
    @classmethod
    def validar_estado(cls, v: str) -> str:
        if v not in EstadoFormato.TODOS:
            raise ValueError(f"estado debe ser uno de: {', '.join(EstadoFormato.TODOS)}")
        return v

"""Esquemas para procesos de estudiantes."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProcesoCreate(BaseModel):
    """Request para registrarse en un proceso."""
    periodo_id: int = Field(description="Periodo en el que se registra (debe estar Activo)")
    tipo_proceso: str = Field(description="Estadía, Estancia I, Estancia II o Servicio Social")


class ProcesoItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    usuario_id: int
    periodo_id: int
    tipo_proceso: str
    fecha_registro: datetime


class ProcesoListResponse(BaseModel):
    procesos: list[ProcesoItem]

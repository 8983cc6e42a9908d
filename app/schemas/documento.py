"""Esquemas para documentos entregados por estudiantes."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentoItem(BaseModel):
    """Documento con su estatus de revisión."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre_archivo: str
    tipo_documento_id: int
    usuario_id: int
    proceso_id: int
    estatus: str
    comentarios: str | None = None
    fecha_subida: datetime
    fecha_revision: datetime | None = None
    revisado_por_id: int | None = None


class DocumentoListItem(DocumentoItem):
    """Fila del listado: agrega tipo, estudiante y periodo."""
    tipo_documento: str
    nombre_estudiante: str
    periodo_id: int


class DocumentoListResponse(BaseModel):
    total: int
    documentos: list[DocumentoListItem]


class RechazoRequest(BaseModel):
    """Body para rechazar un documento."""
    comentarios: str | None = Field(
        default=None, description="Motivo del rechazo que verá el estudiante (obligatorio)"
    )


class TipoDocumentoItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str

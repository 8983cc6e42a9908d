"""Modelo Documento (entrega de un estudiante dentro de su proceso)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Identity, Text, UniqueConstraint, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.proceso import Proceso
    from app.models.tipo_documento import TipoDocumento
    from app.models.user import Usuario


class EstatusDocumento:
    """Valores permitidos para estatus de documento."""
    PENDIENTE = "Pendiente"
    APROBADO = "Aprobado"
    RECHAZADO = "Rechazado"

    TODOS = (PENDIENTE, APROBADO, RECHAZADO)


class Documento(Base):
    """Documento subido por el estudiante; uno vigente por (usuario, proceso, tipo)."""

    __tablename__ = "documentos"
    __table_args__ = (
        UniqueConstraint(
            "usuario_id", "proceso_id", "tipo_documento_id", name="uq_documento_usuario_proceso_tipo"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre_archivo: Mapped[str] = mapped_column(Text, nullable=False)
    ruta_archivo: Mapped[str] = mapped_column(Text, nullable=False)
    tipo_documento_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("tipo_documento.id"), nullable=False
    )
    usuario_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    proceso_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("proceso.id"), nullable=False)
    estatus: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstatusDocumento.PENDIENTE, server_default=text("'Pendiente'")
    )
    comentarios: Mapped[str | None] = mapped_column(Text, nullable=True)
    fecha_subida: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    fecha_revision: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revisado_por_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("usuarios.id"), nullable=True
    )

    tipo_documento: Mapped["TipoDocumento"] = relationship("TipoDocumento", lazy="joined")
    proceso: Mapped["Proceso"] = relationship("Proceso")
    usuario: Mapped["Usuario"] = relationship("Usuario", foreign_keys=[usuario_id])
    revisado_por: Mapped["Usuario | None"] = relationship("Usuario", foreign_keys=[revisado_por_id])

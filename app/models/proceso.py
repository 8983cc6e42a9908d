"""Modelo Proceso (registro de un estudiante en estadía, estancia o servicio social)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Identity, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.periodo import Periodo
    from app.models.user import Usuario


class TipoProceso:
    """Valores permitidos para tipo_proceso."""
    ESTADIA = "Estadía"
    ESTANCIA_I = "Estancia I"
    ESTANCIA_II = "Estancia II"
    SERVICIO_SOCIAL = "Servicio Social"

    TODOS = (ESTADIA, ESTANCIA_I, ESTANCIA_II, SERVICIO_SOCIAL)


class Proceso(Base):
    """Proceso académico de un estudiante dentro de un periodo."""

    __tablename__ = "proceso"
    __table_args__ = (UniqueConstraint("usuario_id", "periodo_id", name="uq_proceso_usuario_periodo"),)

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    usuario_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("usuarios.id"), nullable=False)
    periodo_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("periodos.id"), nullable=False)
    tipo_proceso: Mapped[str] = mapped_column(Text, nullable=False)
    fecha_registro: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    usuario: Mapped["Usuario"] = relationship("Usuario")
    periodo: Mapped["Periodo"] = relationship("Periodo")

"""Modelo Formato (plantilla de documento administrada por el área de estadías)."""
from datetime import datetime

from sqlalchemy import DateTime, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId


class EstadoFormato:
    """Valores permitidos para estado de formato."""
    ACTIVO = "Activo"
    BLOQUEADO = "Bloqueado"

    TODOS = (ACTIVO, BLOQUEADO)


class Formato(Base):
    """Formato descargable; se identifica por nombre_documento."""

    __tablename__ = "formatos_admin"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre_documento: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    nombre_archivo: Mapped[str | None] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoFormato.ACTIVO, server_default=text("'Activo'")
    )
    # Solo lo escribe un cambio manual del administrador, nunca la cascada
    ultima_modificacion_manual: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

"""Modelo TipoDocumento (catálogo: Carta de presentación, Reporte Mensual, etc.)."""
from sqlalchemy import Identity, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId


class TipoDocumento(Base):
    """Tipo de documento que el estudiante entrega en su proceso."""

    __tablename__ = "tipo_documento"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

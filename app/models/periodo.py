"""Modelo Periodo (cuatrimestre académico: ENERO-ABRIL 2025, etc.)."""
from datetime import date, time

from sqlalchemy import Date, Identity, Integer, Text, Time, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId


class EstadoPeriodo:
    """Valores permitidos para estado_activo."""
    ACTIVO = "Activo"
    INACTIVO = "Inactivo"

    TODOS = (ACTIVO, INACTIVO)


class FasePeriodo:
    """Cuatrimestres del calendario académico."""
    ENERO_ABRIL = "ENERO-ABRIL"
    MAYO_AGOSTO = "MAYO-AGOSTO"
    SEPTIEMBRE_DICIEMBRE = "SEPTIEMBRE-DICIEMBRE"

    TODAS = (ENERO_ABRIL, MAYO_AGOSTO, SEPTIEMBRE_DICIEMBRE)


class Periodo(Base):
    """Periodo académico con fecha de inicio, fecha/hora de fin y estado."""

    __tablename__ = "periodos"

    # El id más alto es el periodo de referencia para la cascada de formatos
    id: Mapped[int] = mapped_column(BigIntId, Identity(always=False), primary_key=True)
    anio: Mapped[int] = mapped_column(Integer, nullable=False)
    fase: Mapped[str] = mapped_column(Text, nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    hora_fin: Mapped[time] = mapped_column(
        Time, nullable=False, default=time(23, 59, 59), server_default=text("'23:59:59'")
    )
    estado_activo: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoPeriodo.ACTIVO, server_default=text("'Activo'")
    )

"""Reloj de pared del portal; los servicios lo reciben inyectado para poder fijar la hora en pruebas."""
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from app.core.config import settings

Reloj = Callable[[], datetime]


def zona_local() -> ZoneInfo:
    """Zona horaria en la que se capturan fecha_fin y hora_fin de los periodos."""
    return ZoneInfo(settings.zona_horaria)


def ahora() -> datetime:
    """Hora actual con zona horaria (UTC)."""
    return datetime.now(timezone.utc)


def como_aware(valor: datetime) -> datetime:
    """Asume UTC para fechas sin zona (SQLite no conserva el offset)."""
    if valor.tzinfo is None:
        return valor.replace(tzinfo=timezone.utc)
    return valor

"""Registro de estudiantes en un proceso (estadía, estancia, servicio social)."""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import reloj
from app.core.exceptions import ErrorValidacion, RecursoNoEncontrado
from app.models.periodo import EstadoPeriodo, Periodo
from app.models.proceso import Proceso, TipoProceso
from app.models.role import RolUsuario
from app.models.user import Usuario
from app.services.autorizacion import exigir_rol

logger = logging.getLogger(__name__)


async def registrar_proceso(
    db: AsyncSession,
    actor: Usuario,
    periodo_id: int,
    tipo_proceso: str,
    ahora: datetime | None = None,
) -> Proceso:
    """Registra al estudiante en un periodo Activo; uno por periodo."""
    exigir_rol(actor, (RolUsuario.ESTUDIANTE,))
    if tipo_proceso not in TipoProceso.TODOS:
        raise ErrorValidacion(
            f"tipo_proceso debe ser uno de: {', '.join(TipoProceso.TODOS)}", campo="tipo_proceso"
        )

    periodo = await db.get(Periodo, periodo_id)
    if periodo is None:
        raise RecursoNoEncontrado("Periodo", periodo_id)
    if periodo.estado_activo != EstadoPeriodo.ACTIVO:
        raise ErrorValidacion("El periodo no está activo; no admite registros", campo="periodo_id")

    existente = await db.execute(
        select(Proceso).where(Proceso.usuario_id == actor.id, Proceso.periodo_id == periodo.id)
    )
    if existente.scalar_one_or_none():
        raise ErrorValidacion("Ya estás registrado en un proceso de este periodo", campo="periodo_id")

    proceso = Proceso(
        usuario_id=actor.id,
        periodo_id=periodo.id,
        tipo_proceso=tipo_proceso,
        fecha_registro=ahora or reloj.ahora(),
    )
    db.add(proceso)
    await db.commit()
    logger.info("Usuario %s registrado en %s del periodo %s", actor.id, tipo_proceso, periodo.id)
    return proceso


async def listar_procesos_usuario(db: AsyncSession, usuario_id: int) -> list[Proceso]:
    q = select(Proceso).where(Proceso.usuario_id == usuario_id).order_by(Proceso.id.desc())
    result = await db.execute(q)
    return list(result.scalars().all())

"""Endpoints de periodos académicos."""
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import get_current_user, require_administrativo
from app.core.database import get_db
from app.core.exceptions import ErrorValidacion, RecursoNoEncontrado
from app.models import EstadoPeriodo, Periodo, Proceso, Usuario
from app.schemas.periodo import (
    CicloPeriodosResponse,
    PeriodoCreate,
    PeriodoEstadoRequest,
    PeriodoItem,
    PeriodoListResponse,
    PeriodoUpdate,
)
from app.scheduler.jobs import tarea_actualizar_periodos

router = APIRouter(prefix="/periodos", tags=["periodos"])


async def _obtener_periodo(db: AsyncSession, periodo_id: int) -> Periodo:
    periodo = await db.get(Periodo, periodo_id)
    if not periodo:
        raise RecursoNoEncontrado("Periodo", periodo_id)
    return periodo


@router.get(
    "",
    response_model=PeriodoListResponse,
    summary="Listar periodos",
)
async def listar_periodos(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
):
    q = select(Periodo).order_by(Periodo.anio.desc(), Periodo.fecha_inicio.desc())
    result = await db.execute(q)
    return PeriodoListResponse(
        periodos=[PeriodoItem.model_validate(p) for p in result.scalars().all()]
    )


@router.get(
    "/activo",
    response_model=PeriodoItem,
    summary="Periodo activo",
    description="Periodo Activo más reciente por fecha de inicio.",
)
async def obtener_periodo_activo(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
):
    q = (
        select(Periodo)
        .where(Periodo.estado_activo == EstadoPeriodo.ACTIVO)
        .order_by(Periodo.fecha_inicio.desc(), Periodo.id.desc())
        .limit(1)
    )
    result = await db.execute(q)
    periodo = result.scalar_one_or_none()
    if not periodo:
        raise RecursoNoEncontrado("Periodo", "activo", "No hay un periodo activo actualmente")
    return PeriodoItem.model_validate(periodo)


@router.post(
    "/ciclo",
    response_model=CicloPeriodosResponse,
    summary="Ejecutar ciclo de periodos",
    description=(
        "Ejecuta de inmediato el mismo ciclo que corre cada minuto: desactiva periodos "
        "vencidos y propaga el estado del periodo de referencia a los formatos. "
        "Responde 409 si la tarea programada está en curso."
    ),
    responses={409: {"description": "Ya hay un ciclo en ejecución"}},
)
async def ejecutar_ciclo_periodos(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    resultado = await tarea_actualizar_periodos.ejecutar_manual(db)
    return CicloPeriodosResponse(
        periodos_desactivados=resultado.periodos_desactivados,
        periodo_referencia_id=resultado.periodo_referencia_id,
        estado_deseado=resultado.estado_deseado,
        formatos_actualizados=resultado.formatos_actualizados,
        formatos_en_gracia=resultado.formatos_en_gracia,
        formatos_modificados_durante_ciclo=resultado.formatos_modificados_durante_ciclo,
    )


@router.get(
    "/{periodo_id}",
    response_model=PeriodoItem,
    summary="Obtener periodo",
)
async def obtener_periodo(
    periodo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
):
    return PeriodoItem.model_validate(await _obtener_periodo(db, periodo_id))


@router.post(
    "",
    response_model=PeriodoItem,
    status_code=status.HTTP_201_CREATED,
    summary="Crear periodo",
)
async def crear_periodo(
    body: PeriodoCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    periodo = Periodo(**body.model_dump())
    db.add(periodo)
    await db.flush()
    return PeriodoItem.model_validate(periodo)


@router.put(
    "/{periodo_id}",
    response_model=PeriodoItem,
    summary="Actualizar periodo",
)
async def actualizar_periodo(
    periodo_id: int,
    body: PeriodoUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    periodo = await _obtener_periodo(db, periodo_id)
    for campo, valor in body.model_dump().items():
        setattr(periodo, campo, valor)
    await db.flush()
    return PeriodoItem.model_validate(periodo)


@router.patch(
    "/{periodo_id}/estado",
    response_model=PeriodoItem,
    summary="Cambiar estado de un periodo",
    description="Cambio manual a Activo o Inactivo. El ciclo automático nunca reactiva un periodo.",
)
async def cambiar_estado_periodo(
    periodo_id: int,
    body: PeriodoEstadoRequest,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    periodo = await _obtener_periodo(db, periodo_id)
    periodo.estado_activo = body.nuevo_estado
    await db.flush()
    return PeriodoItem.model_validate(periodo)


@router.delete(
    "/{periodo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar periodo",
)
async def eliminar_periodo(
    periodo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    periodo = await _obtener_periodo(db, periodo_id)
    en_uso = await db.execute(select(Proceso.id).where(Proceso.periodo_id == periodo_id).limit(1))
    if en_uso.scalar_one_or_none() is not None:
        raise ErrorValidacion(
            "El periodo tiene procesos registrados y no puede eliminarse", campo="periodo_id"
        )
    await db.delete(periodo)
    await db.flush()

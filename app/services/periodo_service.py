"""Ciclo de vida de periodos y cascada de su estado a los formatos.

Cada ejecución del ciclo:

1. desactiva los periodos Activo cuya fecha/hora de fin ya pasó,
2. toma como referencia el periodo con el id más alto,
3. propaga su estado a los formatos (Inactivo -> Bloqueado, Activo -> Activo),
   respetando la ventana de gracia de los cambios manuales del administrador.

Cada UPDATE se confirma por separado y es idempotente; si el ciclo falla a
la mitad, la siguiente ejecución completa lo que faltó.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from app.core import reloj
from app.core.config import settings
from app.models.formato import EstadoFormato, Formato
from app.models.periodo import EstadoPeriodo, Periodo

logger = logging.getLogger(__name__)


@dataclass
class ResultadoCiclo:
    """Resumen de una ejecución del ciclo."""

    periodos_desactivados: list[int] = field(default_factory=list)
    periodo_referencia_id: int | None = None
    estado_deseado: str | None = None
    formatos_actualizados: list[str] = field(default_factory=list)
    formatos_en_gracia: list[str] = field(default_factory=list)
    formatos_modificados_durante_ciclo: list[str] = field(default_factory=list)

    @property
    def escrituras(self) -> int:
        return len(self.periodos_desactivados) + len(self.formatos_actualizados)


def fin_periodo(periodo: Periodo) -> datetime:
    """Instante de fin del periodo: fecha_fin + hora_fin en la zona local."""
    return datetime.combine(periodo.fecha_fin, periodo.hora_fin, tzinfo=reloj.zona_local())


def periodo_vencido(periodo: Periodo, ahora: datetime) -> bool:
    return ahora > fin_periodo(periodo)


def estado_formato_deseado(estado_periodo: str) -> str:
    """Estado que deben tener los formatos según el estado del periodo de referencia."""
    if estado_periodo == EstadoPeriodo.INACTIVO:
        return EstadoFormato.BLOQUEADO
    return EstadoFormato.ACTIVO


def horas_desde_cambio_manual(formato: Formato, ahora: datetime) -> float | None:
    """Horas transcurridas desde el último cambio manual; None si nunca hubo uno."""
    if formato.ultima_modificacion_manual is None:
        return None
    delta = ahora - reloj.como_aware(formato.ultima_modificacion_manual)
    return delta.total_seconds() / 3600


def en_ventana_gracia(formato: Formato, ahora: datetime, horas_gracia: int | None = None) -> bool:
    """True si el cambio manual es reciente y la cascada no debe tocar el formato."""
    if horas_gracia is None:
        horas_gracia = settings.ventana_gracia_horas
    horas = horas_desde_cambio_manual(formato, ahora)
    if horas is None:
        return False
    return horas <= horas_gracia


async def desactivar_periodos_vencidos(db: AsyncSession, ahora: datetime) -> list[int]:
    """Pasa a Inactivo cada periodo Activo cuyo fin ya pasó. Devuelve los ids desactivados."""
    q = (
        select(Periodo)
        .where(Periodo.estado_activo == EstadoPeriodo.ACTIVO)
        .order_by(Periodo.id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    periodos = result.scalars().all()

    desactivados = []
    for periodo in periodos:
        if not periodo_vencido(periodo, ahora):
            continue
        periodo.estado_activo = EstadoPeriodo.INACTIVO
        await db.commit()
        desactivados.append(periodo.id)
        logger.info(
            "Periodo %s (%s %s) desactivado automáticamente; terminó %s",
            periodo.id, periodo.fase, periodo.anio, fin_periodo(periodo).isoformat(),
        )
    return desactivados


async def obtener_periodo_referencia(db: AsyncSession) -> Periodo | None:
    """Periodo que gobierna la cascada: el de id más alto, sin importar sus fechas."""
    q = (
        select(Periodo)
        .order_by(Periodo.id.desc())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def actualizar_formato_si_no_cambio(
    db: AsyncSession, formato: Formato, estado_deseado: str
) -> bool:
    """UPDATE condicionado al estado y la marca manual tal como se leyeron.

    Devuelve False si otra escritura cambió el formato desde la lectura;
    la marca manual nunca se modifica aquí.
    """
    marca_leida = formato.ultima_modificacion_manual
    if marca_leida is None:
        condicion_marca = Formato.ultima_modificacion_manual.is_(None)
    else:
        condicion_marca = Formato.ultima_modificacion_manual == marca_leida

    stmt = (
        update(Formato)
        .where(
            Formato.id == formato.id,
            Formato.estado == formato.estado,
            condicion_marca,
        )
        .values(estado=estado_deseado)
        .returning(Formato.id)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    aplicado = result.scalar_one_or_none() is not None
    await db.commit()

    if aplicado:
        set_committed_value(formato, "estado", estado_deseado)
    else:
        await db.refresh(formato)
    return aplicado


async def propagar_estado_formatos(
    db: AsyncSession,
    estado_deseado: str,
    ahora: datetime,
    resultado: ResultadoCiclo | None = None,
) -> ResultadoCiclo:
    """Aplica estado_deseado a los formatos fuera de la ventana de gracia.

    La actualización es condicional sobre el estado y la marca manual leídos:
    si un administrador cambió el formato entre la lectura y la escritura,
    el UPDATE no afecta filas y el formato se deja como está.
    """
    if resultado is None:
        resultado = ResultadoCiclo(estado_deseado=estado_deseado)

    q = select(Formato).order_by(Formato.id).execution_options(populate_existing=True)
    result = await db.execute(q)
    formatos = result.scalars().all()

    for formato in formatos:
        if en_ventana_gracia(formato, ahora):
            if formato.estado != estado_deseado:
                logger.debug(
                    "Formato '%s' omitido: cambio manual hace %.1f h",
                    formato.nombre_documento, horas_desde_cambio_manual(formato, ahora),
                )
            resultado.formatos_en_gracia.append(formato.nombre_documento)
            continue
        if formato.estado == estado_deseado:
            continue

        if not await actualizar_formato_si_no_cambio(db, formato, estado_deseado):
            resultado.formatos_modificados_durante_ciclo.append(formato.nombre_documento)
            logger.info(
                "Formato '%s' cambió durante el ciclo; se conserva el cambio concurrente",
                formato.nombre_documento,
            )
            continue
        resultado.formatos_actualizados.append(formato.nombre_documento)
        logger.info("Formato '%s' -> %s por cascada de periodo", formato.nombre_documento, estado_deseado)

    return resultado


async def ejecutar_ciclo(db: AsyncSession, ahora: datetime | None = None) -> ResultadoCiclo:
    """Una ejecución completa: vencimientos, periodo de referencia y cascada, en ese orden."""
    if ahora is None:
        ahora = reloj.ahora()

    resultado = ResultadoCiclo()
    resultado.periodos_desactivados = await desactivar_periodos_vencidos(db, ahora)

    referencia = await obtener_periodo_referencia(db)
    if referencia is None:
        logger.debug("No hay periodos registrados; se omite la cascada de formatos")
        return resultado

    resultado.periodo_referencia_id = referencia.id
    resultado.estado_deseado = estado_formato_deseado(referencia.estado_activo)
    await propagar_estado_formatos(db, resultado.estado_deseado, ahora, resultado)
    return resultado

"""Flujo de revisión de documentos: entrega, aprobación, rechazo y eliminación.

Estados: Pendiente (inicial) -> Aprobado | Rechazado. Una nueva entrega
para el mismo (usuario, proceso, tipo) reemplaza el archivo y regresa el
documento a Pendiente sin comentarios.
"""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core import reloj
from app.core.config import settings
from app.core.exceptions import ErrorValidacion, RecursoNoEncontrado
from app.models.documento import Documento, EstatusDocumento
from app.models.formato import EstadoFormato, Formato
from app.models.proceso import Proceso
from app.models.tipo_documento import TipoDocumento
from app.models.user import Usuario
from app.services.almacenamiento import CARPETA_DOCUMENTOS, AlmacenArchivos
from app.services.autorizacion import (
    es_administrativo,
    exigir_administrativo,
    exigir_propietario_o_administrativo,
)

logger = logging.getLogger(__name__)


async def obtener_documento(db: AsyncSession, documento_id: int) -> Documento:
    result = await db.execute(select(Documento).where(Documento.id == documento_id))
    documento = result.scalar_one_or_none()
    if documento is None:
        raise RecursoNoEncontrado("Documento", documento_id)
    return documento


async def verificar_formato_disponible(db: AsyncSession, tipo: TipoDocumento) -> None:
    """Rechaza la entrega si el formato con el mismo nombre que el tipo está Bloqueado."""
    result = await db.execute(select(Formato).where(Formato.nombre_documento == tipo.nombre))
    formato = result.scalar_one_or_none()
    if formato is not None and formato.estado == EstadoFormato.BLOQUEADO:
        raise ErrorValidacion(
            f"El formato '{tipo.nombre}' está bloqueado; no se reciben entregas en este momento",
            campo="tipo_documento_id",
        )


async def subir_documento(
    db: AsyncSession,
    actor: Usuario,
    proceso_id: int,
    tipo_documento_id: int,
    nombre_original: str,
    contenido: bytes,
    almacen: AlmacenArchivos,
    ahora: datetime | None = None,
) -> Documento:
    """Entrega o reemplaza el documento del estudiante dueño del proceso."""
    proceso = await db.get(Proceso, proceso_id)
    if proceso is None:
        raise RecursoNoEncontrado("Proceso", proceso_id)
    exigir_propietario_o_administrativo(actor, proceso.usuario_id)

    tipo = await db.get(TipoDocumento, tipo_documento_id)
    if tipo is None:
        raise RecursoNoEncontrado("TipoDocumento", tipo_documento_id)
    if not contenido:
        raise ErrorValidacion("El archivo está vacío", campo="archivo")
    if settings.bloquear_envio_formato_bloqueado:
        await verificar_formato_disponible(db, tipo)

    q = select(Documento).where(
        Documento.usuario_id == proceso.usuario_id,
        Documento.proceso_id == proceso.id,
        Documento.tipo_documento_id == tipo.id,
    )
    result = await db.execute(q)
    documento = result.scalar_one_or_none()
    ruta_anterior = documento.ruta_archivo if documento else None

    ruta_nueva = almacen.guardar(CARPETA_DOCUMENTOS, nombre_original, contenido)
    fecha = ahora or reloj.ahora()
    try:
        if documento is None:
            documento = Documento(
                nombre_archivo=nombre_original,
                ruta_archivo=ruta_nueva,
                tipo_documento_id=tipo.id,
                usuario_id=proceso.usuario_id,
                proceso_id=proceso.id,
                estatus=EstatusDocumento.PENDIENTE,
                comentarios=None,
                fecha_subida=fecha,
            )
            db.add(documento)
        else:
            documento.nombre_archivo = nombre_original
            documento.ruta_archivo = ruta_nueva
            documento.estatus = EstatusDocumento.PENDIENTE
            documento.comentarios = None
            documento.fecha_subida = fecha
            documento.fecha_revision = None
            documento.revisado_por_id = None
        await db.commit()
    except Exception:
        await db.rollback()
        almacen.eliminar(CARPETA_DOCUMENTOS, ruta_nueva)
        raise

    if ruta_anterior:
        almacen.eliminar(CARPETA_DOCUMENTOS, ruta_anterior)
    logger.info(
        "Documento %s (%s) entregado para proceso %s por usuario %s",
        documento.id, tipo.nombre, proceso.id, actor.id,
    )
    return documento


async def aprobar_documento(
    db: AsyncSession,
    actor: Usuario,
    documento_id: int,
    ahora: datetime | None = None,
) -> Documento:
    """Aprueba sin importar el estatus actual; aprobar dos veces no es un error."""
    exigir_administrativo(actor)
    documento = await obtener_documento(db, documento_id)

    documento.estatus = EstatusDocumento.APROBADO
    documento.comentarios = None
    documento.fecha_revision = ahora or reloj.ahora()
    documento.revisado_por_id = actor.id
    await db.commit()
    logger.info("Documento %s aprobado por usuario %s", documento.id, actor.id)
    return documento


async def rechazar_documento(
    db: AsyncSession,
    actor: Usuario,
    documento_id: int,
    comentarios: str | None,
    ahora: datetime | None = None,
) -> Documento:
    exigir_administrativo(actor)
    texto = (comentarios or "").strip()
    if not texto:
        raise ErrorValidacion(
            "Los comentarios son obligatorios para rechazar un documento", campo="comentarios"
        )
    documento = await obtener_documento(db, documento_id)

    documento.estatus = EstatusDocumento.RECHAZADO
    documento.comentarios = texto
    documento.fecha_revision = ahora or reloj.ahora()
    documento.revisado_por_id = actor.id
    await db.commit()
    logger.info("Documento %s rechazado por usuario %s", documento.id, actor.id)
    return documento


async def eliminar_documento(
    db: AsyncSession,
    actor: Usuario,
    documento_id: int,
    almacen: AlmacenArchivos,
) -> None:
    documento = await obtener_documento(db, documento_id)
    exigir_propietario_o_administrativo(actor, documento.usuario_id)
    ruta = documento.ruta_archivo

    await db.delete(documento)
    await db.commit()
    almacen.eliminar(CARPETA_DOCUMENTOS, ruta)
    logger.info("Documento %s eliminado por usuario %s", documento_id, actor.id)


async def obtener_documento_para_descarga(
    db: AsyncSession,
    actor: Usuario,
    documento_id: int,
    almacen: AlmacenArchivos,
) -> Documento:
    documento = await obtener_documento(db, documento_id)
    exigir_propietario_o_administrativo(actor, documento.usuario_id)
    if not almacen.existe(CARPETA_DOCUMENTOS, documento.ruta_archivo):
        raise RecursoNoEncontrado("Archivo", documento.nombre_archivo)
    return documento


async def listar_documentos(
    db: AsyncSession,
    actor: Usuario,
    estatus: str | None = None,
    periodo_id: int | None = None,
    tipo_documento_id: int | None = None,
) -> list[Documento]:
    """Administrativos ven todos los documentos; el resto solo los propios."""
    q = (
        select(Documento)
        .join(Proceso, Proceso.id == Documento.proceso_id)
        .options(selectinload(Documento.usuario), selectinload(Documento.proceso))
        .order_by(Documento.fecha_subida.desc(), Documento.id.desc())
    )
    if not es_administrativo(actor):
        q = q.where(Documento.usuario_id == actor.id)
    if estatus:
        q = q.where(Documento.estatus == estatus)
    if periodo_id is not None:
        q = q.where(Proceso.periodo_id == periodo_id)
    if tipo_documento_id is not None:
        q = q.where(Documento.tipo_documento_id == tipo_documento_id)

    result = await db.execute(q)
    return list(result.scalars().unique().all())

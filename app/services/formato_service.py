"""Servicio de formatos: subida/reemplazo de archivo y cambios manuales de estado."""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import reloj
from app.core.exceptions import ErrorValidacion, RecursoNoEncontrado
from app.models.formato import EstadoFormato, Formato
from app.models.user import Usuario
from app.services.almacenamiento import CARPETA_FORMATOS, AlmacenArchivos
from app.services.autorizacion import exigir_administrativo

logger = logging.getLogger(__name__)


async def obtener_formato(db: AsyncSession, nombre_documento: str) -> Formato:
    result = await db.execute(select(Formato).where(Formato.nombre_documento == nombre_documento))
    formato = result.scalar_one_or_none()
    if formato is None:
        raise RecursoNoEncontrado("Formato", nombre_documento)
    return formato


async def listar_formatos(db: AsyncSession) -> list[Formato]:
    result = await db.execute(select(Formato).order_by(Formato.nombre_documento))
    return list(result.scalars().all())


async def listar_formatos_disponibles(db: AsyncSession) -> list[Formato]:
    """Formatos que un estudiante puede descargar: con archivo y en estado Activo."""
    q = (
        select(Formato)
        .where(Formato.estado == EstadoFormato.ACTIVO, Formato.nombre_archivo.is_not(None))
        .order_by(Formato.nombre_documento)
    )
    result = await db.execute(q)
    return list(result.scalars().all())


async def subir_formato(
    db: AsyncSession,
    actor: Usuario,
    nombre_documento: str,
    nombre_original: str,
    contenido: bytes,
    almacen: AlmacenArchivos,
) -> Formato:
    """Crea el formato o reemplaza su archivo.

    Orden: archivo nuevo -> fila -> commit -> borrar archivo anterior.
    Si el commit falla se borra el archivo nuevo y la fila sigue
    apuntando al anterior.
    """
    exigir_administrativo(actor)
    nombre = (nombre_documento or "").strip()
    if not nombre:
        raise ErrorValidacion("El nombre del formato es obligatorio", campo="nombre_documento")
    if not contenido:
        raise ErrorValidacion("El archivo está vacío", campo="archivo")

    result = await db.execute(select(Formato).where(Formato.nombre_documento == nombre))
    formato = result.scalar_one_or_none()
    archivo_anterior = formato.nombre_archivo if formato else None

    archivo_nuevo = almacen.guardar(CARPETA_FORMATOS, nombre_original, contenido)
    try:
        if formato is None:
            formato = Formato(
                nombre_documento=nombre,
                nombre_archivo=archivo_nuevo,
                estado=EstadoFormato.ACTIVO,
            )
            db.add(formato)
        else:
            formato.nombre_archivo = archivo_nuevo
        await db.commit()
    except Exception:
        await db.rollback()
        almacen.eliminar(CARPETA_FORMATOS, archivo_nuevo)
        raise

    if archivo_anterior:
        almacen.eliminar(CARPETA_FORMATOS, archivo_anterior)
    logger.info("Formato '%s' subido por usuario %s", nombre, actor.id)
    return formato


async def cambiar_estado_formato(
    db: AsyncSession,
    actor: Usuario,
    nombre_documento: str,
    estado: str,
    ahora: datetime | None = None,
) -> Formato:
    """Cambio manual del administrador; abre la ventana de gracia frente a la cascada."""
    exigir_administrativo(actor)
    if estado not in EstadoFormato.TODOS:
        raise ErrorValidacion(
            f"Estado no válido. Debe ser uno de: {', '.join(EstadoFormato.TODOS)}", campo="estado"
        )
    formato = await obtener_formato(db, nombre_documento)

    formato.estado = estado
    # Siempre en UTC: SQLite guarda la marca sin offset
    formato.ultima_modificacion_manual = (ahora or reloj.ahora()).astimezone(timezone.utc)
    await db.commit()
    logger.info("Formato '%s' -> %s (cambio manual de usuario %s)", nombre_documento, estado, actor.id)
    return formato


async def eliminar_formato(
    db: AsyncSession,
    actor: Usuario,
    nombre_documento: str,
    almacen: AlmacenArchivos,
) -> None:
    exigir_administrativo(actor)
    formato = await obtener_formato(db, nombre_documento)
    archivo = formato.nombre_archivo

    await db.delete(formato)
    await db.commit()
    almacen.eliminar(CARPETA_FORMATOS, archivo)

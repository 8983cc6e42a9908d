"""Endpoints de formatos descargables (plantillas administradas por el área de estadías)."""
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import get_current_user, require_administrativo
from app.core.database import get_db
from app.core.exceptions import RecursoNoEncontrado
from app.models import Usuario
from app.schemas.formato import FormatoEstadoRequest, FormatoItem, FormatoListResponse
from app.services import formato_service
from app.services.almacenamiento import CARPETA_FORMATOS, AlmacenArchivos, get_almacen, tipo_contenido

router = APIRouter(prefix="/formatos", tags=["formatos"])


@router.get(
    "",
    response_model=FormatoListResponse,
    summary="Listar formatos",
    description="Todos los formatos con su estado y la fecha del último cambio manual.",
)
async def listar_formatos(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_administrativo),
):
    formatos = await formato_service.listar_formatos(db)
    return FormatoListResponse(formatos=[FormatoItem.model_validate(f) for f in formatos])


@router.get(
    "/disponibles",
    response_model=FormatoListResponse,
    summary="Formatos disponibles",
    description="Formatos con archivo y en estado Activo; los que ve el estudiante.",
)
async def listar_formatos_disponibles(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
):
    formatos = await formato_service.listar_formatos_disponibles(db)
    return FormatoListResponse(formatos=[FormatoItem.model_validate(f) for f in formatos])


@router.post(
    "/upload",
    response_model=FormatoItem,
    status_code=status.HTTP_201_CREATED,
    summary="Subir o reemplazar formato",
    responses={
        400: {"description": "Faltan campos obligatorios"},
        403: {"description": "Solo administradores y coordinadores"},
    },
)
async def subir_formato(
    nombre_documento: str = Form(..., description="Nombre del formato (ej. Carta de presentación)"),
    archivo: UploadFile = File(..., description="Archivo PDF o Word"),
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_administrativo),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    contenido = await archivo.read()
    formato = await formato_service.subir_formato(
        db, current_user, nombre_documento, archivo.filename or "", contenido, almacen
    )
    return FormatoItem.model_validate(formato)


@router.put(
    "/estado",
    response_model=FormatoItem,
    summary="Cambiar estado de un formato",
    description=(
        "Cambio manual a Activo o Bloqueado. Durante las siguientes horas de la ventana "
        "de gracia el ciclo automático no modifica este formato."
    ),
)
async def cambiar_estado_formato(
    body: FormatoEstadoRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_administrativo),
):
    formato = await formato_service.cambiar_estado_formato(
        db, current_user, body.nombre_documento, body.estado
    )
    return FormatoItem.model_validate(formato)


@router.get(
    "/download/{nombre_documento}",
    summary="Descargar formato",
    response_class=FileResponse,
)
async def descargar_formato(
    nombre_documento: str,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    formato = await formato_service.obtener_formato(db, nombre_documento)
    if not almacen.existe(CARPETA_FORMATOS, formato.nombre_archivo):
        raise RecursoNoEncontrado("Archivo", nombre_documento)
    return FileResponse(
        almacen.ruta(CARPETA_FORMATOS, formato.nombre_archivo),
        media_type=tipo_contenido(formato.nombre_archivo),
        filename=formato.nombre_archivo,
    )


@router.get(
    "/view/{nombre_documento}",
    summary="Ver formato en el navegador",
    description="Los PDF se muestran en línea; cualquier otro tipo redirige a la descarga.",
    responses={302: {"description": "Redirección a /download para archivos que no son PDF"}},
)
async def ver_formato(
    nombre_documento: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    formato = await formato_service.obtener_formato(db, nombre_documento)
    if not almacen.existe(CARPETA_FORMATOS, formato.nombre_archivo):
        raise RecursoNoEncontrado("Archivo", nombre_documento)

    if tipo_contenido(formato.nombre_archivo) != "application/pdf":
        return RedirectResponse(
            request.url_for("descargar_formato", nombre_documento=nombre_documento),
            status_code=status.HTTP_302_FOUND,
        )
    return FileResponse(
        almacen.ruta(CARPETA_FORMATOS, formato.nombre_archivo),
        media_type="application/pdf",
        filename=formato.nombre_archivo,
        content_disposition_type="inline",
    )


@router.delete(
    "/{nombre_documento}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar formato",
)
async def eliminar_formato(
    nombre_documento: str,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_administrativo),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    await formato_service.eliminar_formato(db, current_user, nombre_documento, almacen)

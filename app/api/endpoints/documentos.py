"""Endpoints de documentos entregados por estudiantes y su revisión."""
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import get_current_user, require_administrativo
from app.core.database import get_db
from app.models import TipoDocumento, Usuario
from app.schemas.documento import (
    DocumentoItem,
    DocumentoListItem,
    DocumentoListResponse,
    RechazoRequest,
    TipoDocumentoItem,
)
from app.services import documento_service
from app.services.almacenamiento import CARPETA_DOCUMENTOS, AlmacenArchivos, get_almacen, tipo_contenido

router = APIRouter(prefix="/documentos", tags=["documentos"])


@router.get(
    "/tipos",
    response_model=list[TipoDocumentoItem],
    summary="Catálogo de tipos de documento",
)
async def listar_tipos_documento(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(get_current_user),
):
    result = await db.execute(select(TipoDocumento).order_by(TipoDocumento.nombre))
    return [TipoDocumentoItem.model_validate(t) for t in result.scalars().all()]


@router.get(
    "",
    response_model=DocumentoListResponse,
    summary="Listar documentos",
    description="Administradores y coordinadores ven todos los documentos; el resto solo los propios.",
)
async def listar_documentos(
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
    estatus: Annotated[str | None, Query(description="Pendiente, Aprobado o Rechazado")] = None,
    periodo_id: Annotated[int | None, Query(description="Filtrar por periodo")] = None,
    tipo_documento_id: Annotated[int | None, Query(description="Filtrar por tipo de documento")] = None,
):
    documentos = await documento_service.listar_documentos(
        db, current_user, estatus=estatus, periodo_id=periodo_id, tipo_documento_id=tipo_documento_id
    )
    items = [
        DocumentoListItem(
            **DocumentoItem.model_validate(d).model_dump(),
            tipo_documento=d.tipo_documento.nombre,
            nombre_estudiante=d.usuario.nombre_completo,
            periodo_id=d.proceso.periodo_id,
        )
        for d in documentos
    ]
    return DocumentoListResponse(total=len(items), documentos=items)


@router.post(
    "/upload",
    response_model=DocumentoItem,
    status_code=status.HTTP_201_CREATED,
    summary="Entregar documento",
    description=(
        "Sube o reemplaza el documento del tipo indicado dentro del proceso. "
        "El documento queda Pendiente y sin comentarios."
    ),
    responses={
        400: {"description": "Archivo vacío o formato bloqueado"},
        403: {"description": "El proceso no pertenece al usuario"},
        404: {"description": "Proceso o tipo de documento inexistente"},
    },
)
async def subir_documento(
    proceso_id: int = Form(...),
    tipo_documento_id: int = Form(...),
    archivo: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    contenido = await archivo.read()
    documento = await documento_service.subir_documento(
        db, current_user, proceso_id, tipo_documento_id, archivo.filename or "", contenido, almacen
    )
    return DocumentoItem.model_validate(documento)


@router.put(
    "/{documento_id}/aprobar",
    response_model=DocumentoItem,
    summary="Aprobar documento",
)
async def aprobar_documento(
    documento_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_administrativo),
):
    documento = await documento_service.aprobar_documento(db, current_user, documento_id)
    return DocumentoItem.model_validate(documento)


@router.put(
    "/{documento_id}/rechazar",
    response_model=DocumentoItem,
    summary="Rechazar documento",
    responses={400: {"description": "Comentarios vacíos"}},
)
async def rechazar_documento(
    documento_id: int,
    body: RechazoRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_administrativo),
):
    documento = await documento_service.rechazar_documento(
        db, current_user, documento_id, body.comentarios
    )
    return DocumentoItem.model_validate(documento)


@router.get(
    "/{documento_id}/download",
    summary="Descargar documento",
    response_class=FileResponse,
)
async def descargar_documento(
    documento_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    documento = await documento_service.obtener_documento_para_descarga(
        db, current_user, documento_id, almacen
    )
    return FileResponse(
        almacen.ruta(CARPETA_DOCUMENTOS, documento.ruta_archivo),
        media_type=tipo_contenido(documento.nombre_archivo),
        filename=documento.nombre_archivo,
    )


@router.delete(
    "/{documento_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar documento",
    description="Solo el estudiante dueño o un administrador/coordinador.",
)
async def eliminar_documento(
    documento_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
    almacen: AlmacenArchivos = Depends(get_almacen),
):
    await documento_service.eliminar_documento(db, current_user, documento_id, almacen)

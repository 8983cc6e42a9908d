"""Routers de la API."""
from fastapi import APIRouter, Depends

from app.api.endpoints import auth, documentos, formatos, periodos, procesos
from app.api.endpoints.auth import get_current_user
from app.models import Usuario
from app.schemas.auth import UsuarioActual

router = APIRouter()
router.include_router(auth.router)
router.include_router(periodos.router)
router.include_router(formatos.router)
router.include_router(documentos.router)
router.include_router(procesos.router)


@router.get(
    "/me",
    response_model=UsuarioActual,
    tags=["api"],
    summary="Usuario actual (protegido)",
    responses={401: {"description": "Token no enviado, inválido o expirado"}},
)
async def get_me(current_user: Usuario = Depends(get_current_user)):
    """Devuelve el usuario autenticado con el nombre de su rol."""
    return UsuarioActual(
        id=current_user.id,
        nombre=current_user.nombre,
        apellido_paterno=current_user.apellido_paterno,
        apellido_materno=current_user.apellido_materno,
        email=current_user.email,
        rol=current_user.rol_nombre,
        estado=current_user.estado,
    )


@router.get(
    "/",
    tags=["api"],
    summary="Raíz de la API v1",
)
async def api_root():
    """Información básica de la API y enlace a la documentación Swagger."""
    return {"message": "Portal de Estadías API v1", "docs": "/docs", "redoc": "/redoc"}

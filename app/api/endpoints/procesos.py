"""Endpoints de registro de procesos."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.endpoints.auth import get_current_user
from app.core.database import get_db
from app.models import Usuario
from app.schemas.proceso import ProcesoCreate, ProcesoItem, ProcesoListResponse
from app.services import proceso_service

router = APIRouter(prefix="/procesos", tags=["procesos"])


@router.post(
    "",
    response_model=ProcesoItem,
    status_code=status.HTTP_201_CREATED,
    summary="Registrarse en un proceso",
    description="El estudiante se registra en estadía, estancia o servicio social de un periodo Activo.",
)
async def registrar_proceso(
    body: ProcesoCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    proceso = await proceso_service.registrar_proceso(
        db, current_user, body.periodo_id, body.tipo_proceso
    )
    return ProcesoItem.model_validate(proceso)


@router.get(
    "/mios",
    response_model=ProcesoListResponse,
    summary="Mis procesos",
)
async def listar_mis_procesos(
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    procesos = await proceso_service.listar_procesos_usuario(db, current_user.id)
    return ProcesoListResponse(procesos=[ProcesoItem.model_validate(p) for p in procesos])

"""Punto de entrada de la aplicación FastAPI."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api import router as api_router
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import ErrorAlmacenamiento, ErrorPortal
from app.core.logging import setup_logging
from app.models import *  # noqa: F401, F403 - Registra modelos en Base.metadata antes de init_db
from app.scheduler.jobs import crear_scheduler

setup_logging()
logger = logging.getLogger(__name__)

# Documentación Swagger: disponible en /docs (OpenAPI 3.0)
OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Autenticación: login con correo y contraseña. Devuelve un JWT para usar en endpoints protegidos.",
    },
    {
        "name": "api",
        "description": "Endpoints generales de la API v1.",
    },
    {
        "name": "periodos",
        "description": "Periodos académicos: alta, edición, estado manual y ejecución inmediata del ciclo automático.",
    },
    {
        "name": "formatos",
        "description": "Formatos descargables: subida, estado Activo/Bloqueado y descarga.",
    },
    {
        "name": "documentos",
        "description": "Entrega de documentos por estudiantes y su revisión (aprobar/rechazar).",
    },
    {
        "name": "procesos",
        "description": "Registro de estudiantes en estadía, estancia o servicio social.",
    },
    {
        "name": "salud",
        "description": "Comprobación del estado del servicio.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestiona el ciclo de vida: tablas al iniciar y scheduler de periodos."""
    await init_db()

    scheduler = None
    if settings.scheduler_habilitado:
        scheduler = crear_scheduler()
        scheduler.start()
        logger.info(
            "Ciclo de actualización de periodos iniciado (cada %s s)",
            settings.periodos_intervalo_segundos,
        )
    else:
        logger.info("Scheduler deshabilitado; el ciclo de periodos solo corre vía POST /periodos/ciclo")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title=settings.app_name,
    description="""
API REST del **Portal de Estadías**: periodos académicos, formatos descargables y
revisión de documentos de estadía, estancia y servicio social.

1. Obtén un token con **POST /api/v1/auth/login**.
2. En Swagger UI pulsa **Authorize** y pega solo el `access_token`.
""",
    version="0.1.0",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"persistAuthorization": True},
)


@app.exception_handler(ErrorPortal)
async def error_portal_handler(request: Request, exc: ErrorPortal):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def error_bd_handler(request: Request, exc: SQLAlchemyError):
    # El mensaje de la base de datos se queda en el log, nunca en la respuesta
    logger.error("Error de base de datos en %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    error = ErrorAlmacenamiento()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# CORS: permitir acceso desde el cliente React
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get(
    "/health",
    tags=["salud"],
    summary="Estado del servicio",
)
async def health_check():
    """Comprueba que el servicio está activo. No requiere autenticación."""
    return {"status": "ok", "message": "Servicio en ejecución"}

"""
Portal de Estadías - configuración y fixtures de pruebas
"""
import os
from datetime import date, datetime, time, timezone
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Entorno de pruebas: antes de importar la app
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_portal.db"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["SCHEDULER_HABILITADO"] = "false"
os.environ["ZONA_HORARIA"] = "America/Mexico_City"

from app.main import app
from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.models import (
    Documento,
    EstadoFormato,
    EstadoPeriodo,
    EstatusDocumento,
    FasePeriodo,
    Formato,
    Periodo,
    Proceso,
    Rol,
    RolUsuario,
    TipoDocumento,
    TipoProceso,
    Usuario,
)
from app.services.almacenamiento import CARPETA_DOCUMENTOS, AlmacenArchivos, get_almacen

fake = Faker("es_MX")

PASSWORD = "testpassword123"

# Sin pool: cada prueba corre en su propio event loop
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """Fábrica de sesiones independientes (para simular otro proceso o la tarea programada)."""
    return TestSessionLocal


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Base de datos limpia en cada prueba."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def almacen(tmp_path) -> AlmacenArchivos:
    return AlmacenArchivos(tmp_path / "uploads")


@pytest.fixture
async def client(db_session: AsyncSession, almacen: AlmacenArchivos) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP contra la app con la sesión y el almacén de prueba."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_almacen] = lambda: almacen

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
async def roles(db_session: AsyncSession) -> dict[str, Rol]:
    registrados = {nombre: Rol(nombre=nombre) for nombre in RolUsuario.TODOS}
    db_session.add_all(registrados.values())
    await db_session.commit()
    return registrados


async def _crear_usuario(db: AsyncSession, rol: Rol) -> Usuario:
    usuario = Usuario(
        nombre=fake.first_name(),
        apellido_paterno=fake.last_name(),
        apellido_materno=fake.last_name(),
        email=f"{fake.unique.numerify('17########')}@utt.edu.mx",
        password_hash=hash_password(PASSWORD),
        rol=rol,
        estado="activo",
    )
    db.add(usuario)
    await db.commit()
    return usuario


@pytest.fixture
async def estudiante(db_session, roles) -> Usuario:
    return await _crear_usuario(db_session, roles[RolUsuario.ESTUDIANTE])


@pytest.fixture
async def otro_estudiante(db_session, roles) -> Usuario:
    return await _crear_usuario(db_session, roles[RolUsuario.ESTUDIANTE])


@pytest.fixture
async def administrador(db_session, roles) -> Usuario:
    return await _crear_usuario(db_session, roles[RolUsuario.ADMINISTRADOR])


@pytest.fixture
async def coordinador(db_session, roles) -> Usuario:
    return await _crear_usuario(db_session, roles[RolUsuario.COORDINADOR])


def headers_de(usuario: Usuario) -> dict:
    """Header Authorization con un JWT para el usuario."""
    token = create_access_token(subject=usuario.id, rol=usuario.rol_nombre)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def estudiante_headers(estudiante) -> dict:
    return headers_de(estudiante)


@pytest.fixture
def otro_estudiante_headers(otro_estudiante) -> dict:
    return headers_de(otro_estudiante)


@pytest.fixture
def admin_headers(administrador) -> dict:
    return headers_de(administrador)


@pytest.fixture
def coordinador_headers(coordinador) -> dict:
    return headers_de(coordinador)


@pytest.fixture
async def periodo(db_session) -> Periodo:
    """Periodo Activo que termina en el futuro lejano."""
    p = Periodo(
        anio=2099,
        fase=FasePeriodo.ENERO_ABRIL,
        fecha_inicio=date(2099, 1, 5),
        fecha_fin=date(2099, 4, 30),
        hora_fin=time(23, 59, 59),
        estado_activo=EstadoPeriodo.ACTIVO,
    )
    db_session.add(p)
    await db_session.commit()
    return p


@pytest.fixture
async def proceso(db_session, estudiante, periodo) -> Proceso:
    p = Proceso(
        usuario_id=estudiante.id,
        periodo_id=periodo.id,
        tipo_proceso=TipoProceso.ESTADIA,
        fecha_registro=datetime(2099, 1, 10, tzinfo=timezone.utc),
    )
    db_session.add(p)
    await db_session.commit()
    return p


@pytest.fixture
async def tipo_documento(db_session) -> TipoDocumento:
    tipo = TipoDocumento(nombre="Carta de presentación")
    db_session.add(tipo)
    await db_session.commit()
    return tipo


@pytest.fixture
async def formato(db_session, tipo_documento) -> Formato:
    """Formato Activo con el mismo nombre que el tipo de documento."""
    f = Formato(nombre_documento=tipo_documento.nombre, estado=EstadoFormato.ACTIVO)
    db_session.add(f)
    await db_session.commit()
    return f


@pytest.fixture
async def documento(db_session, almacen, estudiante, proceso, tipo_documento) -> Documento:
    """Documento Pendiente con su archivo en disco."""
    ruta = almacen.guardar(CARPETA_DOCUMENTOS, "carta.pdf", b"%PDF-1.4 carta")
    doc = Documento(
        nombre_archivo="carta.pdf",
        ruta_archivo=ruta,
        tipo_documento_id=tipo_documento.id,
        usuario_id=estudiante.id,
        proceso_id=proceso.id,
        estatus=EstatusDocumento.PENDIENTE,
        fecha_subida=datetime(2099, 1, 15, tzinfo=timezone.utc),
    )
    db_session.add(doc)
    await db_session.commit()
    return doc

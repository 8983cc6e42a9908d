"""Crea roles, tipos de documento, formatos predefinidos y un usuario administrador.

Se puede ejecutar varias veces: solo inserta lo que falta.
"""
import asyncio
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import hash_password
from app.models import EstadoFormato, Formato, Rol, RolUsuario, TipoDocumento, Usuario

TIPOS_DOCUMENTO = [
    "Número NSS",
    "Carta de presentación",
    "Carta de aceptación",
    "Cédula de registro",
    "Definición de proyecto",
    "Carta de liberación",
    "Guía de uso",
    "Reporte Mensual",
]

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@portal-estadias.edu")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "cambiar-esta-contrasena")


async def seed_catalogos():
    await init_db()
    async with AsyncSessionLocal() as session:
        roles: dict[str, Rol] = {}
        for nombre in RolUsuario.TODOS:
            result = await session.execute(select(Rol).where(Rol.nombre == nombre))
            rol = result.scalar_one_or_none()
            if not rol:
                rol = Rol(nombre=nombre)
                session.add(rol)
                await session.flush()
                print(f"  + Rol creado: {rol.nombre} (id={rol.id})")
            roles[nombre] = rol

        for nombre in TIPOS_DOCUMENTO:
            result = await session.execute(select(TipoDocumento).where(TipoDocumento.nombre == nombre))
            if not result.scalar_one_or_none():
                session.add(TipoDocumento(nombre=nombre))
                print(f"  + Tipo de documento: {nombre}")

            # Formato sin archivo: el administrador lo sube después
            result = await session.execute(select(Formato).where(Formato.nombre_documento == nombre))
            if not result.scalar_one_or_none():
                session.add(Formato(nombre_documento=nombre, estado=EstadoFormato.ACTIVO))
                print(f"  + Formato: {nombre}")

        result = await session.execute(select(Usuario).where(Usuario.email == ADMIN_EMAIL))
        if not result.scalar_one_or_none():
            session.add(
                Usuario(
                    nombre="Administrador",
                    email=ADMIN_EMAIL,
                    password_hash=hash_password(ADMIN_PASSWORD),
                    rol_id=roles[RolUsuario.ADMINISTRADOR].id,
                )
            )
            print(f"  + Usuario administrador: {ADMIN_EMAIL}")

        await session.commit()
    print("Catálogos listos.")


if __name__ == "__main__":
    asyncio.run(seed_catalogos())

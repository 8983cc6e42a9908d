"""Utilidades de seguridad: hash de contraseñas y JWT de acceso."""
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from app.core.config import settings


def hash_password(plain_password: str) -> str:
    """Genera el hash bcrypt de la contraseña en texto."""
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Comprueba si la contraseña en texto coincide con el hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Hash con formato inválido (ej. contraseña legada en texto plano)
        return False


def create_access_token(
    subject: str | int,
    rol: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    """Genera un JWT con sub=id del usuario y el nombre de su rol."""
    now = datetime.now(timezone.utc)
    minutos = expires_minutes if expires_minutes is not None else settings.jwt_expire_minutes
    payload: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": now + timedelta(minutes=minutos),
    }
    if rol:
        payload["rol"] = rol
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decodifica y valida el JWT; devuelve el payload o None si es inválido o expiró."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        return None

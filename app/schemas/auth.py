"""Esquemas para autenticación y JWT."""
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Body del endpoint de login."""

    email: EmailStr = Field(description="Correo institucional del usuario", examples=["1721110001@utt.edu.mx"])
    password: str = Field(description="Contraseña en texto plano", min_length=1)


class TokenResponse(BaseModel):
    """Respuesta con access_token JWT y el rol del usuario."""

    access_token: str = Field(description="Token JWT para enviar en header Authorization: Bearer <token>")
    token_type: str = Field(default="bearer", description="Tipo de token (siempre 'bearer')")
    rol: str = Field(description="Nombre del rol del usuario autenticado")


class UsuarioActual(BaseModel):
    """Datos del usuario autenticado."""
    id: int
    nombre: str
    apellido_paterno: str | None = None
    apellido_materno: str | None = None
    email: str
    rol: str
    estado: str

"""Modelo Rol (RBAC)."""
from typing import TYPE_CHECKING

from sqlalchemy import Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.user import Usuario


class RolUsuario:
    """Nombres de rol permitidos."""
    ESTUDIANTE = "estudiante"
    ASESOR_ACADEMICO = "asesor_academico"
    ASESOR_EMPRESARIAL = "asesor_empresarial"
    ADMINISTRADOR = "administrador"
    COORDINADOR = "coordinador"

    TODOS = (ESTUDIANTE, ASESOR_ACADEMICO, ASESOR_EMPRESARIAL, ADMINISTRADOR, COORDINADOR)
    # Roles que revisan documentos y omiten la verificación de propiedad
    ADMINISTRATIVOS = (ADMINISTRADOR, COORDINADOR)


class Rol(Base):
    """Rol del usuario: estudiante, asesores, administrador o coordinador."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    usuarios: Mapped[list["Usuario"]] = relationship("Usuario", back_populates="rol")

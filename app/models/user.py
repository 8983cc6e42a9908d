"""Modelo Usuario (RBAC)."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.role import Rol


class Usuario(Base):
    """Usuario del portal (estudiantes, asesores, administradores)."""

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    apellido_paterno: Mapped[str | None] = mapped_column(Text, nullable=True)
    apellido_materno: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    rol_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("roles.id"), nullable=False)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default="activo", server_default=text("'activo'")
    )

    rol: Mapped["Rol"] = relationship("Rol", back_populates="usuarios", lazy="joined")

    @property
    def rol_nombre(self) -> str:
        return self.rol.nombre if self.rol else ""

    @property
    def nombre_completo(self) -> str:
        partes = [self.nombre, self.apellido_paterno, self.apellido_materno]
        return " ".join(p for p in partes if p)

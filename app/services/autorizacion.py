"""Reglas de autorización por rol y por propiedad del recurso."""
from app.core.exceptions import AccesoNoAutorizado
from app.models.role import RolUsuario
from app.models.user import Usuario


def es_administrativo(usuario: Usuario) -> bool:
    """Administradores y coordinadores revisan documentos y omiten la verificación de propiedad."""
    return usuario.rol_nombre in RolUsuario.ADMINISTRATIVOS


def exigir_rol(usuario: Usuario, roles: tuple[str, ...] | list[str]) -> None:
    if usuario.rol_nombre not in roles:
        raise AccesoNoAutorizado("Acceso no autorizado para tu rol")


def exigir_administrativo(usuario: Usuario) -> None:
    exigir_rol(usuario, RolUsuario.ADMINISTRATIVOS)


def exigir_propietario_o_administrativo(usuario: Usuario, propietario_id: int) -> None:
    if es_administrativo(usuario):
        return
    if usuario.id != propietario_id:
        raise AccesoNoAutorizado("No tienes permiso para acceder a este recurso")

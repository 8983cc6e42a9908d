"""Modelos SQLAlchemy (tablas de la base de datos)."""
from app.models.role import Rol, RolUsuario
from app.models.user import Usuario
from app.models.periodo import Periodo, EstadoPeriodo, FasePeriodo
from app.models.formato import Formato, EstadoFormato
from app.models.tipo_documento import TipoDocumento
from app.models.proceso import Proceso, TipoProceso
from app.models.documento import Documento, EstatusDocumento

__all__ = [
    "Rol",
    "RolUsuario",
    "Usuario",
    "Periodo",
    "EstadoPeriodo",
    "FasePeriodo",
    "Formato",
    "EstadoFormato",
    "TipoDocumento",
    "Proceso",
    "TipoProceso",
    "Documento",
    "EstatusDocumento",
]

"""Almacenamiento en disco de los archivos subidos (formatos y documentos)."""
import logging
import uuid
from pathlib import Path

from app.core.config import settings
from app.core.exceptions import ErrorAlmacenamiento

logger = logging.getLogger(__name__)

CARPETA_FORMATOS = "formatos"
CARPETA_DOCUMENTOS = "documentos"

TIPOS_CONTENIDO = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class AlmacenArchivos:
    """Guarda archivos con nombre único bajo base_dir/<carpeta>/."""

    def __init__(self, base_dir: str | Path | None = None):
        self.base_dir = Path(base_dir or settings.uploads_dir)

    def ruta(self, carpeta: str, nombre_guardado: str) -> Path:
        # Solo el nombre: evita escapar de la carpeta con "../"
        return self.base_dir / carpeta / Path(nombre_guardado).name

    def guardar(self, carpeta: str, nombre_original: str, contenido: bytes) -> str:
        """Escribe el archivo y devuelve el nombre con el que quedó guardado."""
        extension = Path(nombre_original).suffix.lower()
        nombre_guardado = f"archivo-{uuid.uuid4().hex}{extension}"
        destino = self.ruta(carpeta, nombre_guardado)
        try:
            destino.parent.mkdir(parents=True, exist_ok=True)
            destino.write_bytes(contenido)
        except OSError as e:
            logger.error("No se pudo guardar %s: %s", destino, e)
            raise ErrorAlmacenamiento("No se pudo guardar el archivo") from e
        return nombre_guardado

    def eliminar(self, carpeta: str, nombre_guardado: str | None) -> bool:
        """Borra el archivo si existe. Un fallo se registra pero no se propaga."""
        if not nombre_guardado:
            return False
        destino = self.ruta(carpeta, nombre_guardado)
        try:
            destino.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("No se pudo eliminar %s: %s", destino, e)
            return False
        return True

    def existe(self, carpeta: str, nombre_guardado: str | None) -> bool:
        return bool(nombre_guardado) and self.ruta(carpeta, nombre_guardado).is_file()


def tipo_contenido(nombre_archivo: str) -> str:
    return TIPOS_CONTENIDO.get(Path(nombre_archivo).suffix.lower(), "application/octet-stream")


def get_almacen() -> AlmacenArchivos:
    """Dependencia FastAPI: almacén configurado en settings.uploads_dir."""
    return AlmacenArchivos()

"""Configuración del logging de la aplicación."""
import logging
import logging.handlers
from pathlib import Path

from app.core.config import settings

LOGS_DIR = Path(__file__).resolve().parent.parent.parent / "logs"


def setup_logging(environment: str | None = None) -> None:
    """Configura el logging raíz.

    - Desarrollo: consola, nivel DEBUG.
    - Producción: consola + archivo rotativo, nivel INFO.

    Se puede llamar varias veces sin duplicar handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or settings.environment or "development").lower().strip()
    level = logging.INFO if env == "production" else logging.DEBUG

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if env == "production":
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            LOGS_DIR / "portal.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)

    logging.getLogger("uvicorn").setLevel(level)
    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
    # APScheduler registra cada ejecución del intervalo; solo interesan avisos
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

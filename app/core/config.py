"""Configuración de la aplicación mediante variables de entorno."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración cargada desde .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Portal de Estadías API"
    debug: bool = False
    environment: str = "development"

    # JWT
    jwt_secret_key: str = "cambiar-en-produccion-clave-secreta-muy-segura"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24  # 24 horas

    # PostgreSQL
    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "portal_estadias_bd"
    # Si se define, reemplaza la URL armada con postgres_* (ej. sqlite+aiosqlite en pruebas)
    database_url: str | None = None

    # Ciclo automático de periodos y formatos
    scheduler_habilitado: bool = True
    periodos_intervalo_segundos: int = 60
    periodos_timeout_segundos: int = 45
    ventana_gracia_horas: int = 24
    zona_horaria: str = "America/Mexico_City"

    # Archivos subidos (formatos y documentos de estudiantes)
    uploads_dir: str = "public/uploads"

    # Rechazar la subida de un documento cuyo formato está Bloqueado
    bloquear_envio_formato_bloqueado: bool = True

    @property
    def database_url_async(self) -> str:
        """URL para SQLAlchemy con driver asyncpg (uso en la app)."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()

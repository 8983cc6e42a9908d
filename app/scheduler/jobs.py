"""Tarea periódica que mantiene periodos y formatos al día."""
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core import reloj
from app.core.config import settings
from app.core.exceptions import CicloEnCurso, ErrorAlmacenamiento
from app.core.database import AsyncSessionLocal
from app.services import periodo_service
from app.services.periodo_service import ResultadoCiclo

logger = logging.getLogger(__name__)

JOB_ID = "actualizar_periodos"


class TareaActualizarPeriodos:
    """Ejecuta periodo_service.ejecutar_ciclo con su propia sesión.

    Nunca propaga excepciones: un ciclo fallido se registra y el siguiente
    tick lo reintenta. Si un ciclo sigue en curso, el nuevo se omite.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        reloj_actual: reloj.Reloj = reloj.ahora,
        timeout_segundos: float | None = None,
    ):
        self.session_factory = session_factory
        self.reloj_actual = reloj_actual
        self.timeout_segundos = (
            timeout_segundos if timeout_segundos is not None else settings.periodos_timeout_segundos
        )
        self._lock = asyncio.Lock()

    @property
    def en_curso(self) -> bool:
        return self._lock.locked()

    async def _ciclo(self) -> ResultadoCiclo:
        async with self.session_factory() as db:
            return await periodo_service.ejecutar_ciclo(db, self.reloj_actual())

    async def ejecutar(self) -> ResultadoCiclo | None:
        if self._lock.locked():
            logger.warning("Ciclo de periodos anterior aún en curso; se omite esta ejecución")
            return None

        async with self._lock:
            try:
                resultado = await asyncio.wait_for(self._ciclo(), timeout=self.timeout_segundos)
            except asyncio.TimeoutError:
                logger.error(
                    "Ciclo de periodos cancelado tras %s s; se reintentará en el siguiente intervalo",
                    self.timeout_segundos,
                )
                return None
            except Exception:
                logger.exception("Error al actualizar periodos automáticamente")
                return None

        if resultado.escrituras:
            logger.info(
                "Ciclo de periodos: %d periodo(s) desactivado(s), %d formato(s) -> %s",
                len(resultado.periodos_desactivados),
                len(resultado.formatos_actualizados),
                resultado.estado_deseado,
            )
        return resultado

    async def ejecutar_manual(self, db: AsyncSession) -> ResultadoCiclo:
        """Ejecución pedida por un administrador, con la sesión del request.

        Comparte el lock con la tarea programada: si hay un ciclo en curso
        lanza CicloEnCurso. Los errores se propagan al handler de la API.
        """
        if self._lock.locked():
            raise CicloEnCurso()

        async with self._lock:
            try:
                return await asyncio.wait_for(
                    periodo_service.ejecutar_ciclo(db, self.reloj_actual()),
                    timeout=self.timeout_segundos,
                )
            except asyncio.TimeoutError as e:
                logger.error("Ciclo manual de periodos cancelado tras %s s", self.timeout_segundos)
                raise ErrorAlmacenamiento("El ciclo de periodos excedió el tiempo límite") from e


tarea_actualizar_periodos = TareaActualizarPeriodos()


def crear_scheduler(tarea: TareaActualizarPeriodos | None = None) -> AsyncIOScheduler:
    """Crea el scheduler con el ciclo de periodos cada periodos_intervalo_segundos (sin iniciarlo)."""
    scheduler = AsyncIOScheduler(timezone=settings.zona_horaria)
    scheduler.add_job(
        (tarea or tarea_actualizar_periodos).ejecutar,
        trigger=IntervalTrigger(seconds=settings.periodos_intervalo_segundos),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,  # Evita ejecuciones traslapadas
        coalesce=True,    # Une ejecuciones perdidas si el proceso estuvo ocupado
    )
    return scheduler

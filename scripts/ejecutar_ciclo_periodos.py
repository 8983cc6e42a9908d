"""Ejecuta una vez el ciclo de periodos y formatos y muestra el resultado.

Útil para revisar el efecto del ciclo sin esperar al scheduler:

    python scripts/ejecutar_ciclo_periodos.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.database import AsyncSessionLocal
from app.core.logging import setup_logging
from app.services.periodo_service import ejecutar_ciclo


async def main():
    setup_logging()
    async with AsyncSessionLocal() as db:
        resultado = await ejecutar_ciclo(db)

    print("=" * 60)
    print("CICLO DE PERIODOS")
    print("=" * 60)
    print(f"Periodos desactivados: {resultado.periodos_desactivados or 'ninguno'}")
    if resultado.periodo_referencia_id is None:
        print("No hay periodos registrados; no se evaluaron formatos.")
        return
    print(f"Periodo de referencia: {resultado.periodo_referencia_id}")
    print(f"Estado deseado de formatos: {resultado.estado_deseado}")
    print(f"Formatos actualizados: {resultado.formatos_actualizados or 'ninguno'}")
    print(f"Formatos en ventana de gracia: {resultado.formatos_en_gracia or 'ninguno'}")
    if resultado.formatos_modificados_durante_ciclo:
        print(f"Formatos cambiados durante el ciclo: {resultado.formatos_modificados_durante_ciclo}")


if __name__ == "__main__":
    asyncio.run(main())

"""
Ciclo de periodos contra la base de datos: vencimiento, periodo de referencia y cascada a formatos.
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from app.core import reloj
from app.core.config import settings
from app.models import EstadoFormato, EstadoPeriodo, FasePeriodo, Formato, Periodo
from app.services import periodo_service

ZONA = ZoneInfo(settings.zona_horaria)
T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


async def _periodo(db, id, estado=EstadoPeriodo.ACTIVO, fecha_fin=date(2099, 4, 30), hora_fin=time(23, 59, 59)):
    p = Periodo(
        id=id,
        anio=fecha_fin.year,
        fase=FasePeriodo.ENERO_ABRIL,
        fecha_inicio=date(fecha_fin.year, 1, 6),
        fecha_fin=fecha_fin,
        hora_fin=hora_fin,
        estado_activo=estado,
    )
    db.add(p)
    await db.commit()
    return p


async def _formato(db, nombre, estado=EstadoFormato.ACTIVO, marca=None):
    f = Formato(nombre_documento=nombre, estado=estado, ultima_modificacion_manual=marca)
    db.add(f)
    await db.commit()
    return f


class TestVencimientoDePeriodos:
    async def test_periodo_vencido_pasa_a_inactivo_y_bloquea_formatos(self, db_session):
        p = await _periodo(db_session, 10, fecha_fin=date(2025, 4, 30))
        f = await _formato(db_session, "Carta de aceptación")

        ahora = datetime(2025, 5, 1, 0, 0, 1, tzinfo=ZONA)
        resultado = await periodo_service.ejecutar_ciclo(db_session, ahora)

        await db_session.refresh(p)
        await db_session.refresh(f)
        assert p.estado_activo == EstadoPeriodo.INACTIVO
        assert f.estado == EstadoFormato.BLOQUEADO
        assert resultado.periodos_desactivados == [10]
        assert resultado.periodo_referencia_id == 10
        assert resultado.formatos_actualizados == ["Carta de aceptación"]

    async def test_periodo_en_curso_no_se_toca(self, db_session):
        p = await _periodo(db_session, 1, fecha_fin=date(2025, 4, 30))

        ahora = datetime(2025, 4, 30, 23, 59, 58, tzinfo=ZONA)
        resultado = await periodo_service.ejecutar_ciclo(db_session, ahora)

        await db_session.refresh(p)
        assert p.estado_activo == EstadoPeriodo.ACTIVO
        assert resultado.periodos_desactivados == []

    async def test_nunca_reactiva_un_periodo_inactivo(self, db_session):
        p = await _periodo(db_session, 1, estado=EstadoPeriodo.INACTIVO, fecha_fin=date(2099, 12, 31))

        await periodo_service.ejecutar_ciclo(db_session, T0)

        await db_session.refresh(p)
        assert p.estado_activo == EstadoPeriodo.INACTIVO

    async def test_desactiva_todos_los_vencidos(self, db_session):
        await _periodo(db_session, 1, fecha_fin=date(2024, 4, 30))
        await _periodo(db_session, 2, fecha_fin=date(2024, 8, 31))
        await _periodo(db_session, 3, fecha_fin=date(2099, 12, 31))

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0)

        assert resultado.periodos_desactivados == [1, 2]


class TestPeriodoDeReferencia:
    async def test_referencia_es_el_id_mas_alto(self, db_session):
        await _periodo(db_session, 3)
        await _periodo(db_session, 5, estado=EstadoPeriodo.INACTIVO)
        await _periodo(db_session, 4)
        f = await _formato(db_session, "Guía de uso")

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0)

        await db_session.refresh(f)
        assert resultado.periodo_referencia_id == 5
        assert resultado.estado_deseado == EstadoFormato.BLOQUEADO
        assert f.estado == EstadoFormato.BLOQUEADO

    async def test_sin_periodos_no_hay_cascada(self, db_session):
        f = await _formato(db_session, "Guía de uso", estado=EstadoFormato.BLOQUEADO)

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0)

        await db_session.refresh(f)
        assert resultado.periodo_referencia_id is None
        assert resultado.estado_deseado is None
        assert f.estado == EstadoFormato.BLOQUEADO

    async def test_periodo_activo_reactiva_formatos_bloqueados(self, db_session):
        await _periodo(db_session, 1)
        f = await _formato(db_session, "Reporte Mensual", estado=EstadoFormato.BLOQUEADO)

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0)

        await db_session.refresh(f)
        assert f.estado == EstadoFormato.ACTIVO
        assert resultado.formatos_actualizados == ["Reporte Mensual"]


class TestVentanaDeGracia:
    async def test_cambio_manual_reciente_se_respeta(self, db_session):
        await _periodo(db_session, 1, estado=EstadoPeriodo.INACTIVO)
        carta = await _formato(db_session, "Carta de presentación", marca=T0)

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(hours=12))

        await db_session.refresh(carta)
        assert carta.estado == EstadoFormato.ACTIVO
        assert resultado.formatos_en_gracia == ["Carta de presentación"]
        assert resultado.formatos_actualizados == []

    async def test_pasada_la_ventana_la_cascada_aplica_sin_tocar_la_marca(self, db_session):
        await _periodo(db_session, 1, estado=EstadoPeriodo.INACTIVO)
        carta = await _formato(db_session, "Carta de presentación", marca=T0)

        resultado = await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(hours=25))

        await db_session.refresh(carta)
        assert carta.estado == EstadoFormato.BLOQUEADO
        assert reloj.como_aware(carta.ultima_modificacion_manual) == T0
        assert resultado.formatos_actualizados == ["Carta de presentación"]

    async def test_limite_exacto_de_la_ventana(self, db_session):
        await _periodo(db_session, 1, estado=EstadoPeriodo.INACTIVO)
        carta = await _formato(db_session, "Carta de presentación", marca=T0)

        await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(hours=23, minutes=59))
        await db_session.refresh(carta)
        assert carta.estado == EstadoFormato.ACTIVO

        await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(hours=24, minutes=1))
        await db_session.refresh(carta)
        assert carta.estado == EstadoFormato.BLOQUEADO

    async def test_solo_el_formato_en_gracia_queda_fuera(self, db_session):
        await _periodo(db_session, 1, estado=EstadoPeriodo.INACTIVO)
        carta = await _formato(db_session, "Carta de presentación", marca=T0)
        guia = await _formato(db_session, "Guía de uso")

        await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(hours=1))

        await db_session.refresh(carta)
        await db_session.refresh(guia)
        assert carta.estado == EstadoFormato.ACTIVO
        assert guia.estado == EstadoFormato.BLOQUEADO


class TestIdempotencia:
    async def test_segunda_ejecucion_no_escribe(self, db_session):
        await _periodo(db_session, 1, fecha_fin=date(2024, 12, 31))
        await _formato(db_session, "Guía de uso")
        await _formato(db_session, "Reporte Mensual")

        primera = await periodo_service.ejecutar_ciclo(db_session, T0)
        segunda = await periodo_service.ejecutar_ciclo(db_session, T0 + timedelta(minutes=1))

        assert primera.escrituras == 3
        assert segunda.escrituras == 0


class TestActualizacionCondicional:
    async def test_no_pisa_un_cambio_manual_concurrente(self, db_session, session_factory):
        f = await _formato(db_session, "Cédula de registro")

        # Otra sesión registra un cambio manual después de la lectura del ciclo
        async with session_factory() as otra:
            concurrente = await otra.get(Formato, f.id)
            concurrente.estado = EstadoFormato.ACTIVO
            concurrente.ultima_modificacion_manual = T0
            await otra.commit()

        aplicado = await periodo_service.actualizar_formato_si_no_cambio(
            db_session, f, EstadoFormato.BLOQUEADO
        )

        await db_session.refresh(f)
        assert aplicado is False
        assert f.estado == EstadoFormato.ACTIVO
        assert reloj.como_aware(f.ultima_modificacion_manual) == T0

    async def test_aplica_si_nada_cambio(self, db_session):
        f = await _formato(db_session, "Cédula de registro")

        aplicado = await periodo_service.actualizar_formato_si_no_cambio(
            db_session, f, EstadoFormato.BLOQUEADO
        )

        await db_session.refresh(f)
        assert aplicado is True
        assert f.estado == EstadoFormato.BLOQUEADO
        assert f.ultima_modificacion_manual is None

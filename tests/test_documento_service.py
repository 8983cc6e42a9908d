"""
Flujo de revisión de documentos a nivel de servicio.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.exceptions import AccesoNoAutorizado, ErrorValidacion, RecursoNoEncontrado
from app.models import Documento, EstadoFormato, EstatusDocumento
from app.services import documento_service
from app.services.almacenamiento import CARPETA_DOCUMENTOS

REVISION = datetime(2099, 2, 1, 10, 0, tzinfo=timezone.utc)


def _archivos(almacen) -> list[str]:
    carpeta = almacen.base_dir / CARPETA_DOCUMENTOS
    if not carpeta.exists():
        return []
    return sorted(p.name for p in carpeta.iterdir())


class TestEntrega:
    async def test_primera_entrega_queda_pendiente(
        self, db_session, almacen, estudiante, proceso, tipo_documento, formato
    ):
        doc = await documento_service.subir_documento(
            db_session, estudiante, proceso.id, tipo_documento.id, "nss.pdf", b"%PDF nss", almacen
        )

        assert doc.estatus == EstatusDocumento.PENDIENTE
        assert doc.comentarios is None
        assert doc.usuario_id == estudiante.id
        assert _archivos(almacen) == [doc.ruta_archivo]

    async def test_reentrega_tras_rechazo_vuelve_a_pendiente(
        self, db_session, almacen, estudiante, administrador, proceso, tipo_documento, documento
    ):
        await documento_service.rechazar_documento(
            db_session, administrador, documento.id, "Falta la firma", REVISION
        )
        ruta_anterior = documento.ruta_archivo

        doc = await documento_service.subir_documento(
            db_session, estudiante, proceso.id, tipo_documento.id, "carta-v2.pdf", b"%PDF v2", almacen
        )

        assert doc.id == documento.id
        assert doc.estatus == EstatusDocumento.PENDIENTE
        assert doc.comentarios is None
        assert doc.fecha_revision is None
        assert doc.revisado_por_id is None
        assert doc.nombre_archivo == "carta-v2.pdf"
        assert _archivos(almacen) == [doc.ruta_archivo]
        assert doc.ruta_archivo != ruta_anterior

    async def test_no_se_entrega_en_proceso_ajeno(
        self, db_session, almacen, otro_estudiante, proceso, tipo_documento
    ):
        with pytest.raises(AccesoNoAutorizado):
            await documento_service.subir_documento(
                db_session, otro_estudiante, proceso.id, tipo_documento.id, "x.pdf", b"x", almacen
            )
        assert _archivos(almacen) == []

    async def test_archivo_vacio(self, db_session, almacen, estudiante, proceso, tipo_documento):
        with pytest.raises(ErrorValidacion):
            await documento_service.subir_documento(
                db_session, estudiante, proceso.id, tipo_documento.id, "x.pdf", b"", almacen
            )

    async def test_proceso_inexistente(self, db_session, almacen, estudiante, tipo_documento):
        with pytest.raises(RecursoNoEncontrado) as exc:
            await documento_service.subir_documento(
                db_session, estudiante, 999, tipo_documento.id, "x.pdf", b"x", almacen
            )
        assert exc.value.code == "PROCESO_NOT_FOUND"

    async def test_formato_bloqueado_impide_la_entrega(
        self, db_session, almacen, estudiante, proceso, tipo_documento, formato
    ):
        formato.estado = EstadoFormato.BLOQUEADO
        await db_session.commit()

        with pytest.raises(ErrorValidacion):
            await documento_service.subir_documento(
                db_session, estudiante, proceso.id, tipo_documento.id, "x.pdf", b"x", almacen
            )
        assert _archivos(almacen) == []

    async def test_formato_bloqueado_sin_restriccion_configurada(
        self, db_session, almacen, estudiante, proceso, tipo_documento, formato, monkeypatch
    ):
        monkeypatch.setattr(settings, "bloquear_envio_formato_bloqueado", False)
        formato.estado = EstadoFormato.BLOQUEADO
        await db_session.commit()

        doc = await documento_service.subir_documento(
            db_session, estudiante, proceso.id, tipo_documento.id, "x.pdf", b"x", almacen
        )
        assert doc.estatus == EstatusDocumento.PENDIENTE

    async def test_fallo_al_guardar_no_deja_archivos_huerfanos(
        self, db_session, almacen, estudiante, proceso, tipo_documento, documento, monkeypatch
    ):
        documento_id = documento.id
        ruta_anterior = documento.ruta_archivo
        proceso_id, tipo_id = proceso.id, tipo_documento.id

        async def commit_fallido():
            raise OperationalError("UPDATE documentos", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", commit_fallido)
        with pytest.raises(OperationalError):
            await documento_service.subir_documento(
                db_session, estudiante, proceso_id, tipo_id, "nuevo.pdf", b"nuevo", almacen
            )
        monkeypatch.undo()

        assert _archivos(almacen) == [ruta_anterior]
        result = await db_session.execute(
            select(Documento.ruta_archivo, Documento.estatus).where(Documento.id == documento_id)
        )
        ruta, estatus = result.one()
        assert ruta == ruta_anterior
        assert estatus == EstatusDocumento.PENDIENTE


class TestRevision:
    async def test_aprobar(self, db_session, administrador, documento):
        doc = await documento_service.aprobar_documento(db_session, administrador, documento.id, REVISION)

        assert doc.estatus == EstatusDocumento.APROBADO
        assert doc.comentarios is None
        assert doc.revisado_por_id == administrador.id
        assert doc.fecha_revision == REVISION

    async def test_aprobar_dos_veces_no_es_error(self, db_session, coordinador, documento):
        await documento_service.aprobar_documento(db_session, coordinador, documento.id, REVISION)
        doc = await documento_service.aprobar_documento(db_session, coordinador, documento.id, REVISION)
        assert doc.estatus == EstatusDocumento.APROBADO

    async def test_aprobar_un_rechazado(self, db_session, administrador, documento):
        await documento_service.rechazar_documento(db_session, administrador, documento.id, "Ilegible")
        doc = await documento_service.aprobar_documento(db_session, administrador, documento.id)
        assert doc.estatus == EstatusDocumento.APROBADO
        assert doc.comentarios is None

    async def test_estudiante_no_puede_aprobar(self, db_session, estudiante, documento):
        with pytest.raises(AccesoNoAutorizado):
            await documento_service.aprobar_documento(db_session, estudiante, documento.id)

    async def test_aprobar_inexistente(self, db_session, administrador):
        with pytest.raises(RecursoNoEncontrado) as exc:
            await documento_service.aprobar_documento(db_session, administrador, 12345)
        assert exc.value.code == "DOCUMENTO_NOT_FOUND"

    async def test_rechazar_guarda_comentarios(self, db_session, administrador, documento):
        doc = await documento_service.rechazar_documento(
            db_session, administrador, documento.id, "  Falta la firma del asesor  ", REVISION
        )
        assert doc.estatus == EstatusDocumento.RECHAZADO
        assert doc.comentarios == "Falta la firma del asesor"
        assert doc.revisado_por_id == administrador.id

    @pytest.mark.parametrize("comentarios", [None, "", "   "])
    async def test_rechazar_sin_comentarios_no_cambia_el_estatus(
        self, db_session, administrador, documento, comentarios
    ):
        await documento_service.aprobar_documento(db_session, administrador, documento.id)

        with pytest.raises(ErrorValidacion):
            await documento_service.rechazar_documento(db_session, administrador, documento.id, comentarios)

        await db_session.refresh(documento)
        assert documento.estatus == EstatusDocumento.APROBADO


class TestEliminacion:
    async def test_otro_estudiante_no_puede_eliminar(self, db_session, almacen, otro_estudiante, documento):
        with pytest.raises(AccesoNoAutorizado):
            await documento_service.eliminar_documento(db_session, otro_estudiante, documento.id, almacen)
        assert await db_session.get(Documento, documento.id) is not None
        assert _archivos(almacen) == [documento.ruta_archivo]

    async def test_dueno_elimina_su_documento(self, db_session, almacen, estudiante, documento):
        await documento_service.eliminar_documento(db_session, estudiante, documento.id, almacen)
        assert _archivos(almacen) == []

    async def test_administrativo_elimina_cualquier_documento(
        self, db_session, almacen, coordinador, documento
    ):
        documento_id = documento.id
        await documento_service.eliminar_documento(db_session, coordinador, documento_id, almacen)

        result = await db_session.execute(select(Documento).where(Documento.id == documento_id))
        assert result.scalar_one_or_none() is None
        assert _archivos(almacen) == []


class TestListado:
    async def test_estudiante_solo_ve_los_propios(
        self, db_session, estudiante, otro_estudiante, coordinador, documento
    ):
        assert [d.id for d in await documento_service.listar_documentos(db_session, estudiante)] == [documento.id]
        assert await documento_service.listar_documentos(db_session, otro_estudiante) == []
        assert len(await documento_service.listar_documentos(db_session, coordinador)) == 1

    async def test_filtro_por_estatus(self, db_session, administrador, documento):
        pendientes = await documento_service.listar_documentos(
            db_session, administrador, estatus=EstatusDocumento.PENDIENTE
        )
        aprobados = await documento_service.listar_documentos(
            db_session, administrador, estatus=EstatusDocumento.APROBADO
        )
        assert len(pendientes) == 1
        assert aprobados == []

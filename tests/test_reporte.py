import os
from datetime import datetime
from unittest.mock import patch

import duckdb

from libs.reporte.main_reporte import ReporteManager

DATOS = {'titulo': "Cumulative Update", 'kb': "KB5034441", 'id_actualizacion': "guid-1"}


def test_crea_el_directorio(tmp_path):
    destino = tmp_path / "data" / "reportes"
    ReporteManager(str(destino), "declinar")
    assert destino.is_dir()


def test_guardar_escribe_parquet(tmp_path):
    reporte = ReporteManager(str(tmp_path), "declinar")
    reporte.registrar('declinada', DATOS)
    reporte.registrar('necesaria', DATOS, "3 equipos")

    ruta = reporte.guardar()

    assert os.path.basename(ruta).startswith("declinar_")
    assert ruta.endswith(".parquet")
    con = duckdb.connect()
    try:
        filas = con.execute(
            f"SELECT script, accion, kb, detalle FROM read_parquet('{ruta}') ORDER BY accion"
        ).fetchall()
    finally:
        con.close()
    assert filas == [
        ('declinar', 'declinada', 'KB5034441', ''),
        ('declinar', 'necesaria', 'KB5034441', '3 equipos'),
    ]


def test_guardar_sin_filas_no_crea_archivo(tmp_path):
    reporte = ReporteManager(str(tmp_path), "declinar")
    assert reporte.guardar() is None
    assert os.listdir(tmp_path) == []


def test_limpiar_reportes_antiguos(tmp_path):
    for nombre in (
        "declinar_20260901_080000_000.parquet",   # antiguo
        "declinar_20261015_080000_000.parquet",   # reciente
        "declinar_invalido.parquet",
        "autoaprobar_20260101_080000_000.parquet",  # de otro script
    ):
        (tmp_path / nombre).write_bytes(b"")
    reporte = ReporteManager(str(tmp_path), "declinar", retencion_dias=30)

    eliminados = reporte.limpiar_reportes_antiguos(ahora=datetime(2026, 10, 19))

    assert eliminados == 1
    assert sorted(os.listdir(tmp_path)) == [
        "autoaprobar_20260101_080000_000.parquet",
        "declinar_20261015_080000_000.parquet",
        "declinar_invalido.parquet",
    ]


def test_limpiar_no_falla_si_no_se_puede_listar(tmp_path):
    reporte = ReporteManager(str(tmp_path), "declinar")

    with patch("libs.reporte.main_reporte.os.listdir", side_effect=PermissionError("Acceso denegado")):
        assert reporte.limpiar_reportes_antiguos() == 0

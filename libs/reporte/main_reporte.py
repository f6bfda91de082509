import os
import logging
import pandas as pd
from datetime import datetime, timedelta
import duckdb

COLUMNAS = ['fecha', 'script', 'accion', 'titulo', 'kb', 'id_actualizacion', 'detalle']


class ReporteManager:
    """
    Gestor del reporte de acciones de una ejecución. Acumula una fila por
    actualización procesada y al final la guarda como archivo Parquet
    usando Pandas y DuckDB. También limpia los reportes antiguos.
    """

    def __init__(self, reportes_dir, script, retencion_dias=30):
        self._reportes_dir = reportes_dir
        self._script = script
        self._retencion_dias = retencion_dias
        self._filas = []
        self._setup_directory()

    def _setup_directory(self):
        """Asegura que el directorio de reportes exista."""
        try:
            os.makedirs(self._reportes_dir, exist_ok=True)
            logging.debug(f"Directorio de reportes asegurado: {self._reportes_dir}")
        except OSError as e:
            logging.error(f"Error al crear el directorio de reportes {self._reportes_dir}: {e}")
            self._reportes_dir = None

    @property
    def filas(self):
        return list(self._filas)

    def registrar(self, accion, datos, detalle=""):
        """
        Añade una fila al reporte.

        :param accion: Acción realizada ('declinada', 'necesaria', 'aprobada_todos', ...).
        :param datos: Diccionario devuelto por describir() para la actualización.
        :param detalle: Texto libre (grupo, número de equipos, error...).
        """
        fila = {
            'fecha': datetime.now().isoformat(),
            'script': self._script,
            'accion': accion,
            'titulo': datos.get('titulo', ''),
            'kb': datos.get('kb', ''),
            'id_actualizacion': datos.get('id_actualizacion', ''),
            'detalle': str(detalle),
        }
        self._filas.append(fila)

    def guardar(self):
        """
        Guarda las filas acumuladas en un archivo Parquet nombrado con la
        marca de tiempo de la ejecución.

        :return: Ruta del archivo creado, o None si no había nada que guardar o hubo un error.
        """
        if not self._reportes_dir:
            logging.warning("No se puede guardar el reporte. El directorio no está configurado o es inválido.")
            return None
        if not self._filas:
            logging.info("No hay acciones que reportar.")
            return None

        try:
            df = pd.DataFrame(self._filas, columns=COLUMNAS)

            # Formato YYYYMMDD_HHMMSS_XXX, truncado a milisegundos.
            timestamp_str = datetime.now().strftime("%Y%m%d_%H%M%S_%f")[:-3]
            file_name = f"{self._script}_{timestamp_str}.parquet"
            full_path = os.path.join(self._reportes_dir, file_name)

            con = duckdb.connect()
            try:
                con.register('df', df)
                con.execute("CREATE OR REPLACE TABLE reporte_temp AS SELECT * FROM df")
                ruta_sql = full_path.replace("'", "''")
                con.execute(f"COPY reporte_temp TO '{ruta_sql}' (FORMAT PARQUET)")
            finally:
                con.close()

            logging.info(f"Reporte guardado: {full_path} ({len(df)} filas)")
            return full_path

        except Exception as e:
            logging.error(f"Error al guardar el reporte Parquet: {e}")
            return None

    def limpiar_reportes_antiguos(self, ahora=None):
        """
        Elimina los reportes de este script que superen la retención configurada.
        Se basa en la marca de tiempo codificada en el nombre del archivo.

        :return: Número de archivos eliminados.
        """
        if not self._reportes_dir:
            return 0

        cutoff_time = (ahora or datetime.now()) - timedelta(days=self._retencion_dias)
        prefijo = f"{self._script}_"
        eliminados = 0

        try:
            archivos = os.listdir(self._reportes_dir)
        except Exception as e:
            logging.error(f"Error general durante la limpieza de reportes: {e}")
            return 0

        for filename in archivos:
            if not (filename.startswith(prefijo) and filename.endswith(".parquet")):
                continue
            timestamp_part = filename[len(prefijo):-len(".parquet")]
            try:
                file_timestamp = datetime.strptime(timestamp_part, "%Y%m%d_%H%M%S_%f")
            except ValueError:
                logging.warning(f"Ignorando archivo con formato de nombre inválido durante la limpieza: {filename}")
                continue

            if file_timestamp < cutoff_time:
                try:
                    os.remove(os.path.join(self._reportes_dir, filename))
                    eliminados += 1
                    logging.info(f"Reporte eliminado (antigüedad > {self._retencion_dias} días): {filename}")
                except OSError as e:
                    logging.error(f"Error al intentar eliminar el reporte {filename}: {e}")

        return eliminados

import argparse
import configparser
import logging
import os
import sys

VALORES_POR_DEFECTO = {
    'servidor': None,
    'puerto': None,
    'seguro': False,
    'ruta_dll': None,
    'grupo_pruebas': 'Pruebas',
    'dias_espera': 8,
    'directorio_datos': 'data',
    'nombre_archivo_log': 'mantenimiento_wsus.log',
    'directorio_reportes': os.path.join('data', 'reportes'),
    'retencion_reportes_dias': 30,
}


def _find_dir():
    """
    Función auxiliar para encontrar la carpeta base de la aplicación,
    útil para los ejecutables empaquetados.
    """
    if getattr(sys, "frozen", False):
        # Estamos en un ejecutable de cx_Freeze
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def resolver_ruta(ruta):
    """Las rutas relativas de la configuración se resuelven contra la carpeta base."""
    if os.path.isabs(ruta):
        return ruta
    return os.path.join(_find_dir(), ruta)


def _avisar(avisos, nivel, mensaje):
    if avisos is None:
        logging.log(nivel, mensaje)
    else:
        avisos.append((nivel, mensaje))


def cargar_configuracion(config_path=None, avisos=None):
    """
    Carga la configuración desde configs/config.ini (o desde 'config_path').
    Si el archivo no existe o tiene errores se usan los valores por defecto.

    Si se pasa la lista 'avisos', los mensajes (nivel, texto) se acumulan en
    ella en lugar de registrarse, para emitirlos cuando el logging ya esté
    configurado.

    Returns:
        dict: Valores de configuración.
    """
    config = configparser.ConfigParser()
    valores = dict(VALORES_POR_DEFECTO)
    config_path = config_path or os.path.join(_find_dir(), "configs", "config.ini")
    try:
        if not config.read(config_path, encoding="utf-8"):
            _avisar(avisos, logging.WARNING, f"No se encontró {config_path}. Usando valores por defecto.")
            return valores

        valores['servidor'] = config.get('WSUS', 'servidor', fallback='') or None
        puerto = config.get('WSUS', 'puerto', fallback='')
        valores['puerto'] = int(puerto) if puerto else None
        valores['seguro'] = config.getboolean('WSUS', 'seguro', fallback=False)
        valores['ruta_dll'] = config.get('WSUS', 'ruta_dll', fallback='') or None
        valores['grupo_pruebas'] = config.get('WSUS', 'grupo_pruebas', fallback='Pruebas')
        valores['dias_espera'] = config.getint('WSUS', 'dias_espera', fallback=8)

        valores['directorio_datos'] = config.get('GENERAL', 'directorio_datos', fallback='data')
        valores['nombre_archivo_log'] = config.get('GENERAL', 'nombre_archivo_log', fallback='mantenimiento_wsus.log')
        valores['directorio_reportes'] = config.get('GENERAL', 'directorio_reportes',
                                                    fallback=VALORES_POR_DEFECTO['directorio_reportes'])
        valores['retencion_reportes_dias'] = config.getint('GENERAL', 'retencion_reportes_dias', fallback=30)
    except (configparser.Error, ValueError) as e:
        # En caso de error, usa valores por defecto
        _avisar(avisos, logging.ERROR, f"Error al leer la configuración. Usando valores por defecto. Error: {e}")
        return dict(VALORES_POR_DEFECTO)
    return valores


def setup_logging(log_path, verbose=False):
    """
    Configura el logger: archivo de log en la carpeta de datos y consola.
    Con 'verbose' se muestran también los mensajes de detalle (DEBUG).
    """
    os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler(),
        ],
        force=True,
    )


def crear_parser(descripcion):
    """Argumentos comunes a los scripts de mantenimiento."""
    parser = argparse.ArgumentParser(description=descripcion)
    parser.add_argument("-s", "--servidor", help="Nombre o IP del servidor WSUS (por defecto, el local)")
    parser.add_argument("-p", "--puerto", type=int, help="Puerto del servidor (8531 seguro / 8530 no seguro)")
    parser.add_argument("--seguro", action="store_true", default=None, help="Usar conexión segura (SSL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Mostrar el detalle de cada actualización")
    parser.add_argument("-c", "--config", help="Ruta alternativa a config.ini")
    parser.add_argument("--simular", action="store_true", help="Solo consultar y contar, sin modificar nada")
    parser.add_argument("--sin-reporte", action="store_true", help="No guardar el reporte Parquet de acciones")
    return parser


def combinar_argumentos(args, valores):
    """Los argumentos de línea de comandos tienen prioridad sobre config.ini."""
    valores = dict(valores)
    if args.servidor:
        valores['servidor'] = args.servidor
    if args.puerto:
        valores['puerto'] = args.puerto
    if args.seguro is not None:
        valores['seguro'] = args.seguro
    for clave in ('grupo_pruebas', 'dias_espera'):
        if getattr(args, clave, None) is not None:
            valores[clave] = getattr(args, clave)
    return valores

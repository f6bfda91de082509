import logging
import os
import sys
# Configuración, logging y argumentos comunes
from libs.config.main_config import (
    cargar_configuracion,
    combinar_argumentos,
    crear_parser,
    resolver_ruta,
    setup_logging
)
from libs.wsus.main_wsus import ServidorWsus
from libs.aprobar.main_aprobar import autoaprobar
from libs.reporte.main_reporte import ReporteManager

NOMBRE_SCRIPT = "autoaprobar"


def main(argv=None):
    """
    Despliegue en dos fases: lo nuevo se aprueba para el grupo de pruebas y,
    pasado el periodo de espera, para todos los equipos.
    Devuelve el código de salida: 0 si todo fue bien, -1 ante cualquier error.
    """
    parser = crear_parser("Aprueba actualizaciones en WSUS: grupo de pruebas y, tras la espera, todos los equipos.")
    parser.add_argument("-g", "--grupo", dest="grupo_pruebas", help="Nombre del grupo de pruebas")
    parser.add_argument("-d", "--dias", dest="dias_espera", type=int,
                        help="Días en pruebas antes de aprobar para todos (por defecto 8)")
    args = parser.parse_args(argv)

    reporte = None
    try:
        avisos = []
        valores = combinar_argumentos(args, cargar_configuracion(args.config, avisos))
        log_path = os.path.join(resolver_ruta(valores['directorio_datos']), valores['nombre_archivo_log'])
        setup_logging(log_path, args.verbose)
        for nivel, mensaje in avisos:
            logging.log(nivel, mensaje)

        servidor = ServidorWsus.conectar(valores['servidor'], valores['puerto'],
                                         valores['seguro'], valores['ruta_dll'])
        if not args.sin_reporte:
            reporte = ReporteManager(resolver_ruta(valores['directorio_reportes']), NOMBRE_SCRIPT,
                                     valores['retencion_reportes_dias'])

        if args.simular:
            logging.info("Modo simulación: no se aprobará ninguna actualización.")
        resultado = autoaprobar(servidor, valores['grupo_pruebas'], valores['dias_espera'],
                                simular=args.simular, reporte=reporte)
    except Exception as e:
        logging.error(f"Error durante la ejecución: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return -1
    finally:
        # Lo ya modificado en el servidor queda en el reporte aunque la ejecución se aborte
        if reporte:
            reporte.guardar()
            reporte.limpiar_reportes_antiguos()

    todos = resultado['todos']
    pruebas = resultado['pruebas']
    resumen = (
        f"Todos los equipos -> Aprobadas: {todos['aprobadas']}"
        f" | En espera: {todos['en_espera']}"
        f" | Fallidas: {todos['fallidas']}\n"
        f"Grupo {valores['grupo_pruebas']} -> Aprobadas: {pruebas['aprobadas']}"
        f" | Fallidas: {pruebas['fallidas']}"
    )
    for linea in resumen.splitlines():
        logging.info(linea)
    print(resumen)
    return 0


if __name__ == '__main__':
    sys.exit(main())

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
from libs.declinar.main_declinar import declinar_reemplazadas
from libs.reporte.main_reporte import ReporteManager

NOMBRE_SCRIPT = "declinar"


def main(argv=None):
    """
    Declina las actualizaciones reemplazadas que ya no necesita ningún equipo.
    Devuelve el código de salida: 0 si todo fue bien, -1 ante cualquier error.
    """
    parser = crear_parser("Declina en WSUS las actualizaciones reemplazadas que ningún equipo necesita.")
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
            logging.info("Modo simulación: no se declinará ninguna actualización.")
        resultado = declinar_reemplazadas(servidor, simular=args.simular, reporte=reporte)
    except Exception as e:
        logging.error(f"Error durante la ejecución: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return -1
    finally:
        # Lo ya modificado en el servidor queda en el reporte aunque la ejecución se aborte
        if reporte:
            reporte.guardar()
            reporte.limpiar_reportes_antiguos()

    resumen = (
        f"Reemplazadas revisadas: {resultado['revisadas']}"
        f" | Declinadas: {resultado['declinadas']}"
        f" | Necesarias: {resultado['necesarias']}"
    )
    logging.info(resumen)
    print(resumen)
    return 0


if __name__ == '__main__':
    sys.exit(main())

import logging
from libs.wsus.main_wsus import describir

# Estados de aprobación de las actualizaciones candidatas a declinar.
ESTADOS_CANDIDATOS = ['HasStaleUpdateApprovals', 'LatestRevisionApproved', 'NotApproved']


def declinar_reemplazadas(servidor, simular=False, reporte=None):
    """
    Declina las actualizaciones reemplazadas que ningún equipo necesita.

    Una actualización reemplazada se declina solo si su número de equipos
    con la actualización pendiente de instalar (NotInstalledCount) es cero.

    Args:
        servidor (ServidorWsus): Conexión con el servidor WSUS.
        simular (bool): Si es True no se declina nada, solo se cuenta.
        reporte (ReporteManager): Reporte opcional donde registrar cada acción.

    Returns:
        dict: Recuento con las claves 'revisadas', 'declinadas' y 'necesarias'.
    """
    resultado = {'revisadas': 0, 'declinadas': 0, 'necesarias': 0}

    actualizaciones = servidor.obtener_actualizaciones(ESTADOS_CANDIDATOS)
    reemplazadas = [a for a in actualizaciones if a.IsSuperseded]
    logging.info(f"{len(reemplazadas)} actualizaciones reemplazadas de {len(actualizaciones)} revisadas.")

    for actualizacion in reemplazadas:
        resultado['revisadas'] += 1
        datos = describir(actualizacion)
        pendientes = servidor.resumen_instalacion(actualizacion).NotInstalledCount

        if pendientes == 0:
            if not simular:
                actualizacion.Decline()
            resultado['declinadas'] += 1
            logging.debug(f"Declinada: {datos['titulo']} {datos['kb']}")
            if reporte:
                reporte.registrar('declinada', datos, "simulada" if simular else "")
        else:
            resultado['necesarias'] += 1
            logging.debug(f"Necesaria en {pendientes} equipos: {datos['titulo']} {datos['kb']}")
            if reporte:
                reporte.registrar('necesaria', datos, f"{pendientes} equipos")

    return resultado

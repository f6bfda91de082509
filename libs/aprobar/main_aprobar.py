import logging
from datetime import datetime, timedelta, timezone
from libs.wsus.main_wsus import a_datetime, describir, es_error_licencia

DIAS_ESPERA = 8


def _aceptar_licencia(actualizacion, simular):
    """Acepta el contrato de licencia si la actualización lo requiere."""
    if actualizacion.RequiresLicenseAgreementAcceptance and not simular:
        actualizacion.AcceptLicenseAgreement()


def fecha_aprobacion(servidor, actualizacion, grupo):
    """Fecha (UTC) de la aprobación más reciente de la actualización para el grupo."""
    fechas = [a_datetime(a.CreationDate) for a in servidor.aprobaciones(actualizacion, grupo)]
    return max(fechas) if fechas else None


def aprobar_para_todos(servidor, grupo_pruebas, dias_espera=DIAS_ESPERA, ahora=None,
                       simular=False, reporte=None):
    """
    Segunda fase del despliegue: aprueba para todos los equipos las
    actualizaciones aprobadas en el grupo de pruebas hace al menos
    'dias_espera' días y que aún no están aprobadas para todos.

    Returns:
        dict: Recuento con las claves 'aprobadas', 'en_espera' y 'fallidas'.
    """
    resultado = {'aprobadas': 0, 'en_espera': 0, 'fallidas': 0}
    ahora = a_datetime(ahora) or datetime.now(timezone.utc)
    espera = timedelta(days=dias_espera)
    todos = servidor.grupo_todos()

    candidatas = servidor.obtener_actualizaciones(['LatestRevisionApproved'], grupos=[grupo_pruebas])
    for actualizacion in candidatas:
        if servidor.aprobaciones(actualizacion, todos):
            continue

        datos = describir(actualizacion)
        try:
            _aceptar_licencia(actualizacion, simular)
            fecha = fecha_aprobacion(servidor, actualizacion, grupo_pruebas)
            if fecha is None or ahora - fecha < espera:
                resultado['en_espera'] += 1
                logging.debug(f"En espera desde {fecha}: {datos['titulo']} {datos['kb']}")
                continue
            if not simular:
                servidor.aprobar(actualizacion, todos)
        except Exception as e:
            if not es_error_licencia(e):
                raise
            resultado['fallidas'] += 1
            logging.warning(f"No se pudo aprobar para todos {datos['titulo']}: {e}")
            if reporte:
                reporte.registrar('fallida', datos, e)
            continue

        resultado['aprobadas'] += 1
        logging.debug(f"Aprobada para todos: {datos['titulo']} {datos['kb']}")
        if reporte:
            detalle = f"aprobada en pruebas el {fecha.isoformat()}"
            reporte.registrar('aprobada_todos', datos, f"{detalle} (simulada)" if simular else detalle)

    return resultado


def aprobar_para_pruebas(servidor, grupo_pruebas, simular=False, reporte=None):
    """
    Primera fase del despliegue: aprueba para el grupo de pruebas las
    actualizaciones que aún no tienen ninguna aprobación.

    Returns:
        dict: Recuento con las claves 'aprobadas' y 'fallidas'.
    """
    resultado = {'aprobadas': 0, 'fallidas': 0}

    for actualizacion in servidor.obtener_actualizaciones(['NotApproved']):
        datos = describir(actualizacion)
        try:
            _aceptar_licencia(actualizacion, simular)
            if not simular:
                servidor.aprobar(actualizacion, grupo_pruebas)
        except Exception as e:
            if not es_error_licencia(e):
                raise
            resultado['fallidas'] += 1
            logging.warning(f"No se pudo aprobar para {grupo_pruebas.Name} {datos['titulo']}: {e}")
            if reporte:
                reporte.registrar('fallida', datos, e)
            continue

        resultado['aprobadas'] += 1
        logging.debug(f"Aprobada para {grupo_pruebas.Name}: {datos['titulo']} {datos['kb']}")
        if reporte:
            detalle = str(grupo_pruebas.Name)
            reporte.registrar('aprobada_pruebas', datos, f"{detalle} (simulada)" if simular else detalle)

    return resultado


def autoaprobar(servidor, nombre_grupo, dias_espera=DIAS_ESPERA, ahora=None, simular=False, reporte=None):
    """
    Ejecuta las dos fases: primero promueve a todos los equipos lo que ya
    cumplió el periodo de espera y después aprueba lo nuevo en pruebas.
    """
    grupo_pruebas = servidor.obtener_grupo(nombre_grupo)
    todos = aprobar_para_todos(servidor, grupo_pruebas, dias_espera, ahora, simular, reporte)
    pruebas = aprobar_para_pruebas(servidor, grupo_pruebas, simular, reporte)
    return {'todos': todos, 'pruebas': pruebas}

import logging
import operator
from datetime import datetime, timezone
from functools import reduce

# Nombre del ensamblado de administración que instala la consola de WSUS.
NOMBRE_ENSAMBLADO = "Microsoft.UpdateServices.Administration"

PUERTO_SEGURO = 8531
PUERTO_INSEGURO = 8530


class WsusError(Exception):
    """Error base de las operaciones contra el servidor WSUS."""


class GrupoNoEncontradoError(WsusError):
    """El grupo de equipos indicado no existe en el servidor."""


def cargar_api(dll_path=None):
    """
    Carga el ensamblado de administración de WSUS usando pythonnet.

    Args:
        dll_path (str): Ruta opcional a Microsoft.UpdateServices.Administration.dll.
                        Si no se indica, se busca el ensamblado por nombre.

    Returns:
        module: El espacio de nombres Microsoft.UpdateServices.Administration.
    """
    import clr  # Se necesita la biblioteca 'pythonnet'

    clr.AddReference(dll_path or NOMBRE_ENSAMBLADO)
    import Microsoft.UpdateServices.Administration as api

    logging.debug(f"Ensamblado de WSUS cargado: {dll_path or NOMBRE_ENSAMBLADO}")
    return api


def puerto_por_defecto(seguro):
    """Puerto estándar de WSUS según el tipo de conexión."""
    return PUERTO_SEGURO if seguro else PUERTO_INSEGURO


def a_datetime(valor):
    """
    Convierte un System.DateTime (o un datetime de Python) a datetime UTC.
    WSUS devuelve las fechas de aprobación en UTC; las de tipo Local se
    pasan a UTC antes de copiar los campos.
    """
    if valor is None:
        return None
    if not isinstance(valor, datetime):
        if str(valor.Kind) == "Local":
            valor = valor.ToUniversalTime()
        valor = datetime(valor.Year, valor.Month, valor.Day,
                         valor.Hour, valor.Minute, valor.Second)
    if valor.tzinfo is None:
        valor = valor.replace(tzinfo=timezone.utc)
    return valor


def describir(actualizacion):
    """Datos básicos de una actualización para logs y reportes."""
    return {
        'titulo': str(actualizacion.Title),
        'kb': ",".join(f"KB{articulo}" for articulo in actualizacion.KnowledgebaseArticles),
        'id_actualizacion': str(actualizacion.Id.UpdateId),
    }


def es_error_licencia(error):
    """Indica si la excepción corresponde a un contrato de licencia no disponible."""
    return "license agreement" in str(error).lower()


class ServidorWsus:
    """
    Envoltorio mínimo sobre IUpdateServer. Solo expone las llamadas que
    usan los scripts de mantenimiento.
    """

    def __init__(self, admin, api):
        self.admin = admin
        self.api = api

    @classmethod
    def conectar(cls, servidor=None, puerto=None, seguro=False, dll_path=None):
        """
        Abre la conexión con el servidor WSUS.

        Sin servidor ni puerto se usa el WSUS local; en otro caso se conecta a
        'servidor' (localhost por defecto) con el puerto estándar si no se indica.
        """
        api = cargar_api(dll_path)
        if servidor is None and puerto is None:
            logging.info("Conectando con el servidor WSUS local...")
            admin = api.AdminProxy.GetUpdateServer()
        else:
            servidor = servidor or "localhost"
            puerto = puerto or puerto_por_defecto(seguro)
            logging.info(f"Conectando con {servidor}:{puerto} (seguro={seguro})...")
            admin = api.AdminProxy.GetUpdateServer(servidor, seguro, puerto)
        logging.info(f"Conectado a WSUS: {admin.Name}")
        return cls(admin, api)

    def obtener_actualizaciones(self, estados, grupos=None):
        """
        Obtiene las actualizaciones cuyos estados de aprobación coinciden con
        alguno de 'estados' (nombres de ApprovedStates).
        """
        scope = self.api.UpdateScope()
        scope.ApprovedStates = reduce(
            operator.or_, [getattr(self.api.ApprovedStates, nombre) for nombre in estados]
        )
        for grupo in grupos or []:
            scope.ApprovedComputerTargetGroups.Add(grupo)
        actualizaciones = list(self.admin.GetUpdates(scope))
        logging.debug(f"Consulta {'|'.join(estados)}: {len(actualizaciones)} actualizaciones.")
        return actualizaciones

    def resumen_instalacion(self, actualizacion):
        """Resumen de instalación sobre todos los equipos, incluidos los de servidores secundarios."""
        scope = self.api.ComputerTargetScope()
        scope.IncludeDownstreamComputerTargets = True
        return actualizacion.GetSummary(scope)

    def obtener_grupo(self, nombre):
        for grupo in self.admin.GetComputerTargetGroups():
            if str(grupo.Name).lower() == nombre.lower():
                return grupo
        raise GrupoNoEncontradoError(f"No existe el grupo de equipos '{nombre}' en {self.admin.Name}")

    def grupo_todos(self):
        return self.admin.GetComputerTargetGroup(self.api.ComputerTargetGroupId.AllComputers)

    def aprobaciones(self, actualizacion, grupo):
        return list(actualizacion.GetUpdateApprovals(grupo))

    def aprobar(self, actualizacion, grupo):
        return actualizacion.Approve(self.api.UpdateApprovalAction.Install, grupo)

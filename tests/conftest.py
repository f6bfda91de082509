from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from libs.wsus.main_wsus import ServidorWsus


class ActualizacionFalsa:
    """Imita la parte de IUpdate que usan los scripts."""

    def __init__(self, titulo, kb="5000001", reemplazada=False, pendientes=0,
                 requiere_licencia=False, aprobaciones=None, error_aprobar=None):
        self.Title = titulo
        self.KnowledgebaseArticles = [kb]
        self.Id = SimpleNamespace(UpdateId=f"id-{titulo}")
        self.IsSuperseded = reemplazada
        self.RequiresLicenseAgreementAcceptance = requiere_licencia
        self.pendientes = pendientes
        # nombre de grupo -> fechas de aprobación
        self.fechas_aprobacion = aprobaciones or {}
        self.error_aprobar = error_aprobar
        self.declinada = False
        self.licencia_aceptada = False
        self.aprobada_para = []

    def GetSummary(self, scope):
        return SimpleNamespace(NotInstalledCount=self.pendientes)

    def Decline(self):
        self.declinada = True

    def AcceptLicenseAgreement(self):
        self.licencia_aceptada = True

    def GetUpdateApprovals(self, grupo):
        return [SimpleNamespace(CreationDate=f) for f in self.fechas_aprobacion.get(grupo.Name, [])]

    def Approve(self, accion, grupo):
        if self.error_aprobar:
            raise self.error_aprobar
        self.aprobada_para.append(grupo.Name)


@pytest.fixture
def grupo_pruebas():
    return SimpleNamespace(Name="Pruebas")


@pytest.fixture
def grupo_todos():
    return SimpleNamespace(Name="All Computers")


@pytest.fixture
def api():
    api = MagicMock()
    api.ApprovedStates = SimpleNamespace(
        NotApproved=1, LatestRevisionApproved=2, HasStaleUpdateApprovals=4, Declined=8
    )
    return api


@pytest.fixture
def servidor(api, grupo_pruebas, grupo_todos):
    admin = MagicMock()
    admin.Name = "wsus01"
    admin.GetComputerTargetGroups.return_value = [grupo_todos, grupo_pruebas]
    admin.GetComputerTargetGroup.return_value = grupo_todos
    admin.GetUpdates.return_value = []
    return ServidorWsus(admin, api)


@pytest.fixture
def nueva_actualizacion():
    return ActualizacionFalsa

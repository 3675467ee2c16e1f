from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient

from kaddem.api.deps import get_contrat_service
from kaddem.core.errors import AppHTTPException
from kaddem.core.settings import settings
from kaddem.main import create_app
from kaddem.models.contrat import Contrat
from kaddem.models.enums import Specialite
from kaddem.services.contrat_service import StatusUpdateResult


class FakeContratService:
    """Service mocké : aucune base, réponses préparées par le test."""

    def __init__(self, contrats=None):
        self.contrats = contrats or []
        self.removed = []
        self.assigned = []

    async def retrieve_all_contrats(self):
        return self.contrats

    async def retrieve_contrat(self, id_contrat):
        for c in self.contrats:
            if c.id_contrat == id_contrat:
                return c
        raise AppHTTPException(404, "CONTRAT_NOT_FOUND", "Contrat introuvable", details={"idContrat": id_contrat})

    async def add_contrat(self, data):
        contrat = Contrat(id_contrat=10, **data.model_dump())
        self.contrats.append(contrat)
        return contrat

    async def update_contrat(self, data):
        contrat = await self.retrieve_contrat(data.id_contrat)
        for key, value in data.model_dump(exclude={"id_contrat"}).items():
            setattr(contrat, key, value)
        return contrat

    async def remove_contrat(self, id_contrat):
        await self.retrieve_contrat(id_contrat)
        self.removed.append(id_contrat)

    async def affect_contrat_to_etudiant(self, id_contrat, nom_e, prenom_e):
        self.assigned.append((id_contrat, nom_e, prenom_e))
        raise AppHTTPException(409, "QUOTA_CONTRATS_ATTEINT", "Quota atteint", details={"contratsActifs": 5})

    async def nb_contrats_valides(self, start, end):
        return 3

    async def get_chiffre_affaire_entre_deux_dates(self, start, end):
        if end < start:
            raise AppHTTPException(422, "PERIODE_INVALIDE", "Période invalide")
        return 1200.0

    async def retrieve_and_update_status_contrat(self, today=None):
        return StatusUpdateResult(date_reference=date(2024, 3, 1), contrats_a_expirer=[2], contrats_archives=[1])


def _client(fake: FakeContratService) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_contrat_service] = lambda: fake
    return TestClient(app)


def test_retrieve_all_contrats_with_mocked_service():
    client = _client(FakeContratService([Contrat(id_contrat=1)]))

    r = client.get("/contrat/retrieve-all-contrats")
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body, list)
    assert len(body) == 1
    assert body[0]["idContrat"] == 1


def test_retrieve_all_contrats_serializes_camel_case():
    contrat = Contrat(
        id_contrat=7,
        date_debut_contrat=date(2024, 1, 1),
        date_fin_contrat=date(2024, 6, 30),
        specialite=Specialite.CLOUD,
        archive=False,
        montant_contrat=1500,
        etudiant_id=3,
    )
    client = _client(FakeContratService([contrat]))

    item = client.get("/contrat/retrieve-all-contrats").json()[0]
    assert item["dateDebutContrat"] == "2024-01-01"
    assert item["dateFinContrat"] == "2024-06-30"
    assert item["specialite"] == "CLOUD"
    assert item["archive"] is False
    assert item["montantContrat"] == 1500
    assert item["idEtudiant"] == 3


def test_retrieve_contrat_not_found_uses_error_payload():
    client = _client(FakeContratService())

    r = client.get("/contrat/retrieve-contrat/42", headers={"X-Request-Id": "rid-42"})
    assert r.status_code == 404
    err = r.json()["error"]
    assert err["code"] == "CONTRAT_NOT_FOUND"
    assert err["status"] == 404
    assert err["request_id"] == "rid-42"
    assert err["details"] == {"idContrat": 42}


def test_add_contrat_rejects_end_before_start():
    client = _client(FakeContratService())

    r = client.post(
        "/contrat/add-contrat",
        json={"dateDebutContrat": "2024-05-01", "dateFinContrat": "2024-04-01", "specialite": "IA"},
    )
    assert r.status_code == 422
    err = r.json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert isinstance(err["details"], list)


def test_add_contrat_rejects_unknown_fields():
    client = _client(FakeContratService())

    r = client.post(
        "/contrat/add-contrat",
        json={
            "dateDebutContrat": "2024-01-01",
            "dateFinContrat": "2024-04-01",
            "specialite": "IA",
            "foo": "bar",
        },
    )
    assert r.status_code == 422


def test_add_contrat_returns_created_contrat():
    fake = FakeContratService()
    client = _client(fake)

    r = client.post(
        "/contrat/add-contrat",
        json={
            "dateDebutContrat": "2024-01-01",
            "dateFinContrat": "2024-06-30",
            "specialite": "CLOUD",
            "montantContrat": 900,
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["idContrat"] == 10
    assert body["dateDebutContrat"] == "2024-01-01"
    assert body["dateFinContrat"] == "2024-06-30"
    assert body["specialite"] == "CLOUD"
    assert body["archive"] is False
    assert body["montantContrat"] == 900
    assert len(fake.contrats) == 1


def _update_payload(**overrides):
    payload = {
        "idContrat": 3,
        "dateDebutContrat": "2024-02-01",
        "dateFinContrat": "2024-12-31",
        "specialite": "SECURITE",
        "archive": True,
        "montantContrat": 1500,
    }
    payload.update(overrides)
    return payload


def test_update_contrat_replaces_fields():
    existing = Contrat(
        id_contrat=3,
        date_debut_contrat=date(2024, 1, 1),
        date_fin_contrat=date(2024, 6, 30),
        specialite=Specialite.IA,
        archive=False,
        montant_contrat=100,
    )
    client = _client(FakeContratService([existing]))

    r = client.put("/contrat/update-contrat", json=_update_payload())
    assert r.status_code == 200
    body = r.json()
    assert body["idContrat"] == 3
    assert body["specialite"] == "SECURITE"
    assert body["archive"] is True
    assert body["montantContrat"] == 1500
    assert body["dateFinContrat"] == "2024-12-31"


def test_update_unknown_contrat_is_not_found():
    client = _client(FakeContratService([Contrat(id_contrat=1)]))

    r = client.put("/contrat/update-contrat", json=_update_payload(idContrat=99))
    assert r.status_code == 404
    err = r.json()["error"]
    assert err["code"] == "CONTRAT_NOT_FOUND"
    assert err["details"] == {"idContrat": 99}


def test_update_contrat_rejects_unknown_fields():
    client = _client(FakeContratService([Contrat(id_contrat=3)]))

    r = client.put("/contrat/update-contrat", json=_update_payload(etudiant="x"))
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_assign_quota_reached_is_conflict():
    fake = FakeContratService()
    client = _client(fake)

    r = client.put("/contrat/assignContratToEtudiant/5/Ben Salah/Amine")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "QUOTA_CONTRATS_ATTEINT"
    assert fake.assigned == [(5, "Ben Salah", "Amine")]


def test_nb_contrats_valides_route():
    client = _client(FakeContratService())

    r = client.get("/contrat/getnbContratsValides/2024-01-01/2024-12-31")
    assert r.status_code == 200
    assert r.json() == {"startDate": "2024-01-01", "endDate": "2024-12-31", "nbContratsValides": 3}


def test_chiffre_affaire_route():
    client = _client(FakeContratService())

    r = client.get("/contrat/calculChiffreAffaireEntreDeuxDate/2024-01-01/2024-01-31")
    assert r.status_code == 200
    body = r.json()
    assert body["mois"] == 1.0
    assert body["chiffreAffaire"] == 1200.0


def test_chiffre_affaire_invalid_period():
    client = _client(FakeContratService())

    r = client.get("/contrat/calculChiffreAffaireEntreDeuxDate/2024-02-01/2024-01-01")
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "PERIODE_INVALIDE"


def test_invalid_date_in_path_is_validation_error():
    client = _client(FakeContratService())

    r = client.get("/contrat/getnbContratsValides/not-a-date/2024-12-31")
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_remove_contrat_requires_api_key_when_configured(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")
    fake = FakeContratService([Contrat(id_contrat=1)])
    client = _client(fake)

    r = client.delete("/contrat/remove-contrat/1")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"
    assert fake.removed == []

    r = client.delete("/contrat/remove-contrat/1", headers={"X-API-Key": "secret", "X-Actor": "admin"})
    assert r.status_code == 204
    assert fake.removed == [1]


def test_remove_contrat_bearer_token(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")
    fake = FakeContratService([Contrat(id_contrat=1)])
    client = _client(fake)

    r = client.delete("/contrat/remove-contrat/1", headers={"Authorization": "Bearer secret"})
    assert r.status_code == 204


def test_maj_status_contrat_open_in_dev():
    client = _client(FakeContratService())

    r = client.put("/contrat/majStatusContrat")
    assert r.status_code == 200
    assert r.json() == {"dateReference": "2024-03-01", "contratsAExpirer": [2], "contratsArchives": [1]}


def test_admin_route_fails_closed_in_prod_without_key(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "prod")
    client = _client(FakeContratService())

    r = client.put("/contrat/majStatusContrat")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "SERVER_MISCONFIG"

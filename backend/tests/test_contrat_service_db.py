from __future__ import annotations

import logging
from datetime import date, timedelta

import pytest

from kaddem.core.errors import AppHTTPException
from kaddem.models.contrat import Contrat
from kaddem.models.enums import Option, Specialite
from kaddem.schemas.contrats import ContratCreate, ContratUpdate
from kaddem.schemas.etudiants import EtudiantCreate
from kaddem.services.contrat_service import ContratService
from kaddem.services.etudiant_service import EtudiantService
from kaddem.services.status_job import run_status_job_once


def _create(debut=date(2024, 1, 1), fin=date(2024, 6, 30), specialite=Specialite.IA, **kw) -> ContratCreate:
    return ContratCreate(
        date_debut_contrat=debut,
        date_fin_contrat=fin,
        specialite=specialite,
        **kw,
    )


def test_crud_roundtrip(run_db):
    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db)
            c = await svc.add_contrat(_create(montant_contrat=1000))
            assert c.id_contrat is not None
            assert c.archive is False

            updated = await svc.update_contrat(
                ContratUpdate(
                    id_contrat=c.id_contrat,
                    date_debut_contrat=date(2024, 2, 1),
                    date_fin_contrat=date(2024, 8, 31),
                    specialite=Specialite.CLOUD,
                    montant_contrat=1800,
                )
            )
            assert updated.specialite == Specialite.CLOUD
            assert updated.montant_contrat == 1800

            assert [x.id_contrat for x in await svc.retrieve_all_contrats()] == [c.id_contrat]

            await svc.remove_contrat(c.id_contrat)
            assert await svc.retrieve_all_contrats() == []

            with pytest.raises(AppHTTPException) as exc:
                await svc.retrieve_contrat(c.id_contrat)
            assert exc.value.code == "CONTRAT_NOT_FOUND"

    run_db(scenario)


def test_update_unknown_contrat_is_not_found(run_db):
    async def scenario(sf):
        async with sf() as db:
            with pytest.raises(AppHTTPException) as exc:
                await ContratService(db).update_contrat(
                    ContratUpdate(
                        id_contrat=99,
                        date_debut_contrat=date(2024, 1, 1),
                        date_fin_contrat=date(2024, 2, 1),
                        specialite=Specialite.IA,
                    )
                )
            assert exc.value.status_code == 404

    run_db(scenario)


def test_affect_contrat_respects_quota_of_active_contrats(run_db):
    async def scenario(sf):
        async with sf() as db:
            etudiant = await EtudiantService(db).add_etudiant(
                EtudiantCreate(nom_e=" Trabelsi ", prenom_e="Sarra", op=Option.SE)
            )
            assert etudiant.nom_e == "Trabelsi"

            svc = ContratService(db, max_contrats_actifs=2)
            c1 = await svc.add_contrat(_create())
            c2 = await svc.add_contrat(_create())
            c3 = await svc.add_contrat(_create())

            await svc.affect_contrat_to_etudiant(c1.id_contrat, "Trabelsi", "Sarra")
            await svc.affect_contrat_to_etudiant(c2.id_contrat, "Trabelsi", "Sarra")

            # Réaffectation sans effet, même quota plein
            same = await svc.affect_contrat_to_etudiant(c2.id_contrat, "Trabelsi", "Sarra")
            assert same.etudiant_id == etudiant.id_etudiant

            with pytest.raises(AppHTTPException) as exc:
                await svc.affect_contrat_to_etudiant(c3.id_contrat, "Trabelsi", "Sarra")
            assert exc.value.status_code == 409
            assert exc.value.code == "QUOTA_CONTRATS_ATTEINT"

            # Un contrat archivé libère une place
            c1.archive = True
            await db.commit()
            assigned = await svc.affect_contrat_to_etudiant(c3.id_contrat, "Trabelsi", "Sarra")
            assert assigned.etudiant_id == etudiant.id_etudiant
            assert await svc.count_contrats_actifs(etudiant.id_etudiant) == 2

    run_db(scenario)


def test_affect_contrat_unknown_etudiant(run_db):
    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db)
            c = await svc.add_contrat(_create())
            with pytest.raises(AppHTTPException) as exc:
                await svc.affect_contrat_to_etudiant(c.id_contrat, "Inconnu", "Personne")
            assert exc.value.code == "ETUDIANT_NOT_FOUND"

    run_db(scenario)


def test_nb_contrats_valides_counts_overlapping_non_archived(run_db):
    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db)
            await svc.add_contrat(_create(date(2024, 1, 1), date(2024, 3, 31)))  # chevauche
            await svc.add_contrat(_create(date(2024, 3, 1), date(2024, 12, 31)))  # chevauche
            await svc.add_contrat(_create(date(2023, 1, 1), date(2023, 6, 30)))  # avant
            await svc.add_contrat(_create(date(2024, 2, 1), date(2024, 2, 28), archive=True))  # archivé

            assert await svc.nb_contrats_valides(date(2024, 2, 1), date(2024, 4, 30)) == 2
            assert await svc.nb_contrats_valides(date(2025, 1, 1), date(2025, 12, 31)) == 0

    run_db(scenario)


def test_chiffre_affaire_between_dates(run_db):
    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db)
            await svc.add_contrat(_create(specialite=Specialite.IA))
            await svc.add_contrat(_create(specialite=Specialite.SECURITE))

            assert await svc.get_chiffre_affaire_entre_deux_dates(date(2024, 1, 1), date(2024, 1, 31)) == 750.0

            with pytest.raises(AppHTTPException) as exc:
                await svc.get_chiffre_affaire_entre_deux_dates(date(2024, 2, 1), date(2024, 1, 1))
            assert exc.value.code == "PERIODE_INVALIDE"

    run_db(scenario)


def test_status_update_warns_and_archives(run_db):
    today = date(2024, 3, 1)

    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db, preavis_jours=15)
            expiring = await svc.add_contrat(_create(date(2024, 1, 1), today + timedelta(days=15)))
            ends_today = await svc.add_contrat(_create(date(2024, 1, 1), today))
            expired = await svc.add_contrat(_create(date(2023, 1, 1), today - timedelta(days=10)))
            running = await svc.add_contrat(_create(date(2024, 1, 1), today + timedelta(days=60)))

            result = await svc.retrieve_and_update_status_contrat(today)

            assert result.date_reference == today
            assert result.contrats_a_expirer == [expiring.id_contrat]
            assert result.contrats_archives == [ends_today.id_contrat, expired.id_contrat]

        async with sf() as db:
            rows = {c.id_contrat: c.archive for c in await ContratService(db).retrieve_all_contrats()}
            assert rows == {
                expiring.id_contrat: False,
                ends_today.id_contrat: True,
                expired.id_contrat: True,
                running.id_contrat: False,
            }

            # Déjà archivés : plus rien à faire au passage suivant
            again = await ContratService(db).retrieve_and_update_status_contrat(today)
            assert again.contrats_archives == []

    run_db(scenario)


def test_status_job_once_uses_session_factory(run_db):
    async def scenario(sf):
        async with sf() as db:
            db.add(
                Contrat(
                    date_debut_contrat=date.today() - timedelta(days=90),
                    date_fin_contrat=date.today() - timedelta(days=1),
                    specialite=Specialite.CLOUD,
                    archive=False,
                    montant_contrat=0,
                )
            )
            await db.commit()

        result = await run_status_job_once(session_factory=sf)
        assert len(result.contrats_archives) == 1

    run_db(scenario)


def test_etudiant_service_not_found(run_db):
    async def scenario(sf):
        async with sf() as db:
            with pytest.raises(AppHTTPException) as exc:
                await EtudiantService(db).retrieve_etudiant(1)
            assert exc.value.code == "ETUDIANT_NOT_FOUND"

    run_db(scenario)


def test_status_update_logs_days_left_separately(run_db, caplog):
    today = date(2024, 3, 1)

    async def scenario(sf):
        async with sf() as db:
            svc = ContratService(db, preavis_jours=15)
            await svc.add_contrat(_create(date(2024, 1, 1), today + timedelta(days=15)))
            await svc.add_contrat(_create(date(2024, 1, 1), today + timedelta(days=15)))
            await svc.retrieve_and_update_status_contrat(today)

    with caplog.at_level(logging.INFO, logger="kaddem.contrats"):
        run_db(scenario)

    warnings = [r for r in caplog.records if r.getMessage() == "contrat_expire_bientot"]
    assert len(warnings) == 2
    assert all(r.days_left == 15 for r in warnings)
    assert not any(hasattr(r, "expiring") for r in warnings)

    summary = next(r for r in caplog.records if r.getMessage() == "contrat_status_update")
    assert summary.expiring == 2

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaddem.core.errors import AppHTTPException
from kaddem.core.settings import settings
from kaddem.models.contrat import Contrat
from kaddem.models.enums import Specialite
from kaddem.models.etudiant import Etudiant
from kaddem.schemas.contrats import ContratCreate, ContratUpdate

"""
Contrat Service.

Rôle (fonctionnel) :
- CRUD des contrats (liste, détail, ajout, mise à jour complète, suppression).
- Affectation d’un contrat à un étudiant (recherché par nom/prénom) avec un quota de contrats actifs.
- Comptage des contrats valides (non archivés) sur une période.
- Mise à jour des statuts : signale les contrats qui arrivent à échéance et archive les contrats échus.
- Estimation du chiffre d’affaires entre deux dates (tarif mensuel par spécialité).

Les règles de calcul sont des fonctions pures (testables sans base) ; ContratService
orchestre l’accès DB et lève AppHTTPException pour les erreurs métier.
"""

log = logging.getLogger("kaddem.contrats")

# Tarif mensuel par spécialité (chiffre d’affaires)
TARIFS_MENSUELS: Dict[Specialite, int] = {
    Specialite.IA: 300,
    Specialite.RESEAUX: 350,
    Specialite.CLOUD: 400,
    Specialite.SECURITE: 450,
}

JOURS_PAR_MOIS = 30


def mois_entre(start: date, end: date) -> float:
    """Durée de la période en mois “commerciaux” (jours / 30)."""
    return (end - start).days / JOURS_PAR_MOIS


def chiffre_affaire(contrats: Iterable[Contrat], start: date, end: date) -> float:
    """Somme, sur les contrats, de (mois de la période × tarif mensuel de la spécialité)."""
    mois = mois_entre(start, end)
    total = 0.0
    for c in contrats:
        tarif = TARIFS_MENSUELS.get(c.specialite)
        if tarif is None:
            continue
        total += mois * tarif
    return round(total, 2)


def jours_restants(contrat: Contrat, today: date) -> int:
    return (contrat.date_fin_contrat - today).days


@dataclass
class StatusUpdateResult:
    date_reference: date
    contrats_a_expirer: List[int] = field(default_factory=list)
    contrats_archives: List[int] = field(default_factory=list)


class ContratService:
    """
    Service des contrats.

    Dépend uniquement d’une AsyncSession ; les paramètres métier (quota, préavis) viennent des
    settings mais restent injectables pour les tests.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        max_contrats_actifs: Optional[int] = None,
        preavis_jours: Optional[int] = None,
    ) -> None:
        self.db = db
        self.max_contrats_actifs = (
            max_contrats_actifs if max_contrats_actifs is not None else settings.MAX_CONTRATS_ACTIFS
        )
        self.preavis_jours = preavis_jours if preavis_jours is not None else settings.CONTRAT_ALERTE_JOURS

    # ---------------- CRUD ----------------

    async def retrieve_all_contrats(self) -> List[Contrat]:
        rows = await self.db.execute(select(Contrat).order_by(Contrat.id_contrat))
        return list(rows.scalars().all())

    async def retrieve_contrat(self, id_contrat: int) -> Contrat:
        contrat = await self.db.get(Contrat, id_contrat)
        if contrat is None:
            raise AppHTTPException(
                404,
                "CONTRAT_NOT_FOUND",
                "Contrat introuvable",
                details={"idContrat": id_contrat},
            )
        return contrat

    async def add_contrat(self, data: ContratCreate) -> Contrat:
        contrat = Contrat(**data.model_dump())
        self.db.add(contrat)
        await self.db.commit()
        await self.db.refresh(contrat)
        log.info("contrat_added", extra={"contrat_id": contrat.id_contrat})
        return contrat

    async def update_contrat(self, data: ContratUpdate) -> Contrat:
        contrat = await self.retrieve_contrat(data.id_contrat)
        for key, value in data.model_dump(exclude={"id_contrat"}).items():
            setattr(contrat, key, value)
        await self.db.commit()
        await self.db.refresh(contrat)
        log.info("contrat_updated", extra={"contrat_id": contrat.id_contrat})
        return contrat

    async def remove_contrat(self, id_contrat: int) -> None:
        contrat = await self.retrieve_contrat(id_contrat)
        await self.db.delete(contrat)
        await self.db.commit()
        log.info("contrat_removed", extra={"contrat_id": id_contrat})

    # ---------------- Affectation ----------------

    async def _find_etudiant(self, nom_e: str, prenom_e: str) -> Etudiant:
        stmt = (
            select(Etudiant)
            .where(Etudiant.nom_e == nom_e, Etudiant.prenom_e == prenom_e)
            .order_by(Etudiant.id_etudiant)
        )
        etudiant = (await self.db.execute(stmt)).scalars().first()
        if etudiant is None:
            raise AppHTTPException(
                404,
                "ETUDIANT_NOT_FOUND",
                "Étudiant introuvable",
                details={"nomE": nom_e, "prenomE": prenom_e},
            )
        return etudiant

    async def count_contrats_actifs(self, id_etudiant: int, *, exclude_id: Optional[int] = None) -> int:
        stmt = select(func.count(Contrat.id_contrat)).where(
            Contrat.etudiant_id == id_etudiant,
            Contrat.archive.is_(False),
        )
        if exclude_id is not None:
            stmt = stmt.where(Contrat.id_contrat != exclude_id)
        return int((await self.db.execute(stmt)).scalar_one())

    async def affect_contrat_to_etudiant(self, id_contrat: int, nom_e: str, prenom_e: str) -> Contrat:
        """
        Affecte un contrat à l’étudiant (nom_e, prenom_e).

        - Un étudiant ne peut pas avoir plus de `max_contrats_actifs` contrats non archivés.
        - Réaffecter un contrat déjà porté par l’étudiant est sans effet.
        """
        etudiant = await self._find_etudiant(nom_e, prenom_e)
        contrat = await self.retrieve_contrat(id_contrat)

        if contrat.etudiant_id == etudiant.id_etudiant:
            return contrat

        actifs = await self.count_contrats_actifs(etudiant.id_etudiant, exclude_id=contrat.id_contrat)
        if actifs >= self.max_contrats_actifs:
            raise AppHTTPException(
                409,
                "QUOTA_CONTRATS_ATTEINT",
                f"L’étudiant a déjà {actifs} contrats actifs (max {self.max_contrats_actifs})",
                details={"idEtudiant": etudiant.id_etudiant, "contratsActifs": actifs},
            )

        contrat.etudiant_id = etudiant.id_etudiant
        await self.db.commit()
        await self.db.refresh(contrat)

        log.info(
            "contrat_assigned",
            extra={"contrat_id": contrat.id_contrat, "etudiant": f"{nom_e} {prenom_e}"},
        )
        return contrat

    # ---------------- Statistiques ----------------

    async def nb_contrats_valides(self, start: date, end: date) -> int:
        """Contrats non archivés dont la période chevauche [start, end]."""
        stmt = select(func.count(Contrat.id_contrat)).where(
            Contrat.archive.is_(False),
            Contrat.date_debut_contrat <= end,
            Contrat.date_fin_contrat >= start,
        )
        return int((await self.db.execute(stmt)).scalar_one())

    async def get_chiffre_affaire_entre_deux_dates(self, start: date, end: date) -> float:
        if end < start:
            raise AppHTTPException(
                422,
                "PERIODE_INVALIDE",
                "endDate doit être postérieure ou égale à startDate",
                details={"startDate": start.isoformat(), "endDate": end.isoformat()},
            )
        contrats = await self.retrieve_all_contrats()
        return chiffre_affaire(contrats, start, end)

    # ---------------- Statuts ----------------

    async def retrieve_and_update_status_contrat(self, today: Optional[date] = None) -> StatusUpdateResult:
        """
        Parcourt les contrats non archivés :
        - fin dans exactement `preavis_jours` jours : signalé (log WARNING) ;
        - date de fin atteinte ou dépassée : archivé.
        """
        today = today or date.today()
        result = StatusUpdateResult(date_reference=today)

        rows = await self.db.execute(
            select(Contrat).where(Contrat.archive.is_(False)).order_by(Contrat.id_contrat)
        )
        for contrat in rows.scalars().all():
            restants = jours_restants(contrat, today)
            if restants == self.preavis_jours:
                result.contrats_a_expirer.append(contrat.id_contrat)
                log.warning(
                    "contrat_expire_bientot",
                    extra={"contrat_id": contrat.id_contrat, "days_left": restants},
                )
            elif restants <= 0:
                contrat.archive = True
                result.contrats_archives.append(contrat.id_contrat)

        if result.contrats_archives:
            await self.db.commit()

        log.info(
            "contrat_status_update",
            extra={
                "archived": len(result.contrats_archives),
                "expiring": len(result.contrats_a_expirer),
            },
        )
        return result

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kaddem.core.errors import AppHTTPException
from kaddem.models.etudiant import Etudiant
from kaddem.schemas.etudiants import EtudiantCreate

log = logging.getLogger("kaddem.etudiants")


class EtudiantService:
    """Référentiel minimal des étudiants (cible des affectations de contrats)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def retrieve_all_etudiants(self) -> List[Etudiant]:
        rows = await self.db.execute(select(Etudiant).order_by(Etudiant.id_etudiant))
        return list(rows.scalars().all())

    async def retrieve_etudiant(self, id_etudiant: int) -> Etudiant:
        etudiant = await self.db.get(Etudiant, id_etudiant)
        if etudiant is None:
            raise AppHTTPException(
                404,
                "ETUDIANT_NOT_FOUND",
                "Étudiant introuvable",
                details={"idEtudiant": id_etudiant},
            )
        return etudiant

    async def add_etudiant(self, data: EtudiantCreate) -> Etudiant:
        etudiant = Etudiant(**data.model_dump())
        self.db.add(etudiant)
        await self.db.commit()
        await self.db.refresh(etudiant)
        log.info("etudiant_added", extra={"etudiant": f"{etudiant.nom_e} {etudiant.prenom_e}"})
        return etudiant

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from kaddem.core.security import require_api_key
from kaddem.db.session import get_db
from kaddem.services.contrat_service import ContratService
from kaddem.services.etudiant_service import EtudiantService

"""
Dépendances API.

Rôle (fonctionnel) :
- Centralise les dépendances réutilisables sur les routes :
  - services métier construits sur la session DB de la requête (remplaçables dans les tests
    via app.dependency_overrides) ;
  - protection des opérations sensibles par clé API.
"""


def get_contrat_service(db: AsyncSession = Depends(get_db)) -> ContratService:
    return ContratService(db)


def get_etudiant_service(db: AsyncSession = Depends(get_db)) -> EtudiantService:
    return EtudiantService(db)


async def require_admin(request: Request) -> None:
    await require_api_key(request)


# Dépendance prête à l’emploi pour protéger un endpoint
AdminAuthDep = Depends(require_admin)

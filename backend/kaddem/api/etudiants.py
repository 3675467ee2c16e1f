from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path

from kaddem.api.deps import get_etudiant_service
from kaddem.schemas.etudiants import EtudiantCreate, EtudiantOut
from kaddem.services.etudiant_service import EtudiantService

"""
API Étudiants.

Rôle (fonctionnel) :
- Référentiel minimal des étudiants, nécessaire pour affecter des contrats
  (PUT /contrat/assignContratToEtudiant/{idContrat}/{nomE}/{prenomE}).
"""

router = APIRouter(prefix="/etudiant", tags=["etudiants"])


@router.get("/retrieve-all-etudiants", response_model=List[EtudiantOut])
async def get_etudiants(svc: EtudiantService = Depends(get_etudiant_service)):
    return await svc.retrieve_all_etudiants()


@router.get("/retrieve-etudiant/{etudiant_id}", response_model=EtudiantOut)
async def retrieve_etudiant(
    etudiant_id: int = Path(..., ge=1),
    svc: EtudiantService = Depends(get_etudiant_service),
):
    return await svc.retrieve_etudiant(etudiant_id)


@router.post("/add-etudiant", response_model=EtudiantOut)
async def add_etudiant(payload: EtudiantCreate, svc: EtudiantService = Depends(get_etudiant_service)):
    return await svc.add_etudiant(payload)

from __future__ import annotations

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Request, Response

from kaddem.api.deps import AdminAuthDep, get_contrat_service
from kaddem.core.security import actor_of
from kaddem.schemas.contrats import (
    ChiffreAffaireOut,
    ContratCreate,
    ContratOut,
    ContratUpdate,
    NbContratsValidesOut,
    StatusUpdateOut,
)
from kaddem.services.contrat_service import ContratService, mois_entre

"""
API Contrats.

Rôle (fonctionnel) :
- Expose les opérations du service contrats sous /contrat (chemins historiques du front) :
  liste, détail, ajout, mise à jour, suppression, affectation à un étudiant,
  comptage des contrats valides, mise à jour des statuts, chiffre d’affaires.
- Les opérations destructives / d’administration (suppression, mise à jour des statuts)
  sont protégées par clé API.

Notes :
- Aucune logique métier ici : tout passe par ContratService (Depends(get_contrat_service)).
- Les erreurs métier (404, 409, 422) sont levées par le service en AppHTTPException.
"""

router = APIRouter(prefix="/contrat", tags=["contrats"])
log = logging.getLogger("kaddem.contrats")


@router.get("/retrieve-all-contrats", response_model=List[ContratOut])
async def get_contrats(svc: ContratService = Depends(get_contrat_service)):
    return await svc.retrieve_all_contrats()


@router.get("/retrieve-contrat/{contrat_id}", response_model=ContratOut)
async def retrieve_contrat(
    contrat_id: int = Path(..., ge=1),
    svc: ContratService = Depends(get_contrat_service),
):
    return await svc.retrieve_contrat(contrat_id)


@router.post("/add-contrat", response_model=ContratOut)
async def add_contrat(payload: ContratCreate, svc: ContratService = Depends(get_contrat_service)):
    return await svc.add_contrat(payload)


@router.put("/update-contrat", response_model=ContratOut)
async def update_contrat(payload: ContratUpdate, svc: ContratService = Depends(get_contrat_service)):
    return await svc.update_contrat(payload)


@router.delete("/remove-contrat/{contrat_id}", status_code=204, dependencies=[AdminAuthDep])
async def remove_contrat(
    request: Request,
    contrat_id: int = Path(..., ge=1),
    svc: ContratService = Depends(get_contrat_service),
):
    await svc.remove_contrat(contrat_id)
    log.info("contrat_remove_requested", extra={"contrat_id": contrat_id, "actor": actor_of(request)})
    return Response(status_code=204)


@router.put("/assignContratToEtudiant/{idContrat}/{nomE}/{prenomE}", response_model=ContratOut)
async def assign_contrat_to_etudiant(
    id_contrat: int = Path(..., alias="idContrat", ge=1),
    nom_e: str = Path(..., alias="nomE", min_length=1),
    prenom_e: str = Path(..., alias="prenomE", min_length=1),
    svc: ContratService = Depends(get_contrat_service),
):
    return await svc.affect_contrat_to_etudiant(id_contrat, nom_e.strip(), prenom_e.strip())


@router.get("/getnbContratsValides/{startDate}/{endDate}", response_model=NbContratsValidesOut)
async def get_nb_contrats_valides(
    start_date: date = Path(..., alias="startDate"),
    end_date: date = Path(..., alias="endDate"),
    svc: ContratService = Depends(get_contrat_service),
):
    nb = await svc.nb_contrats_valides(start_date, end_date)
    return NbContratsValidesOut(start_date=start_date, end_date=end_date, nb_contrats_valides=nb)


@router.put("/majStatusContrat", response_model=StatusUpdateOut, dependencies=[AdminAuthDep])
async def maj_status_contrat(request: Request, svc: ContratService = Depends(get_contrat_service)):
    log.info("contrat_status_update_requested", extra={"actor": actor_of(request)})
    result = await svc.retrieve_and_update_status_contrat()
    return StatusUpdateOut(
        date_reference=result.date_reference,
        contrats_a_expirer=result.contrats_a_expirer,
        contrats_archives=result.contrats_archives,
    )


@router.get("/calculChiffreAffaireEntreDeuxDate/{startDate}/{endDate}", response_model=ChiffreAffaireOut)
async def calcul_chiffre_affaire(
    start_date: date = Path(..., alias="startDate"),
    end_date: date = Path(..., alias="endDate"),
    svc: ContratService = Depends(get_contrat_service),
):
    ca = await svc.get_chiffre_affaire_entre_deux_dates(start_date, end_date)
    return ChiffreAffaireOut(
        start_date=start_date,
        end_date=end_date,
        mois=round(mois_entre(start_date, end_date), 4),
        chiffre_affaire=ca,
    )

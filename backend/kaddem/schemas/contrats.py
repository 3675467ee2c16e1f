from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from kaddem.models.enums import Specialite

"""
Schemas Contrats (Pydantic).

Rôle (fonctionnel) :
- Définit le contrat HTTP des contrats (création, mise à jour, lecture) et des réponses
  “calculées” (comptage, chiffre d’affaires, mise à jour des statuts).
- Validation stricte des entrées :
  - refuse les champs inconnus (extra="forbid")
  - montant >= 0
  - date de fin >= date de début

Notes :
- from_attributes=True permet de sérialiser directement depuis des objets SQLAlchemy.
- Les champs de sortie sont optionnels : un contrat partiellement renseigné reste sérialisable.
"""

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContratBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    date_debut_contrat: date
    date_fin_contrat: date
    specialite: Specialite
    archive: bool = False
    montant_contrat: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _periode_valide(self) -> "ContratBase":
        """La date de fin ne peut pas précéder la date de début."""
        if self.date_fin_contrat < self.date_debut_contrat:
            raise ValueError("dateFinContrat doit être postérieure ou égale à dateDebutContrat")
        return self


class ContratCreate(ContratBase):
    """Payload de création (l’identifiant est attribué par la base)."""


class ContratUpdate(ContratBase):
    """Payload de mise à jour complète : l’identifiant désigne le contrat à remplacer."""
    id_contrat: int = Field(..., ge=1)


class ContratOut(BaseModel):
    """Sortie API pour un contrat."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id_contrat: int
    date_debut_contrat: Optional[date] = None
    date_fin_contrat: Optional[date] = None
    specialite: Optional[Specialite] = None
    archive: Optional[bool] = None
    montant_contrat: Optional[int] = None
    id_etudiant: Optional[int] = Field(
        default=None,
        validation_alias="etudiant_id",
        serialization_alias="idEtudiant",
    )


class NbContratsValidesOut(BaseModel):
    model_config = _CAMEL

    start_date: date
    end_date: date
    nb_contrats_valides: int


class ChiffreAffaireOut(BaseModel):
    """Estimation du chiffre d’affaires sur une période (mois = jours / 30)."""
    model_config = _CAMEL

    start_date: date
    end_date: date
    mois: float
    chiffre_affaire: float


class StatusUpdateOut(BaseModel):
    """Résultat de la mise à jour des statuts : contrats bientôt échus + contrats archivés."""
    model_config = _CAMEL

    date_reference: date
    contrats_a_expirer: List[int]
    contrats_archives: List[int]

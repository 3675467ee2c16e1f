from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from kaddem.models.enums import Option


class EtudiantCreate(BaseModel):
    """Payload de création d’un étudiant (noms nettoyés des espaces)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    nom_e: str = Field(..., min_length=1, max_length=100)
    prenom_e: str = Field(..., min_length=1, max_length=100)
    op: Optional[Option] = None

    @field_validator("nom_e", "prenom_e", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class EtudiantOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id_etudiant: int
    nom_e: str
    prenom_e: str
    op: Optional[Option] = None

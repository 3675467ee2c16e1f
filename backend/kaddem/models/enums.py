from __future__ import annotations

from enum import Enum

"""
Enums métier partagés (ORM + schémas Pydantic).

- Specialite : domaine d’un contrat, détermine le tarif mensuel (chiffre d’affaires).
- Option : option d’étude d’un étudiant.
"""


class Specialite(str, Enum):
    IA = "IA"
    RESEAUX = "RESEAUX"
    CLOUD = "CLOUD"
    SECURITE = "SECURITE"


class Option(str, Enum):
    GAMIX = "GAMIX"
    SE = "SE"
    SIM = "SIM"
    NIDS = "NIDS"

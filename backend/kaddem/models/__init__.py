"""
kaddem.models

Package ORM (SQLAlchemy) : définition des entités persistées en base.

Rôle (fonctionnel) :
- Centralise les modèles de l’application (Contrat, Etudiant) et leurs enums.
- Importer ce package enregistre toutes les tables dans Base.metadata (Alembic, tests).
"""

from kaddem.models.enums import Option, Specialite
from kaddem.models.etudiant import Etudiant
from kaddem.models.contrat import Contrat

__all__ = ["Contrat", "Etudiant", "Option", "Specialite"]

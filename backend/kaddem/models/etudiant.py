from __future__ import annotations

from sqlalchemy import Enum as SAEnum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kaddem.db.base import Base
from kaddem.models.enums import Option

"""
Model Etudiant.

Rôle (fonctionnel) :
- Représente un étudiant auquel des contrats peuvent être affectés.
- Identifié côté API par (nom_e, prenom_e) pour l’affectation d’un contrat.

Index :
- (nom_e, prenom_e) : recherche par nom lors de l’affectation.
"""


class Etudiant(Base):
    __tablename__ = "etudiant"

    id_etudiant: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    nom_e: Mapped[str] = mapped_column(String(100), nullable=False)
    prenom_e: Mapped[str] = mapped_column(String(100), nullable=False)

    op: Mapped[Option | None] = mapped_column(
        SAEnum(Option, name="option", native_enum=False, length=20),
        nullable=True,
    )

    contrats = relationship("Contrat", back_populates="etudiant")

    __table_args__ = (
        Index("ix_etudiant_nom_prenom", "nom_e", "prenom_e"),
    )

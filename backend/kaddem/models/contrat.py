from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, Enum as SAEnum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kaddem.db.base import Base
from kaddem.models.enums import Specialite

"""
Model Contrat.

Rôle (fonctionnel) :
- Représente un contrat d’étudiant : période (début/fin), spécialité, montant, état d’archivage.
- Un contrat non archivé est “actif” : il compte dans le quota de l’étudiant et peut être
  archivé automatiquement par le job quotidien quand sa date de fin est atteinte.

Champs principaux :
- date_debut_contrat / date_fin_contrat : période du contrat (dates, sans heure).
- specialite : IA / RESEAUX / CLOUD / SECURITE (tarif mensuel du chiffre d’affaires).
- archive : True une fois le contrat échu.
- montant_contrat : montant entier.

Relations :
- Contrat -> Etudiant : N..0/1 (un contrat peut ne pas encore être affecté).

Index :
- (archive, date_fin_contrat) : requêtes du job quotidien et comptage des contrats valides.
"""


class Contrat(Base):
    __tablename__ = "contrat"

    id_contrat: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    date_debut_contrat: Mapped[date] = mapped_column(Date, nullable=False)
    date_fin_contrat: Mapped[date] = mapped_column(Date, nullable=False)

    specialite: Mapped[Specialite] = mapped_column(
        SAEnum(Specialite, name="specialite", native_enum=False, length=20),
        nullable=False,
    )

    archive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    montant_contrat: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Étudiant affecté (optionnel) ; SET NULL si l’étudiant est supprimé
    etudiant_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("etudiant.id_etudiant", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    etudiant = relationship("Etudiant", back_populates="contrats")

    __table_args__ = (
        Index("ix_contrat_archive_fin", "archive", "date_fin_contrat"),
    )

    def __repr__(self) -> str:
        return (
            f"Contrat(id={self.id_contrat}, {self.specialite}, "
            f"{self.date_debut_contrat}..{self.date_fin_contrat}, archive={self.archive})"
        )

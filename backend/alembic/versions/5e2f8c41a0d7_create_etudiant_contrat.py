"""Création des tables etudiant et contrat.

Rôle (fonctionnel) :
- etudiant : étudiants auxquels des contrats sont affectés (recherche par nom/prénom).
- contrat : période, spécialité, montant, archivage, étudiant affecté (optionnel).
Les enums (spécialité, option) sont stockés en VARCHAR (pas de type ENUM natif).

Revision ID: 5e2f8c41a0d7
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Identifiants Alembic
revision: str = "5e2f8c41a0d7"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "etudiant",
        sa.Column("id_etudiant", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nom_e", sa.String(length=100), nullable=False),
        sa.Column("prenom_e", sa.String(length=100), nullable=False),
        sa.Column("op", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id_etudiant", name=op.f("pk_etudiant")),
    )
    op.create_index("ix_etudiant_nom_prenom", "etudiant", ["nom_e", "prenom_e"], unique=False)

    op.create_table(
        "contrat",
        sa.Column("id_contrat", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("date_debut_contrat", sa.Date(), nullable=False),
        sa.Column("date_fin_contrat", sa.Date(), nullable=False),
        sa.Column("specialite", sa.String(length=20), nullable=False),
        sa.Column("archive", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("montant_contrat", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("etudiant_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["etudiant_id"],
            ["etudiant.id_etudiant"],
            name=op.f("fk_contrat_etudiant_id_etudiant"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id_contrat", name=op.f("pk_contrat")),
    )
    op.create_index(op.f("ix_contrat_etudiant_id"), "contrat", ["etudiant_id"], unique=False)
    op.create_index("ix_contrat_archive_fin", "contrat", ["archive", "date_fin_contrat"], unique=False)


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_index("ix_contrat_archive_fin", table_name="contrat")
    op.drop_index(op.f("ix_contrat_etudiant_id"), table_name="contrat")
    op.drop_table("contrat")
    op.drop_index("ix_etudiant_nom_prenom", table_name="etudiant")
    op.drop_table("etudiant")

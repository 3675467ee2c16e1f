from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

"""
DB Base.

Rôle (fonctionnel) :
- Définit la classe Base SQLAlchemy commune à tous les modèles ORM (Contrat, Etudiant).
- Sert de point d’ancrage pour la metadata utilisée par Alembic et par les tests
  (Base.metadata.create_all sur SQLite en mémoire).

Note :
- Convention de nommage des contraintes : noms stables entre Postgres et SQLite,
  ce qui garde les migrations Alembic reproductibles.
"""

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Classe racine ORM (SQLAlchemy Declarative)."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

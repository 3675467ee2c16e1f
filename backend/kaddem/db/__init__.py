"""
kaddem.db

Package base de données : connexion, session et base déclarative.

- base : classe Base SQLAlchemy commune aux modèles (kaddem.models).
- session : engine async + sessions AsyncSession pour FastAPI (Depends(get_db)).
- migrations : Alembic (backend/alembic) via DATABASE_URL_SYNC.
"""

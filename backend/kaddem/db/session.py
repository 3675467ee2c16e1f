from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from kaddem.core.settings import settings

"""
DB Session.

Rôle (fonctionnel) :
- Initialise l’engine SQLAlchemy en mode async (runtime FastAPI).
- Fournit une factory de sessions AsyncSession (AsyncSessionLocal), utilisée aussi
  par le job quotidien de mise à jour des statuts de contrats.
- Expose `get_db()` comme dépendance FastAPI (Depends(get_db)).

Notes :
- expire_on_commit=False : permet de réutiliser les objets après commit sans rechargement automatique
  (indispensable en async : pas de lazy-load implicite après commit).
- echo=False : pas de log SQL brut (on préfère les logs applicatifs en JSON).
"""

engine = create_async_engine(settings.DATABASE_URL, echo=False)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db():
    """Dépendance FastAPI : yield une session DB et garantit sa fermeture."""
    async with AsyncSessionLocal() as session:
        yield session

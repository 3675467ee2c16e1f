from __future__ import annotations

import os
import sys
from pathlib import Path

import anyio
import pytest

# Ensure `backend/` is on sys.path so `import kaddem.*` works in tests.
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

# Pas de Postgres en test : l’engine global pointe vers SQLite (jamais utilisé par les tests API mockés)
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["API_KEY"] = ""
os.environ["ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STATUS_JOB_ENABLED"] = "false"

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from kaddem.core.rate_limit import rate_limiter  # noqa: E402
from kaddem.db.base import Base  # noqa: E402
import kaddem.models  # noqa: E402,F401


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def run_db():
    """
    Exécute `fn(session_factory)` sur une base SQLite en mémoire fraîche (schéma créé depuis la metadata).

    Usage : run_db(lambda sf: ...) où la lambda est une coroutine function.
    """

    def _run(fn):
        async def _main():
            engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(engine, expire_on_commit=False)
            try:
                return await fn(session_factory)
            finally:
                await engine.dispose()

        return anyio.run(_main)

    return _run

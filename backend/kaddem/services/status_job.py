from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from kaddem.db.session import AsyncSessionLocal
from kaddem.services.contrat_service import ContratService, StatusUpdateResult

"""
Job quotidien de mise à jour des statuts de contrats.

Rôle (fonctionnel) :
- Exécute ContratService.retrieve_and_update_status_contrat() une fois par jour à heure fixe
  (STATUS_JOB_HOUR, heure locale du serveur).
- Démarré par le lifespan FastAPI si STATUS_JOB_ENABLED=true ; annulé à l’arrêt de l’application.

Notes :
- Une erreur lors d’une exécution est journalisée et n’arrête pas la boucle : l’exécution
  du lendemain a lieu normalement.
- Une seule instance de l’API doit activer le job (pas de verrou distribué).
"""

log = logging.getLogger("kaddem.status_job")


def seconds_until_next_run(now: datetime, hour: int) -> float:
    """Délai jusqu’au prochain passage à `hour`:00 (aujourd’hui si pas encore passé, sinon demain)."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def run_status_job_once(session_factory: Callable = AsyncSessionLocal) -> StatusUpdateResult:
    async with session_factory() as session:
        return await ContratService(session).retrieve_and_update_status_contrat()


async def status_job_loop(
    hour: int,
    *,
    session_factory: Callable = AsyncSessionLocal,
    clock: Optional[Callable[[], datetime]] = None,
) -> None:
    clock = clock or datetime.now
    while True:
        delay = seconds_until_next_run(clock(), hour)
        log.info("status_job_scheduled in %.0fs", delay)
        await asyncio.sleep(delay)
        try:
            await run_status_job_once(session_factory)
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception("status_job_failed")

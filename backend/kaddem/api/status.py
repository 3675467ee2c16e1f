from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaddem.core.settings import settings
from kaddem.db.session import get_db
from kaddem.models.contrat import Contrat

"""
API System Status.

Rôle (fonctionnel) :
- Expose un endpoint de statut (readiness) pour la plateforme.
- Vérifie la disponibilité de la base (requête simple sur la table contrat).
- Indique si le job quotidien de mise à jour des statuts est actif.
"""

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status")
async def system_status(db: AsyncSession = Depends(get_db)):
    db_ok = True
    contrats_total = None
    contrats_actifs = None
    try:
        contrats_total = int((await db.execute(select(func.count(Contrat.id_contrat)))).scalar_one())
        contrats_actifs = int(
            (
                await db.execute(
                    select(func.count(Contrat.id_contrat)).where(Contrat.archive.is_(False))
                )
            ).scalar_one()
        )
    except Exception:
        db_ok = False

    # Réponse (format constant) pour monitoring / UI
    return {
        "ok": db_ok,
        "db": {"ok": db_ok},
        "contrats": {"total": contrats_total, "actifs": contrats_actifs},
        "status_job": {
            "enabled": settings.STATUS_JOB_ENABLED,
            "hour": settings.STATUS_JOB_HOUR,
        },
        "ts": datetime.now(timezone.utc).isoformat(),
    }

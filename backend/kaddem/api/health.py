from fastapi import APIRouter

from kaddem.core.settings import settings

"""
API Health.

Rôle (fonctionnel) :
- Endpoint simple pour vérifier que l’API répond (sonde liveness du conteneur / du pipeline).
- Expose quelques paramètres utiles en démo (env, quota de contrats actifs).
"""

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "env": settings.ENV,
        "max_contrats_actifs": settings.MAX_CONTRATS_ACTIFS,
    }

from fastapi import APIRouter

from .health import router as health_router
from .status import router as status_router
from .contrats import router as contrats_router
from .etudiants import router as etudiants_router

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs par domaine (health, system, contrats, étudiants).
- Sert de point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(status_router)
api_router.include_router(contrats_router)
api_router.include_router(etudiants_router)

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Any

"""
Core Request ID.

Rôle (fonctionnel) :
- Gère un identifiant de requête (request_id) stocké dans un ContextVar.
- Permet de corréler logs et erreurs pour une même requête (ex : affectation d’un contrat).
- Le request_id est repris du header X-Request-Id s’il existe, sinon généré.

Notes :
- ContextVar est adapté aux contextes async (FastAPI) : chaque requête garde son propre request_id.
- Utilisé par le logging (injection dans les logs) et par les handlers d’erreurs.
"""

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    """Force la valeur du request_id pour le contexte courant."""
    _request_id.set(rid)


def get_request_id() -> str | None:
    """Retourne le request_id du contexte courant (ou None)."""
    return _request_id.get()


def ensure_request_id(incoming: str | None = None) -> str:
    """
    Garantit un request_id pour le contexte courant.

    - Si un request_id entrant est fourni, il est nettoyé et réutilisé.
    - Sinon, on génère un UUID.
    """
    rid = (incoming or "").strip() or str(uuid.uuid4())
    set_request_id(rid)
    return rid


def request_id_for(request: Any) -> str:
    """request_id d’une requête : state (middleware) > contextvar > nouveau UUID."""
    state = getattr(request, "state", None)
    return getattr(state, "request_id", None) or get_request_id() or str(uuid.uuid4())

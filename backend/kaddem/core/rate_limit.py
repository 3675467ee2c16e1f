from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Tuple

from fastapi import Request

from kaddem.core.errors import AppHTTPException
from kaddem.core.settings import settings

"""
Core Rate Limit.

Rôle (fonctionnel) :
- Protège les routes /contrat et /etudiant contre les rafales de requêtes.
- Implémentation “in-memory” par IP + route (method + préfixe), fenêtre fixe de 60 secondes (RPM).
- Suffisant pour une instance unique ; au-delà, un stockage partagé (Redis) serait nécessaire.

Activation via settings :
- RATE_LIMIT_ENABLED : active/désactive le rate limiting.
- RATE_LIMIT_RPM : limite de requêtes par minute (par IP + route).
"""

RATE_LIMITED_PREFIXES = ("/contrat", "/etudiant")


@dataclass
class _Bucket:
    """État minimal d’un compteur sur une fenêtre fixe."""
    window_start: float
    count: int


class InMemoryRateLimiter:
    """
    Rate limiter en mémoire.

    - Stocke un compteur par clé (IP, "METHOD /prefixe") sur une fenêtre de 60s :
      /contrat/retrieve-contrat/1 et /contrat/retrieve-contrat/2 partagent le même compteur.
    - Réinitialise le compteur à chaque nouvelle fenêtre ; les fenêtres expirées sont purgées.
    - Déclenche AppHTTPException(429) si la limite est dépassée.
    """

    window_s = 60.0

    def __init__(self) -> None:
        self._lock = Lock()
        self._buckets: Dict[Tuple[str, str], _Bucket] = {}
        self._last_purge = 0.0

    def _client_ip(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def applies_to(self, path: str) -> bool:
        return path.startswith(RATE_LIMITED_PREFIXES)

    def route_key(self, method: str, path: str) -> str:
        """Clé de route indépendante des paramètres de chemin (préfixe limité)."""
        prefix = next((p for p in RATE_LIMITED_PREFIXES if path.startswith(p)), path)
        return f"{method} {prefix}"

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
            self._last_purge = 0.0

    def _purge(self, now: float) -> None:
        """Supprime les compteurs dont la fenêtre est terminée (au plus une fois par fenêtre)."""
        if (now - self._last_purge) < self.window_s:
            return
        expired = [k for k, b in self._buckets.items() if (now - b.window_start) >= self.window_s]
        for k in expired:
            del self._buckets[k]
        self._last_purge = now

    def check(self, request: Request) -> None:
        """Vérifie la limite pour (IP + route). Lève 429 si dépassement."""
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = int(settings.RATE_LIMIT_RPM or 0)
        if limit <= 0:
            return

        key = (self._client_ip(request), self.route_key(request.method, request.url.path))
        now = time.time()

        with self._lock:
            self._purge(now)
            bucket = self._buckets.get(key)

            # Nouvelle fenêtre : on réinitialise
            if bucket is None or (now - bucket.window_start) >= self.window_s:
                self._buckets[key] = _Bucket(window_start=now, count=1)
                return

            bucket.count += 1

            if bucket.count > limit:
                raise AppHTTPException(
                    429,
                    "RATE_LIMITED",
                    f"Trop de requêtes (limite: {limit}/min).",
                    details={"limit_rpm": limit},
                )


rate_limiter = InMemoryRateLimiter()

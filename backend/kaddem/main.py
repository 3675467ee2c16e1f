from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kaddem.api.router import api_router
from kaddem.core.settings import settings
from kaddem.core.logging import setup_logging
from kaddem.core.errors import error_payload, AppHTTPException
from kaddem.core.request_id import set_request_id, ensure_request_id, request_id_for
from kaddem.core.rate_limit import rate_limiter
from kaddem.services.status_job import status_job_loop

"""
Application FastAPI (entrypoint).

Rôle (fonctionnel) :
- Configure l’application (settings, CORS, middlewares, routers).
- Centralise l’observabilité :
  - request_id propagé (X-Request-Id)
  - logs structurés JSON (timing, status, client_ip)
  - seuil de “slow request”
- Applique un rate-limit simple (optionnel) sur /contrat et /etudiant.
- Uniformise les erreurs côté client (format error_payload).
- Démarre (optionnellement) le job quotidien de mise à jour des statuts de contrats.

Ce fichier ne contient pas de logique métier :
- La logique métier est dans kaddem.services
- Les routes sont dans kaddem.api
- Les composants transverses sont dans kaddem.core
"""


class UTF8JSONResponse(JSONResponse):
    """Réponse JSON avec charset UTF-8 explicite (cohérent sur tous les endpoints)."""
    media_type = "application/json; charset=utf-8"


setup_logging(settings.LOG_LEVEL)

log = logging.getLogger("kaddem")
http_log = logging.getLogger("kaddem.http")

SLOW_MS = int(settings.SLOW_REQUEST_MS)


def _split_origins(value: str) -> list[str]:
    """Parse une liste d’origines CORS depuis une string 'a,b,c'."""
    if not value:
        return []
    return [o.strip() for o in value.split(",") if o.strip()]


def _error_response(request: Request, status: int, code: str, message: str, details=None) -> UTF8JSONResponse:
    # Header posé ici aussi : les 500 sont rendues hors du middleware d’observabilité
    rid = request_id_for(request)
    return UTF8JSONResponse(
        status_code=status,
        content=error_payload(
            code=code,
            message=message,
            status=status,
            request_id=rid,
            details=details,
        ),
        headers={"X-Request-Id": rid},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if settings.STATUS_JOB_ENABLED:
        task = asyncio.create_task(status_job_loop(settings.STATUS_JOB_HOUR))
        log.info("status_job_started")
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        default_response_class=UTF8JSONResponse,
        lifespan=lifespan,
    )

    # Origines par défaut en dev (Angular)
    default_dev_origins = [
        "http://localhost:4200",
        "http://127.0.0.1:4200",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_split_origins(settings.CORS_ORIGINS) or default_dev_origins,
        allow_credentials=False,  # API stateless
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "X-API-Key",
            "X-Actor",
            "X-Request-Id",
        ],
    )

    app.include_router(api_router)

    # Le dernier middleware déclaré est le plus externe : observabilité autour du rate-limit
    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        """
        Rate-limit (optionnel) :
        - Ne bloque jamais les préflights CORS (OPTIONS).
        - S’applique uniquement sur /contrat et /etudiant.
        """
        if request.method == "OPTIONS" or not rate_limiter.applies_to(request.url.path):
            return await call_next(request)

        try:
            rate_limiter.check(request)
        except AppHTTPException as exc:
            detail = exc.detail if isinstance(exc.detail, dict) else {}
            return _error_response(
                request,
                exc.status_code,
                str(detail.get("code", "RATE_LIMITED")),
                str(detail.get("message", "Trop de requêtes")),
                detail.get("details"),
            )

        return await call_next(request)

    @app.middleware("http")
    async def request_observability(request: Request, call_next):
        rid = ensure_request_id(request.headers.get("X-Request-Id"))
        request.state.request_id = rid

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)

            if response is not None:
                response.headers["X-Request-Id"] = rid

            # Slow request => WARNING, sinon INFO
            level = logging.WARNING if duration_ms >= SLOW_MS else logging.INFO
            http_log.log(
                level,
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                    "client_ip": request.client.host if request.client else None,
                },
            )

            set_request_id(None)

    @app.exception_handler(AppHTTPException)
    async def app_http_exception_handler(request: Request, exc: AppHTTPException):
        """Erreurs applicatives (AppHTTPException) -> payload standard."""
        detail = exc.detail if isinstance(exc.detail, dict) else {}
        return _error_response(
            request,
            exc.status_code,
            str(detail.get("code", "HTTP_ERROR")),
            str(detail.get("message", "Erreur HTTP")),
            detail.get("details"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Erreurs HTTP natives (404, 405, etc.) -> payload standard."""
        if isinstance(exc.detail, dict):
            code = str(exc.detail.get("code", "HTTP_ERROR"))
            message = str(exc.detail.get("message", "Erreur HTTP"))
            details = exc.detail.get("details", None)
        else:
            code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
            message = str(exc.detail)
            details = None
        return _error_response(request, exc.status_code, code, message, details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Erreurs de validation Pydantic -> 422 + details=exc.errors()."""
        return _error_response(
            request,
            422,
            "VALIDATION_ERROR",
            "Requête invalide",
            jsonable_errors(exc),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Fallback : toute exception non gérée -> 500 + log serveur."""
        log.exception("Unhandled error: %s", exc)
        return _error_response(request, 500, "INTERNAL_ERROR", "Erreur interne du serveur")

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """exc.errors() peut contenir des objets non sérialisables (ValueError dans ctx)."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


app = create_app()

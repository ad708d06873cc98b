from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from govdash_node import config as cfgmod
from govdash_node.api import governance, health
from govdash_node.api.governance import envelope
from govdash_node.crypto_utils import SignatureVerifier
from govdash_node.governance.errors import GovernanceError
from govdash_node.governance.service import GovernanceService
from govdash_node.storage import ProposalStore, build_store

log = logging.getLogger(__name__)

_HTTP_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


def _configure_logging(cfg: Dict[str, Any]) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=cfgmod.get_log_level(cfg),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def build_service(
    cfg: Dict[str, Any],
    store: Optional[ProposalStore] = None,
    verifier: Optional[SignatureVerifier] = None,
    clock: Callable[[], float] = time.time,
) -> GovernanceService:
    default_limit, max_limit = cfgmod.get_list_limits(cfg)
    delay, period = cfgmod.get_voting_schedule(cfg)
    return GovernanceService(
        store=store if store is not None else build_store(cfg, clock=clock),
        verifier=verifier,
        clock=clock,
        vote_weight=cfgmod.get_vote_weight(cfg),
        voting_delay_sec=delay,
        voting_period_sec=period,
        default_limit=default_limit,
        max_limit=max_limit,
        enforce_single_vote=cfgmod.get_enforce_single_vote(cfg),
    )


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GovernanceError)
    async def _governance_error(request: Request, exc: GovernanceError):
        return JSONResponse(status_code=exc.status_code, content=envelope(error=exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        msg = _HTTP_MESSAGES.get(exc.status_code) or str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(error=msg),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=envelope(error="Invalid request"))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=envelope(error="An unexpected error occurred"))


def create_app(
    cfg: Optional[Dict[str, Any]] = None,
    store: Optional[ProposalStore] = None,
    verifier: Optional[SignatureVerifier] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    if cfg is None:
        cfg = cfgmod.load_config(os.getenv("GOVDASH_CONFIG_DIR", os.getcwd()))
    _configure_logging(cfg)

    app = FastAPI(title="GovDash Node API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfgmod.get_cors_origins(cfg),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.config = cfg
    app.state.governance = build_service(cfg, store=store, verifier=verifier, clock=clock)

    _install_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(governance.router)

    return app

"""FastAPI application for the expense dashboard core.

Operational goals:
- Every budget read and write passes the authorization resolver
- Denials look like empty data, never like richer errors
- Request-id propagation and structured access logs
- Safe failure modes when the store is unavailable
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from dashboard.api.router import router as api_router
from dashboard.core.env import get_cors_origins
from dashboard.security.resolver import AuthorizationDenied
import dashboard.models as _models  # noqa: F401  (register all ORM models deterministically)


logger = logging.getLogger("expdash")
logger.setLevel(logging.INFO)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Expense Dashboard API",
        version="1.0.0",
        openapi_url="/openapi.json",
        description="Company budgets and role-based capability checks.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.exception_handler(AuthorizationDenied)
    async def authorization_denied(request: Request, exc: AuthorizationDenied) -> JSONResponse:
        # Same body for role and scope denials.
        return JSONResponse(status_code=403, content={"detail": "Access denied."})

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except OperationalError:
            return JSONResponse(
                status_code=503,
                content={"detail": "Service temporarily unavailable."},
                headers={"x-request-id": request_id},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal error."},
                headers={"x-request-id": request_id},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        # No identities or amounts in access logs.
        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()

"""
Expiry Reminder — HTTP endpoint.

A single function-style endpoint: OPTIONS answers the CORS preflight,
any other method runs the full check-and-notify cycle. The request body
is ignored.

Run: python main.py (from repo root)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from expiry_reminder.runner import build_ports, run_once

if TYPE_CHECKING:
    from expiry_reminder.config import Settings
    from expiry_reminder.runner import Ports

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(settings: Settings | None = None, ports: Ports | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Process-wide configuration. Defaults to the env-loaded one.
        ports: Adapters to run with. Built from settings on first request
               when not provided.
    """
    if settings is None:
        from expiry_reminder.config import settings as env_settings

        settings = env_settings

    app = FastAPI(title="Expiry Reminder", docs_url=None, redoc_url=None)
    app.state.settings = settings
    app.state.ports = ports

    async def check_expiry(request: Request) -> Response:
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=CORS_HEADERS)

        if app.state.ports is None:
            try:
                app.state.ports = build_ports(settings)
            except Exception as exc:
                logger.error("Failed to build adapters: %s", exc)
                return JSONResponse(
                    {"error": str(exc), "logs": []}, status_code=400, headers=CORS_HEADERS,
                )

        report = await run_once(settings, app.state.ports)
        return JSONResponse(
            report.to_dict(),
            status_code=200 if report.ok else 400,
            headers=CORS_HEADERS,
        )

    app.add_api_route("/check-expiry", check_expiry, methods=_METHODS)
    app.add_api_route("/", check_expiry, methods=_METHODS)

    logger.info("HTTP app built: /check-expiry")
    return app

"""HTTP surface for exports and compatibility checks.

Routes:
- ``POST /api/projects/{project_id}/export``: download the project archive
- ``POST /api/compatibility``: validate a selection, JSON result
- ``POST /api/compatibility/report``: validate a selection, markdown report

Errors are returned as ``{"code": ..., "message": ...}``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from stackforge.registry.catalog import IntegrationRegistry
from stackforge.registry.models import IntegrationSelection, SelectionError
from stackforge.resolver.compatibility import CompatibilityResolver, render_report
from stackforge.resolver.environment import EnvironmentResolver
from stackforge.scaffolder.models import ExportOptions
from stackforge.service import ExportError, ExportService

logger = logging.getLogger(__name__)

Authenticator = Callable[[str], Optional[str]]


def create_app(
    service: ExportService,
    authenticate: Authenticator,
    registry: IntegrationRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Export orchestrator holding the project and history stores.
        authenticate: Maps a bearer token to a user id, or ``None`` when the
            token is not valid.
        registry: Registry for the compatibility routes; defaults to the
            export service's registry.
    """
    registry = registry or service.assembler.registry
    resolver = CompatibilityResolver(registry)
    environment = EnvironmentResolver(registry)

    app = FastAPI(title="Stackforge", version="0.1.0")

    @app.exception_handler(ExportError)
    async def _export_error(request: Request, exc: ExportError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(SelectionError)
    async def _selection_error(request: Request, exc: SelectionError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"code": "INVALID_SELECTION", "message": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"code": "INVALID_REQUEST", "message": _describe_errors(exc.errors())},
        )

    def current_user(authorization: Optional[str] = Header(None)) -> Optional[str]:
        if not authorization:
            return None
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return authenticate(token.strip())

    @app.post(
        "/api/projects/{project_id}/export",
        summary="Export a project as a zip archive",
        responses={
            200: {"content": {"application/zip": {}}},
            401: {"description": "Not authenticated"},
            403: {"description": "Project belongs to another user"},
            404: {"description": "Project not found"},
        },
    )
    def export_project(
        project_id: str,
        options: Optional[ExportOptions] = Body(default=None),
        user_id: Optional[str] = Depends(current_user),
    ) -> Response:
        try:
            artifact = service.export(project_id, user_id, options)
        except ExportError:
            raise
        except Exception:
            logger.exception("Export of project %s failed", project_id)
            raise ExportError("Failed to export project") from None

        return Response(
            content=artifact.data,
            media_type=artifact.content_type,
            headers={"Content-Disposition": artifact.content_disposition},
        )

    @app.post("/api/compatibility", summary="Check an integration selection")
    async def check_selection(request: Request) -> JSONResponse:
        selection = await _read_selection(request)
        result = resolver.check(selection)
        payload = result.model_dump(mode="json")
        payload["requiredEnvVars"] = environment.resolve(selection)
        return JSONResponse(content=payload)

    @app.post("/api/compatibility/report", summary="Markdown compatibility report")
    async def selection_report(request: Request) -> PlainTextResponse:
        selection = await _read_selection(request)
        return PlainTextResponse(render_report(selection, registry), media_type="text/markdown")

    return app


async def _read_selection(request: Request) -> IntegrationSelection:
    body = (await request.body()).decode("utf-8", errors="replace").strip()
    return IntegrationSelection.from_json(body or "{}")


def _describe_errors(errors: Sequence[Any]) -> str:
    """One line per validation error, ``body.includeDocs: Input should be ...``."""
    lines = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = str(error.get("msg", "invalid value"))
        lines.append(f"{location}: {message}" if location else message)
    return "; ".join(lines) or "Invalid request"

"""Authenticated project export.

``ExportService`` is the request-level orchestrator: it checks the caller,
verifies project ownership, records the export in the generation history and
hands the record to the assembler.  Persistence sits behind two small
protocols so the HTTP layer, the CLI and the tests can plug in whatever store
they have.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional, Protocol

from stackforge.config import Config
from stackforge.scaffolder.assembler import ProjectAssembler
from stackforge.scaffolder.models import (
    ExportArtifact,
    ExportOptions,
    GenerationRecord,
    ProjectRecord,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ExportError(Exception):
    """Base class for export failures that map onto an HTTP status."""

    code = "EXPORT_FAILED"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class UnauthorizedError(ExportError):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(ExportError):
    code = "FORBIDDEN"
    status_code = 403


class ProjectNotFoundError(ExportError):
    code = "NOT_FOUND"
    status_code = 404


# ---------------------------------------------------------------------------
# Persistence protocols
# ---------------------------------------------------------------------------


class ProjectStore(Protocol):
    def owner_of(self, project_id: str) -> Optional[str]:
        """User id owning *project_id*, or ``None`` if there is no such project."""

    def get(self, project_id: str) -> Optional[ProjectRecord]:
        """The full record (pages included), or ``None``."""


class HistoryStore(Protocol):
    def append(self, record: GenerationRecord) -> None:
        """Append one audit row.  Rows are never updated."""


class InMemoryProjectStore:
    """Dict-backed ``ProjectStore``."""

    def __init__(self, projects: list[ProjectRecord] | None = None) -> None:
        self._projects: dict[str, ProjectRecord] = {}
        for project in projects or []:
            self.add(project)

    def add(self, project: ProjectRecord) -> None:
        self._projects[project.id] = project

    def owner_of(self, project_id: str) -> Optional[str]:
        project = self._projects.get(project_id)
        return project.user_id if project is not None else None

    def get(self, project_id: str) -> Optional[ProjectRecord]:
        return self._projects.get(project_id)


class InMemoryHistoryStore:
    """Append-only list-backed ``HistoryStore``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.records: list[GenerationRecord] = []

    def append(self, record: GenerationRecord) -> None:
        with self._lock:
            self.records.append(record)


# ---------------------------------------------------------------------------
# ExportService
# ---------------------------------------------------------------------------


class ExportService:
    """Checks access, records history and assembles the export archive.

    Usage::

        service = ExportService(InMemoryProjectStore([record]), InMemoryHistoryStore())
        artifact = service.export(record.id, user_id=record.user_id)
    """

    def __init__(
        self,
        projects: ProjectStore,
        history: HistoryStore,
        assembler: ProjectAssembler | None = None,
        config: Config | None = None,
    ) -> None:
        self.config = config or (assembler.config if assembler is not None else Config())
        self.projects = projects
        self.history = history
        self.assembler = assembler or ProjectAssembler(self.config)

    def export(
        self,
        project_id: str,
        user_id: Optional[str],
        options: ExportOptions | None = None,
    ) -> ExportArtifact:
        """Export *project_id* on behalf of *user_id*.

        Raises:
            UnauthorizedError: No caller identity.
            ProjectNotFoundError: The project does not exist, or belongs to
                someone else while ``hide_foreign_projects`` is on.
            ForbiddenError: The project belongs to someone else and
                ``hide_foreign_projects`` is off.
        """
        if not user_id:
            raise UnauthorizedError("Authentication required")

        owner = self.projects.owner_of(project_id)
        if owner is not None and owner != user_id:
            logger.info("User %s denied export of project %s", user_id, project_id)
            if self.config.export.hide_foreign_projects:
                raise ProjectNotFoundError("Project not found")
            raise ForbiddenError("You do not have access to this project")

        project = self.projects.get(project_id) if owner is not None else None
        if project is None:
            raise ProjectNotFoundError("Project not found")

        options = options or self.assembler.default_options()
        self._record_history(project, user_id, options)
        return self.assembler.assemble(project, options, exported_by=user_id)

    def _record_history(self, project: ProjectRecord, user_id: str, options: ExportOptions) -> None:
        record = GenerationRecord(
            project_id=project.id,
            generation_type="export",
            input_config={
                "exportedBy": user_id,
                "options": options.model_dump(by_alias=True),
            },
            model="none",
            success=True,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        try:
            self.history.append(record)
        except Exception:
            logger.warning("Could not record export of %s in history", project.id, exc_info=True)

"""Tests for the export service (stackforge.service).

Covers:
- Authentication and ownership checks, in both not-found and forbidden modes
- History recording, including tolerated history failures
- Options passed through to the assembler
"""

from __future__ import annotations

import pytest

from stackforge.config import Config, ExportConfig
from stackforge.scaffolder import ExportOptions, ProjectAssembler
from stackforge.service import (
    ExportService,
    ForbiddenError,
    InMemoryHistoryStore,
    InMemoryProjectStore,
    ProjectNotFoundError,
    UnauthorizedError,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def history() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def service(sample_project, history) -> ExportService:
    return ExportService(InMemoryProjectStore([sample_project]), history)


class TestAccess:
    def test_missing_user(self, service):
        with pytest.raises(UnauthorizedError) as exc_info:
            service.export("proj-123", None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.to_dict() == {"code": "UNAUTHORIZED", "message": "Authentication required"}

    def test_unknown_project(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.export("nope", "user-1")

    def test_foreign_project_hidden_as_not_found(self, service, history):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            service.export("proj-123", "someone-else")
        assert exc_info.value.status_code == 404
        assert history.records == []

    def test_foreign_project_forbidden_when_not_hidden(self, sample_project, history):
        config = Config(export=ExportConfig(hide_foreign_projects=False))
        service = ExportService(InMemoryProjectStore([sample_project]), history, config=config)
        with pytest.raises(ForbiddenError) as exc_info:
            service.export("proj-123", "someone-else")
        assert exc_info.value.status_code == 403


class TestExport:
    def test_returns_artifact(self, service):
        artifact = service.export("proj-123", "user-1")
        assert artifact.filename == "acme-launchpad-export.zip"
        assert artifact.data[:2] == b"PK"

    def test_records_history(self, service, history):
        service.export("proj-123", "user-1", ExportOptions(include_docs=False))
        assert len(history.records) == 1
        record = history.records[0]
        assert record.project_id == "proj-123"
        assert record.generation_type == "export"
        assert record.model == "none"
        assert record.success is True
        assert record.input_config["exportedBy"] == "user-1"
        assert record.input_config["options"] == {"includeEnvExample": True, "includeDocs": False}

    def test_history_failure_does_not_block_export(self, sample_project, caplog):
        class BrokenHistory:
            def append(self, record):
                raise ConnectionError("history store down")

        service = ExportService(InMemoryProjectStore([sample_project]), BrokenHistory())
        artifact = service.export("proj-123", "user-1")
        assert artifact.data
        assert "Could not record export" in caplog.text

    def test_options_reach_assembler(self, service):
        artifact = service.export("proj-123", "user-1", ExportOptions(include_env_example=False))
        assert ".env.local.example" not in artifact.members

    def test_uses_given_assembler_config(self, sample_project, history):
        config = Config(export=ExportConfig(include_docs=False))
        service = ExportService(InMemoryProjectStore([sample_project]), history, ProjectAssembler(config))
        assert service.config is config
        assert "README.md" not in service.export("proj-123", "user-1").members

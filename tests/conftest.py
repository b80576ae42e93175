"""Shared pytest fixtures for the Stackforge test suite.

Provides reusable fixtures for:
- The default integration registry
- Sample project records (with and without pages, branding, auth)
- A configured assembler and helpers to unpack its archives
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path

import pytest

from stackforge.config import Config
from stackforge.registry import IntegrationRegistry, IntegrationSelection, default_registry
from stackforge.scaffolder import (
    ExportArtifact,
    ProjectAssembler,
    ProjectRecord,
)


# ---------------------------------------------------------------------------
# Registry & selections
# ---------------------------------------------------------------------------

@pytest.fixture
def registry() -> IntegrationRegistry:
    return default_registry()


@pytest.fixture
def saas_selection() -> IntegrationSelection:
    """auth:supabase + payments:stripe, in that order."""
    return IntegrationSelection.from_mapping({"auth": "supabase", "payments": "stripe"})


# ---------------------------------------------------------------------------
# Project records
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_project() -> ProjectRecord:
    """A SaaS project with one public and one protected page."""
    return ProjectRecord.model_validate(
        {
            "id": "proj-123",
            "user_id": "user-1",
            "name": "Acme Launchpad",
            "slug": "acme-launchpad",
            "description": "Launch pages for Acme",
            "template": "saas",
            "features": ["pricing", "blog"],
            "integrations": {"auth": "supabase", "payments": "stripe", "email": None},
            "project_config": {
                "colorScheme": "light",
                "customColors": {"primary": "#3b82f6"},
                "vision": "Help small teams ship landing pages in minutes.",
            },
            "pages": [
                {"name": "Dashboard", "path": "/dashboard", "isProtected": True, "sort_order": 2},
                {"name": "Home", "path": "/", "sort_order": 1},
            ],
        }
    )


@pytest.fixture
def bare_project() -> ProjectRecord:
    """No template, no integrations, no pages."""
    return ProjectRecord(id="proj-empty", user_id="user-1", name="Empty Project!")


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def assembler(config: Config) -> ProjectAssembler:
    return ProjectAssembler(config)


def unzip(artifact: ExportArtifact) -> dict[str, bytes]:
    """Return ``{member name: bytes}`` for an export archive."""
    with zipfile.ZipFile(io.BytesIO(artifact.data)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


@pytest.fixture
def extract_artifact(tmp_path: Path):
    """Extract an artifact under ``tmp_path`` and return the directory."""

    def _extract(artifact: ExportArtifact, name: str = "export") -> Path:
        target = tmp_path / name
        with zipfile.ZipFile(io.BytesIO(artifact.data)) as archive:
            archive.extractall(target)
        return target

    return _extract


@pytest.fixture
def read_members():
    return unzip


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo ``setup_logging`` so caplog keeps seeing package records."""
    logger = logging.getLogger("stackforge")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate

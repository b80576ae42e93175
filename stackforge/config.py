"""Stackforge configuration.

Centralised, typed configuration for the engine.  All settings use Pydantic
v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class ExportConfig(BaseModel):
    """Settings for archive assembly and the export service."""

    include_env_example: bool = Field(
        default=True, description="Default for ExportOptions.include_env_example"
    )
    include_docs: bool = Field(default=True, description="Default for ExportOptions.include_docs")
    env_filename: str = Field(default=".env.local.example")
    metadata_dir: str = Field(
        default=".stackforge", description="Archive directory holding manifest, vision and pages"
    )
    hide_foreign_projects: bool = Field(
        default=True,
        description=(
            "Report another user's project as not found (404) instead of "
            "forbidden (403), so project existence is not leaked"
        ),
    )

    @property
    def manifest_path(self) -> str:
        return f"{self.metadata_dir}/template-manifest.json"

    @property
    def vision_path(self) -> str:
        return f"{self.metadata_dir}/vision.md"

    @property
    def pages_path(self) -> str:
        return f"{self.metadata_dir}/pages.json"


class ScoringConfig(BaseModel):
    """Settings for the fidelity scorer."""

    pass_threshold: int = Field(
        default=80, ge=0, le=100, description="Overall score the CLI treats as passing"
    )
    excluded_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", ".next", ".git", "dist", "build", ".turbo"],
        description="Directory names never descended into while searching components",
    )


class Config(BaseModel):
    """Global Stackforge configuration.

    Instances are typically created once by the CLI or the HTTP app factory
    and then passed to the assembler, scorer and export service.
    """

    templates_dir: Optional[Path] = Field(
        default=None,
        description="Root holding <template>/<path> static files; None disables copying",
    )
    log_level: str = Field(default="INFO")
    export: ExportConfig = Field(default_factory=ExportConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            SF_TEMPLATES_DIR, SF_LOG_LEVEL, SF_INCLUDE_ENV_EXAMPLE,
            SF_INCLUDE_DOCS, SF_HIDE_FOREIGN_PROJECTS, SF_PASS_THRESHOLD.
        """
        export_kwargs: dict[str, Any] = {}
        if os.environ.get("SF_INCLUDE_ENV_EXAMPLE"):
            export_kwargs["include_env_example"] = _env_bool("SF_INCLUDE_ENV_EXAMPLE")
        if os.environ.get("SF_INCLUDE_DOCS"):
            export_kwargs["include_docs"] = _env_bool("SF_INCLUDE_DOCS")
        if os.environ.get("SF_HIDE_FOREIGN_PROJECTS"):
            export_kwargs["hide_foreign_projects"] = _env_bool("SF_HIDE_FOREIGN_PROJECTS")

        scoring_kwargs: dict[str, Any] = {}
        if os.environ.get("SF_PASS_THRESHOLD"):
            scoring_kwargs["pass_threshold"] = int(os.environ["SF_PASS_THRESHOLD"])

        templates_dir = os.environ.get("SF_TEMPLATES_DIR")
        return cls(
            templates_dir=Path(templates_dir) if templates_dir else None,
            log_level=os.environ.get("SF_LOG_LEVEL", "INFO"),
            export=ExportConfig(**export_kwargs),
            scoring=ScoringConfig(**scoring_kwargs),
        )


def _env_bool(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")

"""Unit tests for Config and related Pydantic models (stackforge.config).

Tests cover:
- ExportConfig defaults and derived archive paths
- ScoringConfig defaults and validation
- Config save/load round-trip
- Config.from_env
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from stackforge.config import Config, ExportConfig, ScoringConfig


pytestmark = pytest.mark.unit


class TestExportConfig:
    def test_defaults(self):
        export = ExportConfig()
        assert export.include_env_example is True
        assert export.include_docs is True
        assert export.env_filename == ".env.local.example"
        assert export.hide_foreign_projects is True

    def test_paths(self):
        export = ExportConfig()
        assert export.manifest_path == ".stackforge/template-manifest.json"
        assert export.vision_path == ".stackforge/vision.md"
        assert export.pages_path == ".stackforge/pages.json"

    def test_custom_metadata_dir(self):
        assert ExportConfig(metadata_dir=".meta").manifest_path == ".meta/template-manifest.json"


class TestScoringConfig:
    def test_defaults(self):
        scoring = ScoringConfig()
        assert scoring.pass_threshold == 80
        assert "node_modules" in scoring.excluded_dirs
        assert ".next" in scoring.excluded_dirs

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            ScoringConfig(pass_threshold=101)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.templates_dir is None
        assert config.log_level == "INFO"

    def test_save_and_load(self, tmp_path: Path):
        config = Config(templates_dir=tmp_path / "tpl", export=ExportConfig(include_docs=False))
        target = config.save(tmp_path / "nested" / "stackforge.json")
        assert target.exists()
        loaded = Config.load(target)
        assert loaded == config

    def test_from_env(self, tmp_path: Path):
        env = {
            "SF_TEMPLATES_DIR": str(tmp_path),
            "SF_LOG_LEVEL": "DEBUG",
            "SF_INCLUDE_ENV_EXAMPLE": "false",
            "SF_INCLUDE_DOCS": "yes",
            "SF_HIDE_FOREIGN_PROJECTS": "0",
            "SF_PASS_THRESHOLD": "65",
        }
        with patch.dict(os.environ, env, clear=False):
            config = Config.from_env()
        assert config.templates_dir == tmp_path
        assert config.log_level == "DEBUG"
        assert config.export.include_env_example is False
        assert config.export.include_docs is True
        assert config.export.hide_foreign_projects is False
        assert config.scoring.pass_threshold == 65

    def test_from_env_defaults(self):
        keys = [k for k in os.environ if k.startswith("SF_")]
        with patch.dict(os.environ, {}, clear=False):
            for key in keys:
                os.environ.pop(key)
            config = Config.from_env()
        assert config == Config()

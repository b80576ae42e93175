"""Export fidelity scoring.

Audits an already-materialised project directory against the configuration
that produced it.  Four independent, file-based checks each yield a 0-100
score; the overall score is their weighted sum.  Missing files and missing
directories lower a score, they never raise.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stackforge.config import ScoringConfig
from stackforge.registry.catalog import CORE_CSS_VARIABLES, IntegrationRegistry, default_registry
from stackforge.registry.models import IntegrationSelection
from stackforge.resolver.environment import EnvironmentResolver
from stackforge.scaffolder.models import ProjectRecord
from stackforge.utils import hex_to_hsl, round_half_up, to_kebab

console = Console()

BRANDED_PRIMARY = "--primary (branded)"

# Custom property declarations, e.g. ``--sidebar-width: 16rem;``
_CSS_DECLARATION = re.compile(r"(--[A-Za-z0-9_-]+)\s*:")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Branding(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")


class FidelityConfig(BaseModel):
    """What the user was promised: template, integrations and branding."""

    model_config = ConfigDict(populate_by_name=True)

    template: Optional[str] = Field(default=None)
    integrations: dict[str, Optional[str]] = Field(default_factory=dict)
    branding: Branding = Field(default_factory=Branding)

    @property
    def selection(self) -> IntegrationSelection:
        return IntegrationSelection.from_mapping(self.integrations)

    @classmethod
    def from_project(cls, project: ProjectRecord) -> "FidelityConfig":
        """Derive the intent from a stored project record."""
        branding = Branding()
        settings = project.project_config
        if settings is not None and settings.custom_colors is not None:
            branding = Branding(
                primary_color=settings.custom_colors.primary,
                secondary_color=settings.custom_colors.secondary,
            )
        return cls(template=project.template, integrations=dict(project.integrations), branding=branding)


class AxisDetails(BaseModel):
    """Expected / found / missing names for one scoring axis."""

    expected: list[str] = Field(default_factory=list)
    found: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(
        default_factory=list,
        description="Declared but not expected; only the CSS variable axis fills this",
    )


class FidelityDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    css_variables: AxisDetails = Field(default_factory=AxisDetails, alias="cssVariables")
    components: AxisDetails = Field(default_factory=AxisDetails)
    routes: AxisDetails = Field(default_factory=AxisDetails)
    env_vars: AxisDetails = Field(default_factory=AxisDetails, alias="envVars")


class FidelityScore(BaseModel):
    """Per-axis scores, the weighted overall score and what was checked."""

    model_config = ConfigDict(populate_by_name=True)

    color_match: int = Field(default=0, ge=0, le=100, alias="colorMatch")
    component_match: int = Field(default=0, ge=0, le=100, alias="componentMatch")
    layout_match: int = Field(default=0, ge=0, le=100, alias="layoutMatch")
    content_match: int = Field(default=0, ge=0, le=100, alias="contentMatch")
    overall: int = Field(default=0, ge=0, le=100)
    details: FidelityDetails = Field(default_factory=FidelityDetails)

    def axes(self) -> list[tuple[str, int, float]]:
        """``(label, score, weight)`` rows in display order."""
        return [
            ("Color", self.color_match, FidelityScorer.WEIGHTS["color"]),
            ("Components", self.component_match, FidelityScorer.WEIGHTS["components"]),
            ("Layout", self.layout_match, FidelityScorer.WEIGHTS["layout"]),
            ("Content", self.content_match, FidelityScorer.WEIGHTS["content"]),
        ]


# ---------------------------------------------------------------------------
# FidelityScorer
# ---------------------------------------------------------------------------


class FidelityScorer:
    """Scores an exported project directory against its configuration.

    Usage::

        scorer = FidelityScorer()
        score = scorer.score(FidelityConfig(template="saas", integrations={"auth": "supabase"}),
                             "/tmp/my-app")
        scorer.print_report(score, label="my-app")
    """

    WEIGHTS = {
        "color": 0.15,
        "components": 0.35,
        "layout": 0.35,
        "content": 0.15,
    }

    GLOBALS_CSS = Path("app") / "globals.css"
    COMPONENTS_DIR = "components"
    APP_DIR = "app"

    def __init__(
        self,
        registry: IntegrationRegistry | None = None,
        config: ScoringConfig | None = None,
        env_filename: str = ".env.local.example",
    ) -> None:
        self.registry = registry or default_registry()
        self.config = config or ScoringConfig()
        self.env_filename = env_filename
        self._env = EnvironmentResolver(self.registry)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score(self, intent: FidelityConfig, root: str | Path) -> FidelityScore:
        """Score the project at *root* against *intent*."""
        root = Path(root)
        present = root.is_dir()
        selection = intent.selection
        details = FidelityDetails()

        color = self._score_colors(intent, root, present, details.css_variables)
        components = self._score_components(selection, root, present, details.components)
        layout = self._score_routes(intent.template, selection, root, present, details.routes)
        content = self._score_env(selection, root, present, details.env_vars)

        overall = round_half_up(
            color * self.WEIGHTS["color"]
            + components * self.WEIGHTS["components"]
            + layout * self.WEIGHTS["layout"]
            + content * self.WEIGHTS["content"]
        )
        return FidelityScore(
            color_match=color,
            component_match=components,
            layout_match=layout,
            content_match=content,
            overall=min(overall, 100),
            details=details,
        )

    def passed(self, score: FidelityScore) -> bool:
        return score.overall >= self.config.pass_threshold

    # ------------------------------------------------------------------
    # Axes
    # ------------------------------------------------------------------

    def _score_colors(
        self, intent: FidelityConfig, root: Path, present: bool, out: AxisDetails
    ) -> int:
        expected = list(CORE_CSS_VARIABLES)
        branded_hsl = None
        if intent.branding.primary_color:
            branded_hsl = hex_to_hsl(intent.branding.primary_color)
            if branded_hsl:
                expected.append(BRANDED_PRIMARY)

        content = _read_text(root / self.GLOBALS_CSS) if present else None
        found: list[str] = []
        if content is not None:
            found = [name for name in CORE_CSS_VARIABLES if name in content]
            if branded_hsl and branded_hsl in content:
                found.append(BRANDED_PRIMARY)
            out.extra = sorted(set(_CSS_DECLARATION.findall(content)) - set(CORE_CSS_VARIABLES))
        return _fill(out, expected, found)

    def _score_components(
        self, selection: IntegrationSelection, root: Path, present: bool, out: AxisDetails
    ) -> int:
        expected = self.registry.expected_components(selection.keys())
        index = self._component_index(root / self.COMPONENTS_DIR) if present else set()
        found = [name for name in expected if _component_present(name, index)]
        return _fill(out, expected, found)

    def _score_routes(
        self,
        template: Optional[str],
        selection: IntegrationSelection,
        root: Path,
        present: bool,
        out: AxisDetails,
    ) -> int:
        expected = self.registry.expected_routes(template, selection.keys())
        app_dir = root / self.APP_DIR
        found = [route for route in expected if present and (app_dir / route).exists()]
        return _fill(out, expected, found)

    def _score_env(
        self, selection: IntegrationSelection, root: Path, present: bool, out: AxisDetails
    ) -> int:
        expected = self._env.resolve(selection)
        content = _read_text(root / self.env_filename) if present else None
        found = [name for name in expected if content is not None and name in content]
        return _fill(out, expected, found)

    # ------------------------------------------------------------------
    # Component search
    # ------------------------------------------------------------------

    def _component_index(self, components_dir: Path) -> set[tuple[str, str]]:
        """Lower-cased ``(parent dir name, file name)`` for every file found.

        Walks with an explicit stack; directories already visited (by real
        path) and excluded directory names are never entered.
        """
        index: set[tuple[str, str]] = set()
        if not components_dir.is_dir():
            return index

        excluded = set(self.config.excluded_dirs)
        visited: set[str] = set()
        stack = [components_dir]
        while stack:
            current = stack.pop()
            real = os.path.realpath(current)
            if real in visited:
                continue
            visited.add(real)
            try:
                entries = list(os.scandir(current))
            except OSError:
                continue
            for entry in entries:
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    continue
                if is_dir:
                    if entry.name not in excluded:
                        stack.append(Path(entry.path))
                else:
                    index.add((Path(current).name.lower(), entry.name.lower()))
        return index

    # ------------------------------------------------------------------
    # Console output
    # ------------------------------------------------------------------

    def print_report(self, score: FidelityScore, label: str = "") -> None:
        """Pretty-print the score to the console."""
        console.print(
            Panel(
                f"[bold]Fidelity Report[/bold]\n"
                f"Project: {label or '(unnamed)'}",
                border_style="blue",
            )
        )

        table = Table(title="Axis Scores", show_lines=True)
        table.add_column("Axis", width=14)
        table.add_column("Score", width=8, justify="right")
        table.add_column("Weight", width=8, justify="right")
        table.add_column("Missing")

        missing_by_axis = [
            score.details.css_variables.missing,
            score.details.components.missing,
            score.details.routes.missing,
            score.details.env_vars.missing,
        ]
        for (name, value, weight), missing in zip(score.axes(), missing_by_axis):
            color = _score_color(value)
            table.add_row(
                name,
                f"[{color}]{value}[/{color}]",
                f"{weight:.0%}",
                ", ".join(missing) or "[dim]-[/dim]",
            )
        console.print(table)

        overall_color = _score_color(score.overall)
        status = "[green bold]PASS[/green bold]" if self.passed(score) else "[red bold]FAIL[/red bold]"
        console.print(
            f"\n[bold]Overall Score:[/bold] "
            f"[{overall_color}]{score.overall}/100[/{overall_color}]  |  "
            f"Status: {status}\n"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fill(out: AxisDetails, expected: Iterable[str], found: Iterable[str]) -> int:
    out.expected = list(expected)
    out.found = list(found)
    out.missing = [name for name in out.expected if name not in out.found]
    if not out.expected:
        return 100
    return round_half_up(100 * len(out.found) / len(out.expected))


def _component_present(name: str, index: set[tuple[str, str]]) -> bool:
    lower = name.lower()
    candidates = {f"{lower}.tsx", f"{lower}.ts", f"{to_kebab(name)}.tsx"}
    for parent, filename in index:
        if filename in candidates:
            return True
        if filename == "index.tsx" and parent == lower:
            return True
    return False


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def _score_color(value: int) -> str:
    return "green" if value >= 80 else "yellow" if value >= 50 else "red"

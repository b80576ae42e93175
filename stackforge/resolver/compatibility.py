"""Integration compatibility checking.

Validates that a set of selected integrations can live in one project,
reporting hard conflicts, advisory warnings (noted pairs and missing
dependencies) and heuristic suggestions.  Output order follows the
selection's insertion order so reports are reproducible.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Literal, Optional

from pydantic import BaseModel, Field

from stackforge.registry.catalog import IntegrationRegistry, default_registry
from stackforge.registry.models import IntegrationKey, IntegrationSelection
from stackforge.resolver.environment import EnvironmentResolver


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class Conflict(BaseModel):
    """Two integrations that cannot be used together."""

    integrations: tuple[str, str] = Field(..., description="The conflicting pair")
    reason: str = Field(..., description="Why the pair conflicts")
    severity: Literal["error", "warning"] = Field(default="error")
    solution: Optional[str] = Field(default=None, description="How to resolve the conflict")


class IntegrationWarning(BaseModel):
    """Advisory note that never blocks a selection."""

    integration: str = Field(..., description="Key or 'a + b' pair the note is about")
    message: str
    recommendation: str


class CompatibilityResult(BaseModel):
    """Outcome of a compatibility check."""

    compatible: bool = Field(default=True)
    conflicts: list[Conflict] = Field(default_factory=list)
    warnings: list[IntegrationWarning] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Suggestion rules
# ---------------------------------------------------------------------------

# Each rule receives the active providers per category and returns a
# suggestion or None.  Rules are advisory and never affect ``compatible``.
SuggestionRule = Callable[[dict[str, list[str]]], Optional[str]]


def _suggest_supabase_database(active: dict[str, list[str]]) -> Optional[str]:
    if "supabase" in active.get("auth", []) and "database" not in active:
        return "Consider using Supabase for database too - it's included with Supabase Auth"
    return None


def _suggest_email_for_payments(active: dict[str, list[str]]) -> Optional[str]:
    if "payments" in active and "email" not in active:
        return "Consider adding email integration for payment receipts and notifications"
    return None


def _suggest_analytics_for_auth(active: dict[str, list[str]]) -> Optional[str]:
    if "auth" in active and "analytics" not in active:
        return "Consider adding analytics to track user behavior and conversion"
    return None


DEFAULT_SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    _suggest_supabase_database,
    _suggest_email_for_payments,
    _suggest_analytics_for_auth,
)


# ---------------------------------------------------------------------------
# CompatibilityResolver
# ---------------------------------------------------------------------------


class CompatibilityResolver:
    """Checks a selection against the registry's compatibility data."""

    def __init__(
        self,
        registry: IntegrationRegistry | None = None,
        rules: Sequence[SuggestionRule] = DEFAULT_SUGGESTION_RULES,
    ) -> None:
        self.registry = registry or default_registry()
        self.rules = tuple(rules)

    def check(self, selection: IntegrationSelection) -> CompatibilityResult:
        """Check a caller's selection (one provider per category)."""
        return self.check_keys(selection.keys())

    def check_keys(self, keys: Iterable[IntegrationKey]) -> CompatibilityResult:
        """Check an explicit key sequence.

        Unlike :meth:`check`, this accepts several providers of the same
        category, which is how same-category conflicts (two auth providers)
        are audited.  Repeated keys are collapsed, first occurrence wins.
        """
        selected: list[IntegrationKey] = []
        for key in keys:
            if key not in selected:
                selected.append(key)

        conflicts: list[Conflict] = []
        warnings: list[IntegrationWarning] = []

        # Ordered double loop; ordering of the output is part of the contract.
        for i in range(len(selected)):
            for j in range(i + 1, len(selected)):
                a, b = selected[i], selected[j]
                entry = self.registry.lookup_pair(a, b)
                if entry is None:
                    continue
                if not entry.compatible:
                    conflicts.append(
                        Conflict(
                            integrations=(str(a), str(b)),
                            reason=entry.note or "Incompatible integrations",
                            severity="error",
                            solution=entry.solution,
                        )
                    )
                elif entry.note:
                    warnings.append(
                        IntegrationWarning(
                            integration=f"{a} + {b}",
                            message=entry.note,
                            recommendation=entry.solution or "Consider the implications",
                        )
                    )

        for key in selected:
            for dep in self.registry.dependencies(key):
                if dep not in selected:
                    warnings.append(
                        IntegrationWarning(
                            integration=str(key),
                            message=f"Requires {dep}",
                            recommendation=f"Add {dep} to your integrations",
                        )
                    )

        active: dict[str, list[str]] = {}
        for key in selected:
            active.setdefault(key.category, []).append(key.provider)
        suggestions = [s for s in (rule(active) for rule in self.rules) if s]

        return CompatibilityResult(
            compatible=not any(c.severity == "error" for c in conflicts),
            conflicts=conflicts,
            warnings=warnings,
            suggestions=suggestions,
        )


def check_compatibility(
    selection: IntegrationSelection, registry: IntegrationRegistry | None = None
) -> CompatibilityResult:
    """Module-level shortcut for ``CompatibilityResolver(registry).check``."""
    return CompatibilityResolver(registry).check(selection)


# ---------------------------------------------------------------------------
# Markdown rendering
# ---------------------------------------------------------------------------


def render_report(
    selection: IntegrationSelection, registry: IntegrationRegistry | None = None
) -> str:
    """Render the compatibility report for *selection* as markdown."""
    registry = registry or default_registry()
    result = CompatibilityResolver(registry).check(selection)
    env_vars = EnvironmentResolver(registry).resolve(selection)

    status = "✅ Compatible" if result.compatible else "❌ Conflicts Detected"
    lines = [
        "# Integration Compatibility Report",
        "",
        f"## Status: {status}",
        "",
        "### Selected Integrations",
        "",
    ]
    for category, provider in selection.entries:
        lines.append(f"- **{category}**: {provider}")

    if result.conflicts:
        lines += ["", "### ❌ Conflicts", ""]
        for conflict in result.conflicts:
            lines.append(f"**{' vs '.join(conflict.integrations)}**")
            lines.append(f"- Reason: {conflict.reason}")
            if conflict.solution:
                lines.append(f"- Solution: {conflict.solution}")
            lines.append("")

    if result.warnings:
        lines += ["", "### ⚠️ Warnings", ""]
        for warning in result.warnings:
            lines.append(f"**{warning.integration}**")
            lines.append(f"- {warning.message}")
            lines.append(f"- Recommendation: {warning.recommendation}")
            lines.append("")

    if result.suggestions:
        lines += ["", "### 💡 Suggestions", ""]
        lines.extend(f"- {s}" for s in result.suggestions)

    lines += ["", "### Required Environment Variables", "", "```bash"]
    lines.extend(f"{name}=" for name in env_vars)
    lines.append("```")
    return "\n".join(lines)


def render_matrix(
    keys: Sequence[IntegrationKey] | None = None,
    registry: IntegrationRegistry | None = None,
) -> str:
    """Render a pairwise compatibility grid for documentation.

    Pairs without a registry entry are shown as compatible.
    """
    registry = registry or default_registry()
    keys = list(keys) if keys is not None else registry.known_keys()
    short = {key: _short_label(key) for key in keys}

    lines = [
        "# Integration Compatibility Matrix",
        "",
        "```",
        " " * 11 + " ".join(short[k].ljust(7) for k in keys),
    ]
    for row in keys:
        line = short[row].ljust(10) + " "
        for col in keys:
            if row == col:
                line += "   -   "
                continue
            entry = registry.lookup_pair(row, col)
            line += "   ❌  " if entry is not None and not entry.compatible else "   ✅  "
        lines.append(line)
    lines += ["```", "", "Legend: ✅ Compatible | ❌ Conflict"]
    return "\n".join(lines)


def _short_label(key: IntegrationKey) -> str:
    """Seven-character column label, ``Supa/au`` for ``auth:supabase``."""
    return f"{key.provider[:4].capitalize()}/{key.category[:2]}"

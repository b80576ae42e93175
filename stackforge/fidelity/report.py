"""Markdown rendering of a fidelity score."""

from __future__ import annotations

from stackforge.fidelity.scorer import FidelityScore


def render_report(label: str, score: FidelityScore) -> str:
    """Render *score* as a markdown report titled with *label*.

    Sections for missing components, routes and environment variables are
    only emitted when something is missing.
    """
    lines = [
        f"# Fidelity Report: {label}",
        "",
        f"**Overall Score: {score.overall}/100**",
        "",
        "| Axis | Score | Weight |",
        "|------|-------|--------|",
    ]
    for name, value, weight in score.axes():
        lines.append(f"| {name} | {value} | {weight:.0%} |")
    lines.append("")

    details = score.details
    for title, missing in (
        ("Missing Components", details.components.missing),
        ("Missing Routes", details.routes.missing),
        ("Missing Environment Variables", details.env_vars.missing),
    ):
        if not missing:
            continue
        lines.append(f"## {title}")
        lines.append("")
        lines.extend(f"- `{name}`" for name in missing)
        lines.append("")

    return "\n".join(lines)

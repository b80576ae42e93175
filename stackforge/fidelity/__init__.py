"""Fidelity scoring -- audits an exported project against its configuration.

Quick usage::

    from stackforge.fidelity import FidelityConfig, FidelityScorer, render_report

    score = FidelityScorer().score(FidelityConfig(template="saas"), "/tmp/my-app")
    print(render_report("my-app", score))
"""

from stackforge.fidelity.report import render_report
from stackforge.fidelity.scorer import (
    BRANDED_PRIMARY,
    AxisDetails,
    Branding,
    FidelityConfig,
    FidelityDetails,
    FidelityScore,
    FidelityScorer,
)

__all__ = [
    "BRANDED_PRIMARY",
    "AxisDetails",
    "Branding",
    "FidelityConfig",
    "FidelityDetails",
    "FidelityScore",
    "FidelityScorer",
    "render_report",
]

"""Integration registry -- the static knowledge base behind every resolver.

Quick usage::

    from stackforge.registry import IntegrationKey, default_registry

    registry = default_registry()
    registry.env_vars(IntegrationKey("payments", "stripe"))
"""

from stackforge.registry.catalog import (
    BASE_DEPENDENCIES,
    CORE_COMPONENTS,
    CORE_CSS_VARIABLES,
    UNIVERSAL_ROUTES,
    IntegrationRegistry,
    default_registry,
)
from stackforge.registry.models import (
    CompatibilityEntry,
    IntegrationKey,
    IntegrationSelection,
    PackageRequirement,
    SelectionError,
)

__all__ = [
    "BASE_DEPENDENCIES",
    "CORE_COMPONENTS",
    "CORE_CSS_VARIABLES",
    "UNIVERSAL_ROUTES",
    "CompatibilityEntry",
    "IntegrationKey",
    "IntegrationRegistry",
    "IntegrationSelection",
    "PackageRequirement",
    "SelectionError",
    "default_registry",
]

"""Stackforge -- integration resolution, project export and fidelity scoring.

Quick usage::

    from stackforge import IntegrationSelection, check_compatibility

    result = check_compatibility(IntegrationSelection.from_mapping({"auth": "supabase"}))
"""

from stackforge.registry import IntegrationKey, IntegrationSelection, SelectionError
from stackforge.resolver import check_compatibility, get_required_env_vars

__version__ = "0.1.0"

__all__ = [
    "IntegrationKey",
    "IntegrationSelection",
    "SelectionError",
    "__version__",
    "check_compatibility",
    "get_required_env_vars",
]

"""Selection resolvers: compatibility validation and environment derivation."""

from stackforge.resolver.compatibility import (
    CompatibilityResolver,
    CompatibilityResult,
    Conflict,
    IntegrationWarning,
    check_compatibility,
    render_matrix,
    render_report,
)
from stackforge.resolver.environment import (
    EnvGroup,
    EnvironmentResolver,
    get_required_env_vars,
    is_public_key,
    is_secret_key,
    render_env_example,
)

__all__ = [
    "CompatibilityResolver",
    "CompatibilityResult",
    "Conflict",
    "EnvGroup",
    "EnvironmentResolver",
    "IntegrationWarning",
    "check_compatibility",
    "get_required_env_vars",
    "is_public_key",
    "is_secret_key",
    "render_env_example",
    "render_matrix",
    "render_report",
]

"""Environment variable resolution for a selection.

The flat, sorted list is what downstream files embed verbatim; the grouped
form is only a presentation aid for the ``.env`` template.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from stackforge.registry.catalog import IntegrationRegistry, default_registry
from stackforge.registry.models import IntegrationSelection

if TYPE_CHECKING:
    from stackforge.scaffolder.templates import TemplateRenderer


# Names that must never leave the user's machine with a value.
_SECRET_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^SUPABASE_SERVICE_ROLE_KEY$",
        r"^STRIPE_SECRET_KEY$",
        r"^STRIPE_WEBHOOK_SECRET$",
        r"^DATABASE_URL$",
        r"^DIRECT_URL$",
        r"^JWT_SECRET$",
        r"^NEXTAUTH_SECRET$",
        r"^OPENAI_API_KEY$",
        r"^ANTHROPIC_API_KEY$",
        r"_SECRET$",
        r"_SECRET_KEY$",
        r"_PRIVATE_KEY$",
        r"^PRIVATE_",
    )
)

_PUBLIC_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^NEXT_PUBLIC_",
        r"^VITE_",
        r"^REACT_APP_",
        r"_PUBLISHABLE_KEY$",
        r"_PUBLIC_KEY$",
        r"_ANON_KEY$",
        r"_PROJECT_ID$",
        r"_PROJECT_URL$",
    )
)


def is_secret_key(name: str) -> bool:
    """Return ``True`` if *name* looks like a server-side secret."""
    return any(p.search(name) for p in _SECRET_PATTERNS)


def is_public_key(name: str) -> bool:
    """Return ``True`` if *name* is safe to expose to the browser."""
    return any(p.search(name) for p in _PUBLIC_PATTERNS)


class EnvGroup(BaseModel):
    """Variables introduced by one selected integration."""

    category: str
    provider: str
    variables: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.category.capitalize()} ({self.provider})"


class EnvironmentResolver:
    """Derives the environment variables a selection needs."""

    def __init__(self, registry: IntegrationRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def resolve(self, selection: IntegrationSelection) -> list[str]:
        """Sorted, de-duplicated variable names for every selected key."""
        names: set[str] = set()
        for key in selection.keys():
            names.update(self.registry.env_vars(key))
        return sorted(names)

    def grouped(self, selection: IntegrationSelection) -> list[EnvGroup]:
        """Variables grouped by the integration that first declares them.

        Groups follow selection order; a variable shared by several keys is
        listed once, under the first.  Keys contributing nothing new are
        omitted.  The union of all groups equals :meth:`resolve`.
        """
        seen: set[str] = set()
        groups: list[EnvGroup] = []
        for key in selection.keys():
            fresh = sorted(v for v in set(self.registry.env_vars(key)) if v not in seen)
            if not fresh:
                continue
            seen.update(fresh)
            groups.append(EnvGroup(category=key.category, provider=key.provider, variables=fresh))
        return groups

    def render_example(
        self,
        selection: IntegrationSelection,
        project_name: str = "",
        template: Optional[str] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> str:
        """Render the ``.env.local.example`` body for *selection*.

        A short header names the project and template, then each group from
        :meth:`grouped` follows under a ``# <Category> (<provider>)`` comment
        with one empty ``NAME=`` line per variable.
        """
        if renderer is None:
            from stackforge.scaffolder.templates import TemplateRenderer

            renderer = TemplateRenderer()
        return renderer.render(
            "env.local.example.j2",
            {
                "project_name": project_name,
                "template": template,
                "groups": self.grouped(selection),
            },
        )


def get_required_env_vars(
    selection: IntegrationSelection, registry: IntegrationRegistry | None = None
) -> list[str]:
    """Module-level shortcut for ``EnvironmentResolver(registry).resolve``."""
    return EnvironmentResolver(registry).resolve(selection)


def render_env_example(
    selection: IntegrationSelection,
    project_name: str = "",
    template: Optional[str] = None,
    registry: IntegrationRegistry | None = None,
) -> str:
    return EnvironmentResolver(registry).render_example(selection, project_name, template)

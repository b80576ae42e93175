"""File manifest resolution for a template + integration selection."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from pydantic import BaseModel, Field

from stackforge.registry.catalog import IntegrationRegistry, default_registry
from stackforge.registry.models import IntegrationKey, IntegrationSelection

_INTEGRATIONS_PREFIX = "integrations/"


class Manifest(BaseModel):
    """Ordered list of template paths that make up a project."""

    template: Optional[str] = Field(default=None)
    base_files: list[str] = Field(default_factory=list)
    integration_files: list[str] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)

    def all_files(self) -> list[str]:
        return [*self.base_files, *self.integration_files]

    def as_download(self) -> dict[str, object]:
        """The ``{"base", "integrations", "total"}`` shape clients consume."""
        return {
            "base": list(self.base_files),
            "integrations": list(self.integration_files),
            "total": self.total,
        }

    @staticmethod
    def relocate(path: str) -> str:
        """Map a template path to its location inside the generated project.

        Integration files are stored as
        ``integrations/<category>/<provider>/<rest>`` and land at ``<rest>``;
        base files are already project-relative.
        """
        if not path.startswith(_INTEGRATIONS_PREFIX):
            return path
        parts = path.split("/", 3)
        return parts[3] if len(parts) == 4 else path


class ManifestBuilder:
    """Builds a :class:`Manifest` from the registry's template tables."""

    def __init__(self, registry: IntegrationRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def build(
        self,
        template: str | None,
        selection: IntegrationSelection | Iterable[IntegrationKey],
    ) -> Manifest:
        """Resolve the manifest.

        An unknown template yields an empty base list.  Integration files are
        concatenated in selection order; a key given twice contributes once.
        """
        base = list(dict.fromkeys(self.registry.template_files(template)))

        keys = selection.keys() if isinstance(selection, IntegrationSelection) else list(selection)
        integration_files: list[str] = []
        seen: set[IntegrationKey] = set()
        for key in keys:
            if key in seen:
                continue
            seen.add(key)
            integration_files.extend(self.registry.integration_files(template, key))

        return Manifest(
            template=template,
            base_files=base,
            integration_files=integration_files,
            total=len(base) + len(integration_files),
        )

"""Pydantic models for project records and export artifacts.

``ProjectRecord`` mirrors the row the persistence collaborator returns; the
camelCase aliases match the JSON the dashboard stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from stackforge.registry.models import IntegrationSelection
from stackforge.utils import slugify


class PageMeta(BaseModel):
    """SEO metadata for a page."""

    title: Optional[str] = None
    description: Optional[str] = None


class ProjectPage(BaseModel):
    """A page declared for a project."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Display name, e.g. 'Dashboard'")
    path: str = Field(..., description="Route path, e.g. '/dashboard'")
    page_type: Literal["page", "layout", "api", "component"] = Field(default="page")
    is_protected: bool = Field(default=False, alias="isProtected")
    is_dynamic: bool = Field(default=False, alias="isDynamic")
    meta: PageMeta = Field(default_factory=PageMeta)
    sort_order: int = Field(default=0)

    @property
    def archive_path(self) -> str:
        """Location of the generated page inside the archive.

        ``/`` maps to ``app/page.tsx``; any other path nests the same file
        name under a directory equal to the path.
        """
        route = "/" + self.path.strip().strip("/")
        if route == "/":
            return "app/page.tsx"
        return f"app{route}/page.tsx"


class CustomColors(BaseModel):
    """Brand colours chosen in the configurator (hex strings)."""

    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    background: Optional[str] = None
    foreground: Optional[str] = None


class ProjectSettings(BaseModel):
    """Free-form project configuration carried on the record."""

    model_config = ConfigDict(populate_by_name=True)

    color_scheme: Optional[str] = Field(default=None, alias="colorScheme")
    custom_colors: Optional[CustomColors] = Field(default=None, alias="customColors")
    vision: Optional[str] = None
    domain: Optional[str] = None


class ProjectRecord(BaseModel):
    """A fully resolved project as fetched from the project store."""

    id: str
    user_id: str
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    template: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    integrations: dict[str, Optional[str]] = Field(default_factory=dict)
    project_config: Optional[ProjectSettings] = None
    pages: list[ProjectPage] = Field(default_factory=list)

    @property
    def selection(self) -> IntegrationSelection:
        return IntegrationSelection.from_mapping(self.integrations)

    @property
    def export_slug(self) -> str:
        return self.slug or slugify(self.name) or "project"

    def ordered_pages(self) -> list[ProjectPage]:
        return sorted(self.pages, key=lambda p: p.sort_order)


class ExportOptions(BaseModel):
    """Caller-controlled assembly switches."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    include_env_example: bool = Field(default=True, alias="includeEnvExample")
    include_docs: bool = Field(default=True, alias="includeDocs")


class GenerationRecord(BaseModel):
    """Audit row appended to the generation history before assembly."""

    project_id: str
    generation_type: str = Field(default="export")
    input_config: dict[str, Any] = Field(default_factory=dict)
    model: str = Field(default="none")
    success: bool = Field(default=True)
    created_at: str = Field(default="")


@dataclass
class GeneratedFile:
    """One archive member.  ``overwrite=False`` yields to an existing path."""

    path: str
    content: str | bytes
    overwrite: bool = True


@dataclass
class ExportArtifact:
    """The in-memory archive handed back to the caller."""

    data: bytes
    filename: str
    content_type: str = "application/zip"
    members: list[str] = field(default_factory=list)
    omitted_sections: list[str] = field(default_factory=list)

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'

"""Export archive assembly.

Takes a ``ProjectRecord`` and produces an in-memory zip containing the
project's metadata, generated pages, environment example, docs, package
manifest, styles, component stubs and (optionally) the template's static
files.  Assembly is a fixed list of sections; each section returns the files
it contributes.  A failing optional section is logged and skipped, a failing
required section aborts the export.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional

from stackforge.config import Config
from stackforge.registry.catalog import (
    BASE_DEPENDENCIES,
    CORE_CSS_VARIABLES,
    IntegrationRegistry,
    default_registry,
)
from stackforge.registry.models import IntegrationKey, IntegrationSelection
from stackforge.resolver.environment import EnvGroup, EnvironmentResolver
from stackforge.utils import dump_json, hex_to_hsl, to_pascal

from .manifest import Manifest, ManifestBuilder
from .models import (
    ExportArtifact,
    ExportOptions,
    GeneratedFile,
    ProjectPage,
    ProjectRecord,
)
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fixed package.json / theme content
# ---------------------------------------------------------------------------

PACKAGE_SCRIPTS: dict[str, str] = {
    "dev": "next dev",
    "build": "next build",
    "start": "next start",
    "lint": "next lint",
}

DEV_DEPENDENCIES: dict[str, str] = {
    "@types/node": "^20",
    "@types/react": "^19",
    "@types/react-dom": "^19",
    "autoprefixer": "^10.4.0",
    "postcss": "^8",
    "tailwindcss": "^3.4.0",
    "typescript": "^5",
}

# Neutral shadcn-style palette, HSL triples without the hsl() wrapper.
DEFAULT_THEME: dict[str, str] = {
    "--primary": "222.2 47.4% 11.2%",
    "--primary-foreground": "210 40% 98%",
    "--secondary": "210 40% 96.1%",
    "--secondary-foreground": "222.2 47.4% 11.2%",
    "--background": "0 0% 100%",
    "--foreground": "222.2 84% 4.9%",
    "--card": "0 0% 100%",
    "--card-foreground": "222.2 84% 4.9%",
    "--border": "214.3 31.8% 91.4%",
    "--ring": "222.2 84% 4.9%",
    "--accent": "210 40% 96.1%",
    "--accent-foreground": "222.2 47.4% 11.2%",
    "--destructive": "0 84.2% 60.2%",
    "--destructive-foreground": "210 40% 98%",
    "--muted": "210 40% 96.1%",
    "--muted-foreground": "215.4 16.3% 46.9%",
    "--radius": "0.5rem",
}

_DEFAULT_LOGIN_ROUTE = "/login"


# ---------------------------------------------------------------------------
# Section plumbing
# ---------------------------------------------------------------------------


@dataclass
class AssemblyContext:
    """Everything a section may read.  Built once per export."""

    project: ProjectRecord
    selection: IntegrationSelection
    options: ExportOptions
    manifest: Manifest
    exported_by: str
    exported_at: str
    env_groups: list[EnvGroup] = field(default_factory=list)

    @property
    def env_vars(self) -> list[str]:
        return sorted(name for group in self.env_groups for name in group.variables)


SectionBuilder = Callable[[AssemblyContext], Iterable[GeneratedFile]]


@dataclass(frozen=True)
class AssemblySection:
    name: str
    build: SectionBuilder
    required: bool = False


# ---------------------------------------------------------------------------
# ProjectAssembler
# ---------------------------------------------------------------------------


class ProjectAssembler:
    """Builds the export archive for a project record.

    Usage::

        assembler = ProjectAssembler(Config())
        artifact = assembler.assemble(record, ExportOptions(), exported_by=user_id)
        Path(artifact.filename).write_bytes(artifact.data)
    """

    def __init__(
        self,
        config: Config | None = None,
        registry: IntegrationRegistry | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or Config()
        self.registry = registry or default_registry()
        self.renderer = renderer or TemplateRenderer()
        self.manifests = ManifestBuilder(self.registry)
        self.env = EnvironmentResolver(self.registry)

    # -- Public API --------------------------------------------------------

    def sections(self) -> list[AssemblySection]:
        """The ordered section list.  Later sections may overwrite earlier files."""
        return [
            AssemblySection("manifest", self._manifest_section, required=True),
            AssemblySection("vision", self._vision_section),
            AssemblySection("pages", self._pages_section),
            AssemblySection("env", self._env_section),
            AssemblySection("docs", self._docs_section),
            AssemblySection("package", self._package_section, required=True),
            AssemblySection("styles", self._styles_section),
            AssemblySection("components", self._components_section),
            AssemblySection("static", self._static_section),
        ]

    def default_options(self) -> ExportOptions:
        return ExportOptions(
            include_env_example=self.config.export.include_env_example,
            include_docs=self.config.export.include_docs,
        )

    def build_context(
        self,
        project: ProjectRecord,
        options: ExportOptions | None = None,
        exported_by: str = "",
        exported_at: str | None = None,
    ) -> AssemblyContext:
        selection = project.selection
        return AssemblyContext(
            project=project,
            selection=selection,
            options=options or self.default_options(),
            manifest=self.manifests.build(project.template, selection),
            exported_by=exported_by,
            exported_at=exported_at or datetime.now(timezone.utc).isoformat(),
            env_groups=self.env.grouped(selection),
        )

    def collect(self, context: AssemblyContext) -> tuple[dict[str, GeneratedFile], list[str]]:
        """Run every section and return ``(files by path, omitted section names)``.

        Raises:
            Exception: Whatever a required section raised.
        """
        files: dict[str, GeneratedFile] = {}
        omitted: list[str] = []

        for section in self.sections():
            try:
                produced = list(section.build(context))
            except Exception:
                if section.required:
                    raise
                logger.warning(
                    "Export of %s: section '%s' failed and was omitted",
                    context.project.id,
                    section.name,
                    exc_info=True,
                )
                omitted.append(section.name)
                continue

            for generated in produced:
                if generated.path in files and not generated.overwrite:
                    continue
                files[generated.path] = generated

        return files, omitted

    def assemble(
        self,
        project: ProjectRecord,
        options: ExportOptions | None = None,
        exported_by: str = "",
        exported_at: str | None = None,
    ) -> ExportArtifact:
        """Assemble the archive for *project*.

        Args:
            project: The resolved project record.
            options: Section switches; defaults come from ``config.export``.
            exported_by: Identifier recorded in the manifest.
            exported_at: ISO timestamp override (defaults to now, UTC).

        Returns:
            An :class:`ExportArtifact` holding the zip bytes.
        """
        context = self.build_context(project, options, exported_by, exported_at)
        files, omitted = self.collect(context)

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path, generated in files.items():
                archive.writestr(path, generated.content)

        logger.info(
            "Assembled export for %s: %d files, %d sections omitted",
            project.id,
            len(files),
            len(omitted),
        )
        return ExportArtifact(
            data=buffer.getvalue(),
            filename=f"{project.export_slug}-export.zip",
            members=list(files),
            omitted_sections=omitted,
        )

    # -- Sections ----------------------------------------------------------

    def _manifest_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        project = ctx.project
        payload = {
            "projectId": project.id,
            "name": project.name,
            "template": project.template,
            "integrations": ctx.selection.as_dict(),
            "features": list(project.features),
            "files": ctx.manifest.as_download(),
            "exportedAt": ctx.exported_at,
            "exportedBy": ctx.exported_by,
        }
        yield GeneratedFile(self.config.export.manifest_path, dump_json(payload) + "\n")

    def _vision_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        settings = ctx.project.project_config
        if settings is None or not settings.vision:
            return
        content = self.renderer.render("vision.md.j2", {"vision": settings.vision.strip()})
        yield GeneratedFile(self.config.export.vision_path, content)

    def _pages_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        pages = ctx.project.ordered_pages()
        if not pages:
            return

        listing = [
            {
                "name": page.name,
                "path": page.path,
                "type": page.page_type,
                "isProtected": page.is_protected,
                "isDynamic": page.is_dynamic,
            }
            for page in pages
        ]
        yield GeneratedFile(self.config.export.pages_path, dump_json(listing) + "\n")

        auth_provider = ctx.selection.get("auth")
        guard = "clerk" if auth_provider == "clerk" else "supabase"
        login_route = _DEFAULT_LOGIN_ROUTE
        if auth_provider:
            login_route = self.registry.login_route(IntegrationKey("auth", auth_provider)) or login_route

        for page in pages:
            target = page.archive_path
            if ".." in PurePosixPath(target).parts:
                logger.warning("Skipping page %r: path escapes the app directory", page.path)
                continue
            yield GeneratedFile(target, self._render_page(ctx.project, page, guard, login_route))

    def _env_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        if not ctx.options.include_env_example:
            return
        content = self.env.render_example(
            ctx.selection, ctx.project.name, ctx.project.template, renderer=self.renderer
        )
        yield GeneratedFile(self.config.export.env_filename, content)

    def _docs_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        if not ctx.options.include_docs:
            return
        content = self.renderer.render(
            "README.md.j2",
            {
                "project": ctx.project,
                "pages": ctx.project.ordered_pages(),
                "integrations": [(key.category, key.provider) for key in ctx.selection],
                "env_vars": ctx.env_vars,
                "env_filename": self.config.export.env_filename,
                "generated_on": ctx.exported_at[:10],
            },
        )
        yield GeneratedFile("README.md", content)

    def _package_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        dependencies = dict(BASE_DEPENDENCIES)
        for key in ctx.selection:
            requirement = self.registry.package(key)
            if requirement is not None:
                dependencies[requirement.name] = requirement.version

        payload = {
            "name": ctx.project.export_slug,
            "version": "0.1.0",
            "private": True,
            "scripts": dict(PACKAGE_SCRIPTS),
            "dependencies": dependencies,
            "devDependencies": dict(DEV_DEPENDENCIES),
        }
        yield GeneratedFile("package.json", dump_json(payload) + "\n")

    def _styles_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        theme = dict(DEFAULT_THEME)
        primary = _custom_primary(ctx.project)
        if primary:
            theme["--primary"] = primary

        yield GeneratedFile(
            "app/globals.css",
            self.renderer.render(
                "globals.css.j2",
                {"theme": [(name, theme[name]) for name in CORE_CSS_VARIABLES]},
            ),
        )
        yield GeneratedFile(
            "app/layout.tsx",
            self.renderer.render(
                "layout.tsx.j2",
                {
                    "project_name": ctx.project.name,
                    "description": ctx.project.description or "",
                    "analytics": "analytics" in ctx.selection,
                },
            ),
        )

    def _components_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        for name in self.registry.expected_components(ctx.selection.keys()):
            content = self.renderer.render(
                "component.tsx.j2", {"name": name, "project_name": ctx.project.name}
            )
            yield GeneratedFile(f"components/{name}.tsx", content)

    def _static_section(self, ctx: AssemblyContext) -> Iterator[GeneratedFile]:
        templates_dir = self.config.templates_dir
        template = ctx.project.template
        if templates_dir is None or not template:
            return

        root = Path(templates_dir) / template
        for path in ctx.manifest.all_files():
            source = root / path
            if not source.is_file():
                logger.warning("Template file missing, skipped: %s", source)
                continue
            yield GeneratedFile(Manifest.relocate(path), source.read_bytes(), overwrite=False)

    # -- Helpers -----------------------------------------------------------

    def _render_page(
        self, project: ProjectRecord, page: ProjectPage, guard: str, login_route: str
    ) -> str:
        return self.renderer.render(
            "page.tsx.j2",
            {
                "page": page,
                "guard": guard,
                "login_route": login_route,
                "component_name": page_component_name(page.name),
                "title": page.meta.title or f"{page.name} | {project.name}",
                "description": page.meta.description or f"{page.name} page for {project.name}",
            },
        )


def page_component_name(name: str) -> str:
    """``"About us!"`` -> ``"AboutUsPage"``; always a valid JS identifier."""
    base = to_pascal(re.sub(r"[^0-9A-Za-z]+", " ", name))
    if not base or base[0].isdigit():
        base = f"Page{base}"
    return f"{base}Page"


def _custom_primary(project: ProjectRecord) -> Optional[str]:
    settings = project.project_config
    if settings is None or settings.custom_colors is None:
        return None
    primary = settings.custom_colors.primary
    return hex_to_hsl(primary) if primary else None

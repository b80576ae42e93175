"""Project scaffolding: file manifests, archive assembly and templates."""

from stackforge.scaffolder.assembler import (
    AssemblyContext,
    AssemblySection,
    ProjectAssembler,
    page_component_name,
)
from stackforge.scaffolder.manifest import Manifest, ManifestBuilder
from stackforge.scaffolder.models import (
    CustomColors,
    ExportArtifact,
    ExportOptions,
    GeneratedFile,
    GenerationRecord,
    PageMeta,
    ProjectPage,
    ProjectRecord,
    ProjectSettings,
)
from stackforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "AssemblyContext",
    "AssemblySection",
    "CustomColors",
    "ExportArtifact",
    "ExportOptions",
    "GeneratedFile",
    "GenerationRecord",
    "Manifest",
    "ManifestBuilder",
    "PageMeta",
    "ProjectAssembler",
    "ProjectPage",
    "ProjectRecord",
    "ProjectSettings",
    "TemplateRenderer",
    "page_component_name",
]

"""Command-line entry point.

Examples::

    stackforge check -i auth=supabase -i payments=stripe
    stackforge env -i auth=clerk -i email=resend
    stackforge manifest --template saas -i auth=supabase
    stackforge matrix
    stackforge export project.json -o ./dist
    stackforge score ./my-app --project project.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.table import Table

from stackforge.config import Config
from stackforge.fidelity import Branding, FidelityConfig, FidelityScorer, render_report as render_fidelity
from stackforge.registry.catalog import default_registry
from stackforge.registry.models import IntegrationSelection, SelectionError
from stackforge.resolver.compatibility import CompatibilityResolver, render_matrix, render_report
from stackforge.resolver.environment import EnvironmentResolver, is_public_key, is_secret_key
from stackforge.scaffolder.assembler import ProjectAssembler
from stackforge.scaffolder.manifest import ManifestBuilder
from stackforge.scaffolder.models import ExportOptions, ProjectRecord
from stackforge.utils import (
    console,
    dump_json,
    load_json,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    setup_logging,
)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--integration", "-i",
        action="append",
        default=[],
        metavar="CATEGORY=PROVIDER",
        help="Selected integration (repeatable)",
    )
    parser.add_argument(
        "--selection-file",
        default=None,
        help="JSON file holding a {category: provider} object",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stackforge",
        description="Stackforge -- integration resolver, project exporter and fidelity scorer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples::", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--config", default=None, help="Path to a saved JSON configuration")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate an integration selection")
    _add_selection_args(check)
    check.add_argument("--markdown", action="store_true", help="Print the markdown report")

    env = sub.add_parser("env", help="Print the environment variables a selection needs")
    _add_selection_args(env)
    env.add_argument("--names", action="store_true", help="Only print variable names")
    env.add_argument("--classify", action="store_true", help="Table of variables by exposure")
    env.add_argument("--project-name", default="", help="Project named in the example header")
    env.add_argument("--template", "-t", default=None, help="Template named in the example header")

    manifest = sub.add_parser("manifest", help="Print the file manifest for a template")
    manifest.add_argument("--template", "-t", required=True, help="Template name")
    _add_selection_args(manifest)

    sub.add_parser("matrix", help="Print the pairwise compatibility matrix")

    export = sub.add_parser("export", help="Assemble the export archive for a project file")
    export.add_argument("project", help="Project record JSON file")
    export.add_argument("--output", "-o", default=".", help="Directory for the zip (default: .)")
    export.add_argument("--no-env-example", action="store_true", help="Skip .env.local.example")
    export.add_argument("--no-docs", action="store_true", help="Skip README.md")
    export.add_argument("--exported-by", default="cli", help="Identifier recorded in the manifest")

    score = sub.add_parser("score", help="Score an exported project directory")
    score.add_argument("root", help="Root of the exported project")
    score.add_argument("--project", default=None, help="Project record JSON the export came from")
    score.add_argument("--template", "-t", default=None, help="Template name")
    score.add_argument("--primary-color", default=None, help="Brand primary colour (hex)")
    _add_selection_args(score)
    score.add_argument("--markdown", action="store_true", help="Print the markdown report")

    return parser


def _selection_from_args(args: argparse.Namespace) -> IntegrationSelection:
    """Combine ``--selection-file`` and ``-i`` flags into one selection.

    Raises:
        SelectionError: On malformed flags or a category given twice.
    """
    pairs: list[tuple[str, str]] = []
    if args.selection_file:
        text = Path(args.selection_file).read_text(encoding="utf-8")
        pairs.extend(IntegrationSelection.from_json(text).entries)
    for raw in args.integration:
        category, sep, provider = raw.partition("=")
        if not sep or not category.strip() or not provider.strip():
            raise SelectionError(f"Expected CATEGORY=PROVIDER, got {raw!r}")
        pairs.append((category.strip(), provider.strip()))
    return IntegrationSelection.from_pairs(pairs)


def _load_project(path: str) -> ProjectRecord:
    return ProjectRecord.model_validate(load_json(path))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace, config: Config) -> int:
    selection = _selection_from_args(args)
    result = CompatibilityResolver().check(selection)
    if args.markdown:
        print(render_report(selection))
        return 0 if result.compatible else 1

    table = Table(title="Compatibility", show_lines=True)
    table.add_column("Kind", width=10)
    table.add_column("Integration(s)")
    table.add_column("Detail")
    for conflict in result.conflicts:
        table.add_row("[red]conflict[/red]", " vs ".join(conflict.integrations), conflict.reason)
    for warning in result.warnings:
        table.add_row("[yellow]warning[/yellow]", warning.integration, warning.message)
    for suggestion in result.suggestions:
        table.add_row("[cyan]suggest[/cyan]", "", suggestion)
    if table.row_count:
        console.print(table)

    if result.compatible:
        print_success("Selection is compatible")
        return 0
    print_error(f"Selection has {len(result.conflicts)} conflict(s)")
    return 1


def _cmd_env(args: argparse.Namespace, config: Config) -> int:
    selection = _selection_from_args(args)
    resolver = EnvironmentResolver()
    if args.names:
        for name in resolver.resolve(selection):
            print(name)
        return 0
    if args.classify:
        table = Table(title="Environment Variables", header_style="bold cyan")
        table.add_column("Integration", style="dim")
        table.add_column("Variable")
        table.add_column("Exposure")
        for group in resolver.grouped(selection):
            for name in group.variables:
                if is_public_key(name):
                    exposure = "[green]public[/green]"
                elif is_secret_key(name):
                    exposure = "[red]secret[/red]"
                else:
                    exposure = "server"
                table.add_row(group.label, name, exposure)
        console.print(table)
        return 0
    sys.stdout.write(resolver.render_example(selection, args.project_name, args.template))
    return 0


def _cmd_manifest(args: argparse.Namespace, config: Config) -> int:
    selection = _selection_from_args(args)
    if args.template not in default_registry().templates():
        print_warning(f"Unknown template '{args.template}'; base file list is empty")
    manifest = ManifestBuilder().build(args.template, selection)
    print(dump_json(manifest.as_download()))
    return 0


def _cmd_matrix(args: argparse.Namespace, config: Config) -> int:
    print(render_matrix())
    return 0


def _cmd_export(args: argparse.Namespace, config: Config) -> int:
    project = _load_project(args.project)
    options = ExportOptions(
        include_env_example=config.export.include_env_example and not args.no_env_example,
        include_docs=config.export.include_docs and not args.no_docs,
    )
    artifact = ProjectAssembler(config).assemble(project, options, exported_by=args.exported_by)

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / artifact.filename
    target.write_bytes(artifact.data)

    print_summary_table(
        {
            "Project": project.name,
            "Archive": str(target),
            "Files": len(artifact.members),
            "Omitted sections": ", ".join(artifact.omitted_sections) or "-",
        },
        title="Export",
    )
    if artifact.omitted_sections:
        print_warning("Some sections were omitted; run with --log-level DEBUG for details")
    return 0


def _cmd_score(args: argparse.Namespace, config: Config) -> int:
    if args.project:
        intent = FidelityConfig.from_project(_load_project(args.project))
    else:
        selection = _selection_from_args(args)
        intent = FidelityConfig(
            template=args.template,
            integrations=selection.as_dict(),
            branding=Branding(primary_color=args.primary_color),
        )

    scorer = FidelityScorer(config=config.scoring, env_filename=config.export.env_filename)
    score = scorer.score(intent, args.root)
    if args.markdown:
        print(render_fidelity(Path(args.root).name, score))
    else:
        scorer.print_report(score, label=str(args.root))
    return 0 if scorer.passed(score) else 1


_COMMANDS = {
    "check": _cmd_check,
    "env": _cmd_env,
    "manifest": _cmd_manifest,
    "matrix": _cmd_matrix,
    "export": _cmd_export,
    "score": _cmd_score,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``stackforge`` / ``python -m stackforge``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.load(Path(args.config)) if args.config else Config.from_env()
    except (OSError, ValueError) as exc:
        print_error(f"Error: could not load configuration: {exc}")
        sys.exit(2)

    setup_logging(args.log_level or config.log_level)

    try:
        code = _COMMANDS[args.command](args, config)
    except SelectionError as exc:
        print_error(f"Error: {exc}")
        sys.exit(2)
    except FileNotFoundError as exc:
        print_error(f"Error: file not found: {exc.filename}")
        sys.exit(2)
    except (ValidationError, json.JSONDecodeError) as exc:
        print_error(f"Error: invalid project file: {exc}")
        sys.exit(2)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()

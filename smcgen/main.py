"""
smcgen — CLI entrypoint.

Usage:
    python -m smcgen.main --help
    python -m smcgen.main generate Machine.sm
    python -m smcgen.main args Machine.sm
    python -m smcgen.main check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from smcgen import __version__
from smcgen.adapters.base import GenerationSink
from smcgen.core.errors import SmcgenError
from smcgen.core.observability.logging_config import FILE_ENV, FILE_LEVEL_ENV, resolve_level, setup_logging


class ConsoleSink(GenerationSink):
    """Keeps generated lines; prints diagnostics compiler-style to stderr."""

    def __init__(self, input_path: str, quiet: bool = False):
        self.input_path = input_path
        self.quiet = quiet
        self.lines: list[str] = []

    def append_output(self, line: str) -> None:
        self.lines.append(line)

    def report_error(self, message: str, line: int | None = None) -> None:
        where = self.input_path if line is None else f"{self.input_path}:{line + 1}"
        click.secho(f"{where}: error - {message}", fg="red", err=True)

    def report_warning(self, message: str) -> None:
        if not self.quiet:
            click.secho(f"{self.input_path}: warning - {message}", fg="yellow", err=True)


def _load(ctx: click.Context, start_dir: Path):
    from smcgen.core.config.loader import load_settings, resolve_install_paths

    settings, config_path = load_settings(ctx.obj.get("config_path"), start_dir=start_dir)
    return settings, config_path, resolve_install_paths(settings, config_path)


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="smcgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress warnings and non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to smcgen.yml (default: search upward from the input file).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """smcgen — generate code and diagrams from State Machine Compiler files."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o", "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write generated code (default: next to the input, tool's file name).",
)
@click.option("--no-graph", is_flag=True, help="Skip diagram generation.")
@click.option("--no-project", is_flag=True, help="Do not update the project manifest.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the run report as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    input_file: Path,
    output_path: Path | None,
    no_graph: bool,
    no_project: bool,
    as_json: bool,
) -> None:
    """Generate code (and diagrams) for INPUT_FILE."""
    from smcgen.adapters.project.manifest import ManifestProject
    from smcgen.core.engine.pipeline import GenerationPipeline
    from smcgen.core.models.generation import GenerationRequest

    input_file = input_file.resolve()
    quiet = ctx.obj.get("quiet", False)

    try:
        settings, config_path, paths = _load(ctx, input_file.parent)
        if no_graph:
            settings.graph.enabled = False

        project = None
        if not no_project:
            base = config_path.parent if config_path else input_file.parent
            project = ManifestProject(base / settings.manifest, root=base)

        request = GenerationRequest.from_file(input_file)
        sink = ConsoleSink(request.input_path, quiet=quiet)
        report = GenerationPipeline(settings, paths).run(
            request,
            sink,
            tree=project.tree_for(input_file) if project else None,
            references=project,
        )
    except (SmcgenError, OSError) as e:
        _fail(str(e))
        return

    if report.source_artifact is not None:
        target = output_path or input_file.parent / report.source_artifact
        target.write_text("".join(f"{line}\n" for line in sink.lines), encoding="utf-8")
    else:
        target = None

    if project is not None:
        project.save()

    if as_json:
        data = report.to_dict()
        data["output_path"] = str(target) if target else None
        click.echo(json.dumps(data, indent=2))
    elif not quiet:
        if target is not None:
            click.secho(f"✅ {target} ({report.emitted_lines} lines)", fg="green")
        for artifact in report.artifacts:
            click.echo(f"   📄 {artifact}")

    if not report.ok:
        sys.exit(1)


@cli.command("args")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show_args(ctx: click.Context, input_file: Path, as_json: bool) -> None:
    """Show the tool arguments each stage would use for INPUT_FILE."""
    from smcgen.core.models.generation import GenerationRequest
    from smcgen.core.services.directives import image_extension_for, resolve_all, source_extension_for

    try:
        settings, _, _ = _load(ctx, input_file.resolve().parent)
        request = GenerationRequest.from_file(input_file)
    except (SmcgenError, OSError) as e:
        _fail(str(e))
        return

    resolved = resolve_all(request.input_text, settings)

    if as_json:
        click.echo(json.dumps(resolved, indent=2))
        return

    for label, args in resolved.items():
        click.echo(f"{label:<7} {' '.join(args)}")
    click.echo()
    click.echo(f"source file: {settings.source.extension or source_extension_for(resolved['source'])}")
    click.echo(f"image format: {image_extension_for(resolved['render']) or '(missing -T argument)'}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Check that the compiler and optional tools are installed."""
    from smcgen.adapters.shell.command import ProcessInvoker
    from smcgen.core.observability.health import check_installation

    try:
        settings, config_path, paths = _load(ctx, Path.cwd())
    except SmcgenError as e:
        _fail(str(e))
        return

    health = check_installation(settings, paths, ProcessInvoker(settings.lookup_command))

    if as_json:
        data = health.to_dict()
        data["config_path"] = str(config_path) if config_path else None
        data["install_root"] = str(paths.root)
        click.echo(json.dumps(data, indent=2))
    else:
        icons = {"healthy": "✅", "degraded": "⚠️ ", "unhealthy": "❌", "unknown": "❓"}
        click.secho(f"\n🔧 smcgen {__version__}", fg="cyan", bold=True)
        click.echo(f"   Config: {config_path or '(defaults)'}")
        click.echo(f"   Install root: {paths.root}")
        click.echo()
        for c in health.components:
            click.echo(f"   {icons.get(c.status, '•')} {c.name:<16} {c.message}")
        click.echo()

    sys.exit(0 if health.status != "unhealthy" else 1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()

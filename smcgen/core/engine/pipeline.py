"""
Generation pipeline — the central orchestration of one run.

Takes an input file, runs the compiler to produce source code, runs it
again in graph mode to produce a diagram description, optionally
renders that description to an image, reconciles the produced files
with the project tree, and makes sure the project references the
runtime library.

Flow:
    init → source_gen → source_cleanup → graph_gen → graph_cleanup
         → reconcile → teardown → reference → done

Tool problems are reported through the sink, never raised. A failing
step skips the rest of its own stage only. The workspace is torn down
on every exit path.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from smcgen.adapters.base import GenerationSink, Invoker, ProjectReferences, ProjectTree
from smcgen.adapters.shell.command import ProcessInvoker
from smcgen.core.config.loader import InstallPaths, Settings
from smcgen.core.models.generation import Diagnostic, GenerationRequest
from smcgen.core.models.outcome import ProcessOutcome
from smcgen.core.services.diagnostics import parse_diagnostics
from smcgen.core.services.directives import (
    GRAPH,
    RENDER,
    SOURCE,
    extract_args,
    image_extension_for,
    source_extension_for,
)
from smcgen.core.services.reconcile import ReconcileResult, ensure_reference, reconcile_artifacts
from smcgen.core.services.workspace import (
    Workspace,
    clear_workspace,
    resolve_single_artifact,
    scoped_workspace,
)

logger = logging.getLogger(__name__)


class Stage(StrEnum):
    """Pipeline states, in execution order."""

    INIT = "init"
    SOURCE_GEN = "source_gen"
    SOURCE_CLEANUP = "source_cleanup"
    GRAPH_GEN = "graph_gen"
    GRAPH_CLEANUP = "graph_cleanup"
    RECONCILE = "reconcile"
    TEARDOWN = "teardown"
    REFERENCE = "reference"
    DONE = "done"


@dataclass
class GenerationReport:
    """Outcome of one run, alongside what went through the sink."""

    input_path: str = ""
    stages: list[Stage] = field(default_factory=list)
    source_artifact: str | None = None
    emitted_lines: int = 0
    artifacts: list[Path] = field(default_factory=list)
    reconcile: ReconcileResult | None = None
    reference_added: bool = False
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def status(self) -> str:
        if not self.errors:
            return "ok"
        if self.emitted_lines:
            return "partial"
        return "failed"

    def enter(self, stage: Stage) -> None:
        logger.debug("Stage: %s", stage)
        self.stages.append(stage)

    def to_dict(self) -> dict:
        return {
            "input_path": self.input_path,
            "status": self.status,
            "stages": [str(s) for s in self.stages],
            "source_artifact": self.source_artifact,
            "emitted_lines": self.emitted_lines,
            "artifacts": [str(p) for p in self.artifacts],
            "reconcile": self.reconcile.to_dict() if self.reconcile else None,
            "reference_added": self.reference_added,
            "errors": [d.model_dump(mode="json") for d in self.errors],
            "warnings": self.warnings,
        }


class _RecordingSink(GenerationSink):
    """Forwards to the host sink and keeps a copy in the report."""

    def __init__(self, inner: GenerationSink, report: GenerationReport):
        self._inner = inner
        self._report = report

    def append_output(self, line: str) -> None:
        self._inner.append_output(line)
        self._report.emitted_lines += 1

    def report_error(self, message: str, line: int | None = None) -> None:
        self._report.errors.append(Diagnostic(message=message, line=line))
        self._inner.report_error(message, line)

    def report_warning(self, message: str) -> None:
        self._report.warnings.append(message)
        self._inner.report_warning(message)


class GenerationPipeline:
    """Runs the compiler/renderer chain for one input file at a time.

    Args:
        settings: Loaded configuration.
        paths: Install paths, resolved once at startup.
        invoker: Process runner (default: ProcessInvoker).
        scratch_dir: Parent directory for workspaces (default: system temp).
    """

    def __init__(
        self,
        settings: Settings,
        paths: InstallPaths,
        invoker: Invoker | None = None,
        scratch_dir: Path | None = None,
    ):
        self._settings = settings
        self._paths = paths
        self._invoker = invoker or ProcessInvoker(settings.lookup_command)
        self._scratch_dir = scratch_dir

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def paths(self) -> InstallPaths:
        return self._paths

    def run(
        self,
        request: GenerationRequest,
        sink: GenerationSink,
        tree: ProjectTree | None = None,
        references: ProjectReferences | None = None,
    ) -> GenerationReport:
        """Generate code for ``request``.

        Generated lines go to ``sink.append_output``; diagnostics to
        ``sink.report_error`` / ``sink.report_warning``. Produced graph
        artifacts are reconciled into ``tree`` and the runtime library
        is added to ``references`` when they are given.

        Raises:
            ProcessLaunchError: An executable could not be started.
            WorkspaceError: The scratch workspace could not be created.
        """
        report = GenerationReport(input_path=request.input_path)
        out = _RecordingSink(sink, report)

        report.enter(Stage.INIT)
        jar = self._paths.compiler_jar
        if not jar.is_file():
            out.report_error(f"Missing installed file: {jar}")
            report.enter(Stage.DONE)
            return report

        with scoped_workspace(out, self._scratch_dir) as workspace:
            report.enter(Stage.SOURCE_GEN)
            self._generate_source(request, workspace, out, report)

            report.enter(Stage.SOURCE_CLEANUP)
            clear_workspace(workspace, out)

            produced: list[Path] = []
            if self._settings.graph.enabled:
                report.enter(Stage.GRAPH_GEN)
                produced = self._generate_graph(request, workspace, out)
                report.artifacts.extend(produced)

                report.enter(Stage.GRAPH_CLEANUP)
                clear_workspace(workspace, out)

            if produced and tree is not None:
                report.enter(Stage.RECONCILE)
                report.reconcile = reconcile_artifacts(
                    tree, request.input_dir, {p.name for p in produced}, out,
                )

            report.enter(Stage.TEARDOWN)

        if references is not None:
            report.enter(Stage.REFERENCE)
            report.reference_added = ensure_reference(
                references,
                self._settings.runtime_library.reference_name,
                self._paths.runtime_library,
                out,
            )

        report.enter(Stage.DONE)
        logger.info(
            "Generated %s: %s (%d lines, %d artifacts)",
            request.input_path, report.status, report.emitted_lines, len(report.artifacts),
        )
        return report

    # ── Stages ──────────────────────────────────────────────────────

    def _compile(self, request: GenerationRequest, workspace: Workspace, args: list[str]) -> ProcessOutcome:
        """``java -jar <jar> <args> -d <workspace> <input>``"""
        argv = ["-jar", str(self._paths.compiler_jar), *args, "-d", str(workspace.path), request.input_path]
        return self._invoker.execute(str(workspace.path), self._settings.compiler.java, argv)

    def _generate_source(
        self,
        request: GenerationRequest,
        workspace: Workspace,
        out: GenerationSink,
        report: GenerationReport,
    ) -> None:
        args = extract_args(request.input_text, SOURCE, self._settings.source.default_args)
        pattern = self._settings.source.extension or source_extension_for(args)

        outcome = self._compile(request, workspace, args)
        diagnostics = parse_diagnostics(outcome.stderr, request.input_path, outcome.exit_code)
        if diagnostics.has_error:
            diagnostics.emit(out)
            return

        name = resolve_single_artifact(workspace, pattern, out)
        if name is None:
            return

        # Undecodable bytes become U+FFFD
        try:
            with open(workspace.path / name, encoding=self._settings.source.encoding, errors="replace") as f:
                lines = [line.rstrip("\r\n") for line in f]
        except OSError as e:
            out.report_error(f"Cannot read generated file {name}: {e}")
            return

        for line in lines:
            out.append_output(line)
        report.source_artifact = name

    def _generate_graph(
        self,
        request: GenerationRequest,
        workspace: Workspace,
        out: GenerationSink,
    ) -> list[Path]:
        """Produce the diagram description and, when possible, its image.

        Returns the produced files next to the input, description first.
        """
        args = extract_args(request.input_text, GRAPH, self._settings.graph.default_args)
        outcome = self._compile(request, workspace, args)
        diagnostics = parse_diagnostics(outcome.stderr, request.input_path, outcome.exit_code)
        if diagnostics.has_error:
            diagnostics.emit(out)
            return []

        dot_name = resolve_single_artifact(workspace, self._settings.graph.extension, out)
        if dot_name is None:
            return []

        dot_source = workspace.path / dot_name
        input_dir = request.input_dir
        renderer = self._settings.renderer.command

        if not self._invoker.command_exists(renderer):
            logger.info("%s not on path, keeping %s only", renderer, dot_name)
            return self._copy_description(dot_source, input_dir, out)

        render_args = extract_args(request.input_text, RENDER, self._settings.renderer.default_args)
        image_ext = image_extension_for(render_args)
        if image_ext is None:
            out.report_error(f"missing format argument (-T<format>) for {renderer}")
            return []

        image = input_dir / f"{Path(dot_name).stem}.{image_ext}"
        try:
            image.unlink(missing_ok=True)
        except OSError as e:
            out.report_warning(f"Cannot delete {image}: {e}")

        rendered = self._invoker.execute(
            str(workspace.path), renderer, [*render_args, str(dot_source), "-o", str(image)],
        )

        produced = self._copy_description(dot_source, input_dir, out)
        if image.is_file():
            produced.append(image)
        else:
            detail = rendered.stderr.strip().splitlines()[:1]
            out.report_warning(
                f"{renderer} produced no image (exit code {rendered.exit_code})"
                + (f": {detail[0]}" if detail else "")
            )
        return produced

    def _copy_description(self, dot_source: Path, input_dir: Path, out: GenerationSink) -> list[Path]:
        target = input_dir / dot_source.name
        try:
            shutil.copyfile(dot_source, target)
        except OSError as e:
            out.report_error(f"Cannot copy {dot_source.name} to {input_dir}: {e}")
            return []
        return [target]


def generate(
    request: GenerationRequest,
    sink: GenerationSink,
    settings: Settings,
    paths: InstallPaths,
    invoker: Invoker | None = None,
    tree: ProjectTree | None = None,
    references: ProjectReferences | None = None,
) -> GenerationReport:
    """Run one generation with a fresh pipeline."""
    pipeline = GenerationPipeline(settings, paths, invoker=invoker)
    return pipeline.run(request, sink, tree=tree, references=references)

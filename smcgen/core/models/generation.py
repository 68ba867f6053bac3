"""
Generation models — request and diagnostics.

The request is what the host hands in; diagnostics are what the
pipeline hands back through the sink.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from smcgen.adapters.base import GenerationSink


class GenerationRequest(BaseModel):
    """An input file and its full text, immutable for one run."""

    model_config = ConfigDict(frozen=True)

    input_path: str
    input_text: str

    @classmethod
    def from_file(cls, path: Path) -> GenerationRequest:
        """Read the input; bytes that are not UTF-8 become U+FFFD."""
        path = path.resolve()
        return cls(input_path=str(path), input_text=path.read_text(encoding="utf-8", errors="replace"))

    @property
    def input_dir(self) -> Path:
        return Path(self.input_path).parent


class Diagnostic(BaseModel):
    """A single error or warning.

    ``line`` is 0-based in input-file coordinates, or None when the
    problem cannot be attributed to a line.
    """

    model_config = ConfigDict(frozen=True)

    severity: Literal["error", "warning"] = "error"
    message: str
    line: int | None = None

    def format(self, input_path: str = "") -> str:
        """Render as ``file:line: severity - message`` (1-based line)."""
        where = input_path
        if self.line is not None:
            where = f"{where}:{self.line + 1}"
        prefix = f"{where}: " if where else ""
        return f"{prefix}{self.severity} - {self.message}"


class DiagnosticReport(BaseModel):
    """Parsed diagnostics for one process invocation."""

    has_error: bool = False
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    def emit(self, sink: GenerationSink) -> None:
        """Forward every diagnostic to the host's reporting channels."""
        for diag in self.diagnostics:
            if diag.severity == "error":
                sink.report_error(diag.message, diag.line)
            else:
                sink.report_warning(diag.message)

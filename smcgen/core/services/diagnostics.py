"""
Diagnostic parsing — compiler stderr to line-addressed errors.

The compiler reports problems as::

    /abs/path/Machine.sm:12: error - Unknown transition "Foo".

Lines that start with the input path and follow that grammar become
errors at the reported line, converted from the tool's 1-based
numbering to the 0-based numbering the host expects. Anything else is
passed through whole as a file-level error.
"""

from __future__ import annotations

import logging
import re

from smcgen.core.models.generation import Diagnostic, DiagnosticReport

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"[\r\n]+")
_DIAGNOSTIC_RE = re.compile(r"^:(?P<line>-?\d+):\s*(?P<level>\S+) - (?P<message>.*)$")


def parse_line(line: str, input_path: str) -> Diagnostic:
    """Classify one non-empty stderr line."""
    if not line.startswith(input_path):
        return Diagnostic(message=line)

    match = _DIAGNOSTIC_RE.match(line[len(input_path):])
    if match is None:
        return Diagnostic(message=line)

    line_num = int(match.group("line"))
    message = match.group("message")
    if line_num <= 0:
        return Diagnostic(message=message)
    return Diagnostic(message=message, line=line_num - 1)


def parse_diagnostics(stderr: str, input_path: str, exit_code: int = 0) -> DiagnosticReport:
    """Turn captured stderr into diagnostics.

    Every non-empty stderr line is an error. A nonzero exit with an
    empty stderr still yields one synthesized error, so a failed run
    is never mistaken for success.

    Args:
        stderr: Captured standard error text.
        input_path: The input file path exactly as passed to the tool.
        exit_code: The process exit status.

    Returns:
        DiagnosticReport with ``has_error`` and the diagnostics in order.
    """
    report = DiagnosticReport()

    for raw in _LINE_SPLIT.split(stderr):
        line = raw.strip()
        if not line:
            continue
        report.diagnostics.append(parse_line(line, input_path))

    if report.diagnostics:
        report.has_error = True
    elif exit_code != 0:
        report.has_error = True
        report.diagnostics.append(Diagnostic(message=f"execution failed: exit code {exit_code}"))

    if report.has_error:
        logger.debug("%d diagnostic(s) for %s (exit %d)", len(report.diagnostics), input_path, exit_code)
    return report

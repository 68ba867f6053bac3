"""
Directive extraction — per-stage tool arguments from leading comments.

An input file may override the default arguments of each stage with a
directive in its leading ``//`` comment block:

    // Command Line: -java -g
    // Graph Command Line: -graph -glevel 2
    // Dot Command Line: -Tpng

Scanning stops at the first non-comment line. Blank lines are skipped.
Each directive is looked up independently, so the three lines may
appear in any order. Once a directive matches, its tokens replace the
defaults entirely, even when there are none.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smcgen.core.config.loader import Settings

COMMENT_MARKER = "//"


@dataclass(frozen=True)
class Directive:
    """A labeled directive grammar with its default arguments."""

    label: str
    pattern: re.Pattern[str]
    defaults: tuple[str, ...] = ()


def _grammar(*words: str) -> re.Pattern[str]:
    """``^<words>\\s+Line\\s*:<args>$``, case-insensitive."""
    head = r"\s+".join(re.escape(w) for w in words)
    return re.compile(rf"^{head}\s+Line\s*:(?P<args>.*)$", re.IGNORECASE)


SOURCE = Directive("source", _grammar("Command"), ("-csharp", "-reflect", "-generic"))
GRAPH = Directive("graph", _grammar("Graph", "Command"), ("-graph", "-glevel", "0"))
RENDER = Directive("render", _grammar("Dot", "Command"), ("-Tsvg",))

DIRECTIVES: tuple[Directive, ...] = (SOURCE, GRAPH, RENDER)


def extract_args(
    input_text: str,
    directive: Directive,
    defaults: list[str] | tuple[str, ...] | None = None,
) -> list[str]:
    """Arguments for one stage, from the directive or the defaults.

    Args:
        input_text: Full text of the input file.
        directive: Which directive to look for.
        defaults: Overrides ``directive.defaults`` when given.

    Returns:
        A new list; callers may mutate it.
    """
    fallback = list(directive.defaults if defaults is None else defaults)

    for raw in input_text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if not line.startswith(COMMENT_MARKER):
            break

        comment = line[len(COMMENT_MARKER):].strip()
        match = directive.pattern.match(comment)
        if match is None:
            continue

        return [token.strip() for token in match.group("args").split()]

    return fallback


def resolve_all(input_text: str, settings: Settings | None = None) -> dict[str, list[str]]:
    """Arguments for every stage, keyed by directive label."""
    overrides: dict[str, list[str]] = {}
    if settings is not None:
        overrides = {
            SOURCE.label: settings.source.default_args,
            GRAPH.label: settings.graph.default_args,
            RENDER.label: settings.renderer.default_args,
        }
    return {
        d.label: extract_args(input_text, d, overrides.get(d.label))
        for d in DIRECTIVES
    }


# SMC target-language flag -> generated source glob
_TARGET_EXTENSIONS = {
    "-c": "*.c",
    "-c++": "*.cpp",
    "-csharp": "*.cs",
    "-groovy": "*.groovy",
    "-java": "*.java",
    "-java7": "*.java",
    "-js": "*.js",
    "-lua": "*.lua",
    "-objc": "*.m",
    "-perl": "*.pm",
    "-php": "*.php",
    "-python": "*.py",
    "-ruby": "*.rb",
    "-scala": "*.scala",
    "-tcl": "*.tcl",
    "-vb": "*.vb",
}


def source_extension_for(args: list[str], default: str = "*.cs") -> str:
    """Glob of the file the compiler generates for these arguments."""
    for arg in args:
        ext = _TARGET_EXTENSIONS.get(arg.lower())
        if ext:
            return ext
    return default


def image_extension_for(args: list[str]) -> str | None:
    """Output format from the first ``-T<format>[:renderer]`` argument, if any."""
    for arg in args:
        if arg.startswith("-T") and len(arg) > 2:
            return arg[2:].split(":", 1)[0]
    return None

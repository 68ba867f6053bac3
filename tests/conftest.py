"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from smcgen.adapters.mock import MemoryProjectTree, MemoryReferences, MockInvoker, RecordingSink
from smcgen.core.config.loader import InstallPaths, Settings
from smcgen.core.models.generation import GenerationRequest
from smcgen.core.models.outcome import InvocationSpec, ProcessOutcome

MACHINE_SM = """\
// Turnstile example

%class Turnstile
%package Example

%start MainMap::Locked

%map MainMap
%%
Locked
{
    coin    Unlocked    { unlock(); }
    pass    nil         { alarm(); }
}
%%
"""

GENERATED_CS = """\
// Generated by SMC
namespace Example
{
    public sealed class TurnstileContext {}
}
"""

GENERATED_DOT = "digraph Turnstile {\n    Locked -> Unlocked;\n}\n"


def fake_smc(
    source: str = GENERATED_CS,
    graph: str = GENERATED_DOT,
    source_names: tuple[str, ...] = ("Turnstile.cs",),
    dot_names: tuple[str, ...] = ("Turnstile.dot",),
    stderr: str = "",
    graph_stderr: str = "",
    exit_code: int = 0,
    encoding: str = "utf-8",
):
    """A java handler that behaves like the SMC compiler."""

    def handler(spec: InvocationSpec) -> ProcessOutcome:
        out_dir = Path(spec.args[spec.args.index("-d") + 1])
        if "-graph" in spec.args:
            for name in dot_names:
                (out_dir / name).write_text(graph, encoding="utf-8")
            return ProcessOutcome(exit_code=exit_code, stderr=graph_stderr)
        for name in source_names:
            (out_dir / name).write_text(source, encoding=encoding)
        return ProcessOutcome(exit_code=exit_code, stderr=stderr)

    return handler


def fake_dot(writes_image: bool = True, exit_code: int = 0, stderr: str = ""):
    """A renderer handler that writes the -o target."""

    def handler(spec: InvocationSpec) -> ProcessOutcome:
        if writes_image:
            target = Path(spec.args[spec.args.index("-o") + 1])
            target.write_text("<svg/>", encoding="utf-8")
        return ProcessOutcome(exit_code=exit_code, stderr=stderr)

    return handler


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """An install root holding the compiler archive and the runtime library."""
    root = tmp_path / "install"
    (root / "smc" / "lib" / "Release" / "NoTrace").mkdir(parents=True)
    (root / "smc" / "Smc.jar").write_bytes(b"PK")
    (root / "smc" / "lib" / "Release" / "NoTrace" / "statemap.dll").write_bytes(b"MZ")
    return root


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def paths(install_root: Path, settings: Settings) -> InstallPaths:
    return InstallPaths(
        root=install_root,
        compiler_jar=install_root / settings.compiler.jar,
        runtime_library=install_root / settings.runtime_library.path,
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    d = tmp_path / "project"
    d.mkdir()
    return d


@pytest.fixture
def input_file(project_dir: Path) -> Path:
    path = project_dir / "Turnstile.sm"
    path.write_text(MACHINE_SM, encoding="utf-8")
    return path


@pytest.fixture
def request_for(input_file: Path):
    """Build a GenerationRequest, optionally with different text."""

    def make(text: str | None = None) -> GenerationRequest:
        if text is not None:
            input_file.write_text(text, encoding="utf-8")
        return GenerationRequest.from_file(input_file)

    return make


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    d = tmp_path / "scratch"
    d.mkdir()
    return d


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def invoker() -> MockInvoker:
    mock = MockInvoker()
    mock.on("java", fake_smc())
    return mock


@pytest.fixture
def tree() -> MemoryProjectTree:
    return MemoryProjectTree()


@pytest.fixture
def references() -> MemoryReferences:
    return MemoryReferences()


@pytest.fixture
def make_smc():
    """Factory for scripted compiler handlers (see ``fake_smc``)."""
    return fake_smc


@pytest.fixture
def make_dot():
    """Factory for scripted renderer handlers (see ``fake_dot``)."""
    return fake_dot

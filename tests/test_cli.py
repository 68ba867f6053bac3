"""
Tests for CLI commands — generate, args, check, and global options.

The end-to-end tests run real child processes: a stand-in for the
compiler written in Python and a stand-in path-lookup command.
"""

import json
import os
import sys
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from smcgen.main import cli

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX shebang scripts")

FAKE_SMC = """\
import sys
from pathlib import Path

args = sys.argv[1:]
out = Path(args[args.index("-d") + 1])
src = Path(args[-1])
if "-graph" in args:
    (out / (src.stem + ".dot")).write_text("digraph { a -> b; }\\n")
elif b"bad" in src.read_bytes():
    sys.stderr.write(f"{src}:3: error - unknown state\\n")
    sys.exit(1)
else:
    (out / (src.stem + ".cs")).write_text("// generated\\nclass Turnstile {}\\n")
"""


def _script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(0o755)
    return path


@pytest.fixture
def workdir(tmp_path: Path, install_root: Path) -> Path:
    """A project with smcgen.yml pointing at stand-in tools."""
    project = tmp_path / "work"
    project.mkdir()
    java = _script(tmp_path / "fake-java", FAKE_SMC)
    lookup = _script(tmp_path / "fake-which", "import sys\nsys.exit(1)\n")
    (project / "smcgen.yml").write_text(textwrap.dedent(f"""\
        install_root: {install_root}
        lookup_command: {lookup}
        compiler:
          java: {java}
    """))
    (project / "Turnstile.sm").write_text("// Turnstile\n%class Turnstile\n")
    return project


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "State Machine Compiler" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestArgsCommand:
    def test_defaults(self, tmp_path: Path):
        sm = tmp_path / "T.sm"
        sm.write_text("%class T\n")
        result = CliRunner().invoke(cli, ["args", str(sm), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["source"] == ["-csharp", "-reflect", "-generic"]
        assert data["graph"] == ["-graph", "-glevel", "0"]

    def test_directives_shown(self, tmp_path: Path):
        sm = tmp_path / "T.sm"
        sm.write_text("// Command Line: -java\n// Dot Command Line: -Tpng\n%class T\n")
        result = CliRunner().invoke(cli, ["args", str(sm)])
        assert result.exit_code == 0
        assert "-java" in result.output
        assert "*.java" in result.output
        assert "image format: png" in result.output

    def test_bad_config(self, tmp_path: Path):
        sm = tmp_path / "T.sm"
        sm.write_text("%class T\n")
        (tmp_path / "smcgen.yml").write_text("nonsense_key: 1\n")
        result = CliRunner().invoke(cli, ["args", str(sm)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_non_utf8_input(self, tmp_path: Path):
        sm = tmp_path / "T.sm"
        sm.write_bytes("// M\u00e1quina\n// Command Line: -java\n%class T\n".encode("latin-1"))
        result = CliRunner().invoke(cli, ["args", str(sm), "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["source"] == ["-java"]


@posix_only
class TestGenerateCommand:
    def test_generates_code_and_diagram(self, workdir: Path):
        result = CliRunner().invoke(
            cli, ["--config", str(workdir / "smcgen.yml"), "generate", str(workdir / "Turnstile.sm")],
        )
        assert result.exit_code == 0, result.output
        assert (workdir / "Turnstile.cs").read_text() == "// generated\nclass Turnstile {}\n"
        assert (workdir / "Turnstile.dot").is_file()
        assert not (workdir / "Turnstile.svg").exists()

        manifest = json.loads((workdir / ".smcgen" / "project.json").read_text())
        assert [i["name"] for i in manifest["items"]["Turnstile.sm"]] == ["Turnstile.dot"]
        assert [r["name"] for r in manifest["references"]] == ["statemap"]

    def test_config_found_from_input_dir(self, workdir: Path, monkeypatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["generate", str(workdir / "Turnstile.sm"), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["source_artifact"] == "Turnstile.cs"
        assert data["stages"][-1] == "done"

    def test_explicit_output_and_no_graph(self, workdir: Path, tmp_path: Path):
        out = tmp_path / "Generated.cs"
        result = CliRunner().invoke(
            cli, ["generate", str(workdir / "Turnstile.sm"), "-o", str(out), "--no-graph", "--no-project"],
        )
        assert result.exit_code == 0, result.output
        assert out.is_file()
        assert not (workdir / "Turnstile.dot").exists()
        assert not (workdir / ".smcgen").exists()

    def test_compiler_errors_exit_nonzero(self, workdir: Path):
        sm = workdir / "Turnstile.sm"
        sm.write_text("// bad machine\n%class Turnstile\n")
        result = CliRunner().invoke(cli, ["generate", str(sm)])
        assert result.exit_code == 1
        assert f"{sm.resolve()}:3: error - unknown state" in result.output
        assert not (workdir / "Turnstile.cs").exists()

    def test_non_utf8_input(self, workdir: Path):
        sm = workdir / "Turnstile.sm"
        sm.write_bytes("// M\u00e1quina de estados\n%class Turnstile\n".encode("latin-1"))
        result = CliRunner().invoke(cli, ["generate", str(sm), "--no-graph"])
        assert result.exit_code == 0, result.output
        assert (workdir / "Turnstile.cs").read_text() == "// generated\nclass Turnstile {}\n"

    def test_missing_compiler(self, workdir: Path, install_root: Path):
        (install_root / "smc" / "Smc.jar").unlink()
        result = CliRunner().invoke(cli, ["generate", str(workdir / "Turnstile.sm")])
        assert result.exit_code == 1
        assert "Missing installed file" in result.output


@posix_only
class TestCheckCommand:
    def test_reports_components(self, workdir: Path, monkeypatch):
        monkeypatch.chdir(workdir)
        result = CliRunner().invoke(cli, ["check", "--json"])
        data = json.loads(result.output)
        names = {c["name"]: c["status"] for c in data["components"]}
        assert names["compiler"] == "healthy"
        assert names["runtime_library"] == "healthy"
        # the stand-in lookup finds nothing, java is required
        assert names["java"] == "unhealthy"
        assert result.exit_code == 1

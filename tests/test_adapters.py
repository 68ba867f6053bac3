"""
Tests for the adapter contracts and the in-memory doubles.
"""

from pathlib import Path

import pytest

from smcgen.adapters import (
    GenerationSink,
    Invoker,
    MemoryProjectTree,
    MemoryReferences,
    MockInvoker,
    ProcessInvoker,
    ProjectReferences,
    ProjectTree,
    RecordingSink,
)
from smcgen.core.models.outcome import ProcessOutcome


class TestContracts:
    def test_doubles_implement_contracts(self):
        assert isinstance(RecordingSink(), GenerationSink)
        assert isinstance(MemoryProjectTree(), ProjectTree)
        assert isinstance(MemoryReferences(), ProjectReferences)
        assert isinstance(MockInvoker(), Invoker)
        assert isinstance(ProcessInvoker(), Invoker)

    def test_abstract_base_not_instantiable(self):
        with pytest.raises(TypeError):
            ProjectTree()


class TestRecordingSink:
    def test_collects_everything(self):
        sink = RecordingSink()
        sink.append_output("a")
        sink.append_output("b")
        sink.report_error("bad", 3)
        sink.report_error("worse")
        sink.report_warning("meh")
        assert sink.output == "a\nb\n"
        assert sink.errors == [("bad", 3), ("worse", None)]
        assert sink.warnings == ["meh"]


class TestMockInvoker:
    def test_default_success(self):
        mock = MockInvoker()
        outcome = mock.execute("/tmp", "java", ["-jar", "x"])
        assert outcome.ok
        assert mock.call_count == 1
        assert mock.call_log[0].args == ["-jar", "x"]

    def test_handler(self):
        mock = MockInvoker()
        mock.on("dot", lambda spec: ProcessOutcome(exit_code=1, stderr="nope"))
        assert mock.execute(".", "dot", []).stderr == "nope"
        assert mock.execute(".", "java", []).ok
        assert [c.command for c in mock.calls_to("dot")] == ["dot"]

    def test_availability(self):
        mock = MockInvoker(available=["java"])
        assert mock.command_exists("java")
        assert not mock.command_exists("dot")
        mock.set_available("dot")
        mock.set_available("java", False)
        assert mock.command_exists("dot")
        assert not mock.command_exists("java")

    def test_reset(self):
        mock = MockInvoker()
        mock.on("java", lambda spec: ProcessOutcome(exit_code=9))
        mock.execute(".", "java", [])
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(".", "java", []).ok


class TestMemoryProjectTree:
    def test_remove_deletes_file_and_counts(self, tmp_path: Path):
        f = tmp_path / "T.dot"
        f.write_text("")
        tree = MemoryProjectTree([f])
        tree.items()[0].remove()
        assert tree.names == set()
        assert tree.remove_count == 1
        assert not f.exists()

    def test_add_counts(self, tmp_path: Path):
        tree = MemoryProjectTree()
        tree.add_item(tmp_path / "T.svg")
        assert tree.names == {"T.svg"}
        assert tree.add_count == 1


class TestMemoryReferences:
    def test_add_records_copy_local(self, tmp_path: Path):
        refs = MemoryReferences()
        refs.add_reference(tmp_path / "statemap.dll")
        assert refs.reference_names() == ["statemap"]
        assert refs.added[0][1] is True

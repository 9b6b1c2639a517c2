"""Tests for Transaction: guaranteed Begin/Finish pairing around work."""

from __future__ import annotations

import asyncio
import itertools
import logging

import pytest

from tasktrace.config import TraceConfig
from tasktrace.errors import ConfigurationError
from tasktrace.events import Outcome, Phase
from tasktrace.sinks import MemorySink
from tasktrace.task import Task
from tasktrace.transaction import Transaction, run_transaction


def _clock():
    return itertools.count(1000).__next__


class BrokenSink:
    def emit(self, line: str) -> None:
        raise OSError("disk full")


class TestTransactionIdentity:
    def test_generated_ids_are_distinct(self):
        first, second = Transaction(sink=MemorySink()), Transaction(sink=MemorySink())
        assert first.id == "transaction1"
        assert second.id == "transaction2"

    @pytest.mark.parametrize("bad_id", [7, "", b"t1"])
    def test_invalid_explicit_id_rejected(self, bad_id):
        with pytest.raises(ConfigurationError):
            Transaction(bad_id, sink=MemorySink())

    def test_explicit_id_and_separator(self):
        txn = Transaction("req-9", sink=MemorySink(), config=TraceConfig(separator=" / "))
        assert txn.id == "req-9"
        assert txn.separator == " / "
        assert repr(txn) == "Transaction(id='req-9')"


class TestRun:
    @pytest.mark.asyncio
    async def test_success_emits_begin_then_finish(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink, clock=_clock())

        async def work():
            return 42

        assert await txn.run("step", work) == 42
        assert sink.lines == [
            "[1000] Begin step, transactionId=t1",
            "[1001] Finish step, transactionId=t1",
        ]

    @pytest.mark.asyncio
    async def test_begin_emitted_before_work_runs(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink)
        seen_during_work: list[int] = []

        async def work():
            seen_during_work.append(len(sink.lines))

        await txn.run("step", work)
        assert seen_during_work == [1]

    @pytest.mark.asyncio
    async def test_failure_propagates_unchanged_after_finish(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink)
        boom = KeyError("missing")

        async def work():
            raise boom

        with pytest.raises(KeyError) as exc_info:
            await txn.run("step", work)

        assert exc_info.value is boom
        phases = [e.phase for e in sink.events]
        assert phases == [Phase.BEGIN, Phase.FINISH]

    @pytest.mark.asyncio
    async def test_outcome_reported_when_enabled(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink, config=TraceConfig(include_outcome=True))

        async def ok():
            return None

        async def fail():
            raise RuntimeError("nope")

        await txn.run("good", ok)
        with pytest.raises(RuntimeError):
            await txn.run("bad", fail)

        finishes = [e for e in sink.events if e.phase is Phase.FINISH]
        assert [(e.qualified_name, e.outcome) for e in finishes] == [
            ("good", Outcome.OK),
            ("bad", Outcome.FAILED),
        ]

    @pytest.mark.asyncio
    async def test_cancelled_work_still_finishes(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink, config=TraceConfig(include_outcome=True))
        started = asyncio.Event()

        async def work():
            started.set()
            await asyncio.sleep(10)

        running = asyncio.create_task(txn.run("slow", work))
        await started.wait()
        running.cancel()
        with pytest.raises(asyncio.CancelledError):
            await running

        assert [e.phase for e in sink.events] == [Phase.BEGIN, Phase.FINISH]
        assert sink.events[-1].outcome is Outcome.CANCELLED

    @pytest.mark.asyncio
    async def test_broken_sink_does_not_affect_work(self, caplog):
        txn = Transaction("t1", sink=BrokenSink())

        async def work():
            return "done"

        with caplog.at_level(logging.WARNING, logger="tasktrace.transaction"):
            assert await txn.run("step", work) == "done"

        warnings = [r for r in caplog.records if r.name == "tasktrace.transaction"]
        assert len(warnings) == 2
        assert all(r.transaction_id == "t1" for r in warnings)
        assert warnings[0].exc_info is not None

    @pytest.mark.asyncio
    async def test_event_build_failure_keeps_work_result(self, caplog):
        """A failing clock loses the events but never the work's result."""

        def broken_clock() -> int:
            raise RuntimeError("clock unavailable")

        sink = MemorySink()
        txn = Transaction("t1", sink=sink, clock=broken_clock)

        async def work():
            return "done"

        with caplog.at_level(logging.WARNING, logger="tasktrace.transaction"):
            assert await txn.run("step", work) == "done"

        assert sink.lines == []
        assert len([r for r in caplog.records if r.name == "tasktrace.transaction"]) == 2

    @pytest.mark.asyncio
    async def test_invalid_event_keeps_work_exception(self):
        """An event that fails validation never replaces the work's own error."""
        txn = Transaction("t1", sink=MemorySink(), clock=lambda: "soon")
        boom = KeyError("original")

        async def work():
            raise boom

        with pytest.raises(KeyError) as exc_info:
            await txn.run("step", work)
        assert exc_info.value is boom


class TestExecute:
    @pytest.mark.asyncio
    async def test_execute_binds_root_task(self):
        sink = MemorySink()
        txn = Transaction("t1", sink=sink)

        async def work(spawn):
            return "root result"

        assert await txn.execute(Task("root", work)) == "root result"
        assert [e.qualified_name for e in sink.events] == ["root", "root"]

    @pytest.mark.asyncio
    async def test_run_transaction_uses_fresh_ids(self):
        sink = MemorySink()

        async def work(spawn):
            return 1

        root = Task("root", work)
        await run_transaction(root, sink=sink)
        await run_transaction(root, sink=sink)

        ids = [e.transaction_id for e in sink.events]
        assert ids == ["transaction1", "transaction1", "transaction2", "transaction2"]

    @pytest.mark.asyncio
    async def test_default_sink_logs_event_lines(self, caplog):
        async def work(spawn):
            return None

        with caplog.at_level(logging.INFO, logger="tasktrace.events"):
            await Transaction("t5").execute(Task("root", work))

        messages = [r.getMessage() for r in caplog.records if r.name == "tasktrace.events"]
        assert len(messages) == 2
        assert messages[0].endswith("] Begin root, transactionId=t5")
        assert messages[1].endswith("] Finish root, transactionId=t5")

# tests/test_scanner.py

from __future__ import annotations

import asyncio

import pytest

from ontask.core.errors import ScanSessionError
from ontask.tasks.aggregator import DocumentAggregator
from ontask.tasks.scanner import TaskScanner, scan_documents
from ontask.tasks.status_filter import compile_filter
from ontask.tasks.task_models import ScanCursor

from .fakes import FakeDocumentStore, StaticSource, checkbox_doc

ALL = compile_filter({".": True, "x": True, "/": True, "!": True, "+": True})


def _scanner(store: FakeDocumentStore, order: list[str]) -> TaskScanner:
    return TaskScanner(store, DocumentAggregator([StaticSource(order)]))


def _keys(tasks) -> list[tuple[str, int]]:
    return [(t.document_id, t.line_number) for t in tasks]


@pytest.mark.asyncio
async def test_page_stops_mid_document_and_resumes() -> None:
    store = FakeDocumentStore({"b.md": checkbox_doc(*" " * 5), "a.md": checkbox_doc(*" " * 5)})
    scanner = _scanner(store, ["b.md", "a.md"])
    await scanner.initialize_scan()

    first = await scanner.fetch_next_batch(3, ALL)
    assert _keys(first.tasks) == [("b.md", 1), ("b.md", 2), ("b.md", 3)]
    assert first.has_more is True
    assert scanner.cursor == ScanCursor(0, 3)
    assert store.reads == ["b.md"]

    second = await scanner.fetch_next_batch(10, ALL)
    assert len(second.tasks) == 7
    assert _keys(second.tasks)[:2] == [("b.md", 4), ("b.md", 5)]
    assert _keys(second.tasks)[2:] == [("a.md", i) for i in range(1, 6)]
    assert second.has_more is False


@pytest.mark.asyncio
async def test_stops_reading_once_target_is_reached() -> None:
    docs = {f"f{i}.md": checkbox_doc(" ", " ", "x") for i in range(4, 0, -1)}
    store = FakeDocumentStore(docs)
    scanner = _scanner(store, ["f4.md", "f3.md", "f2.md", "f1.md"])
    await scanner.initialize_scan()

    batch = await scanner.fetch_next_batch(3, compile_filter({" ": True, "x": True}))

    assert len(batch.tasks) == 3
    assert store.reads == ["f4.md"]
    # whole document consumed exactly at the target: next fetch starts at the next document
    assert scanner.cursor == ScanCursor(1, 0)
    assert batch.has_more is True


@pytest.mark.asyncio
async def test_target_reached_in_second_document() -> None:
    store = FakeDocumentStore({"b.md": "- [ ] Task 1", "a.md": "- [ ] Task 2\n- [ ] Task 3\n- [ ] Task 4"})
    scanner = _scanner(store, ["b.md", "a.md"])
    await scanner.initialize_scan()

    batch = await scanner.fetch_next_batch(2, ALL)

    assert [t.raw_line for t in batch.tasks] == ["- [ ] Task 1", "- [ ] Task 2"]
    assert scanner.cursor == ScanCursor(1, 1)
    assert batch.has_more is True


@pytest.mark.asyncio
async def test_repeated_batches_equal_one_unbounded_scan() -> None:
    docs = {
        "d5.md": checkbox_doc(" ", "x", "?", "/"),
        "d4.md": "no tasks here",
        "d3.md": checkbox_doc("!", "+", " ", " ", "x", "-"),
        "d2.md": "",
        "d1.md": checkbox_doc("x"),
    }
    order = ["d5.md", "d4.md", "d3.md", "d2.md", "d1.md"]

    full_scanner = _scanner(FakeDocumentStore(docs), order)
    await full_scanner.initialize_scan()
    full = await full_scanner.fetch_next_batch(1000, ALL)
    assert full.has_more is False

    for page in (1, 2, 3, 4, 7):
        scanner = _scanner(FakeDocumentStore(docs), order)
        await scanner.initialize_scan()
        collected = []
        for _ in range(100):
            batch = await scanner.fetch_next_batch(page, ALL)
            assert len(batch.tasks) <= page
            if len(batch.tasks) < page:
                assert batch.has_more is False
            collected.extend(batch.tasks)
            if not batch.has_more:
                break
        assert collected == list(full.tasks), f"page={page}"


@pytest.mark.asyncio
async def test_two_sessions_produce_identical_batches() -> None:
    docs = {"b.md": checkbox_doc(*"x/!x"), "a.md": checkbox_doc(*"+ x")}

    async def run() -> list[tuple]:
        scanner = _scanner(FakeDocumentStore(docs), ["b.md", "a.md"])
        await scanner.initialize_scan()
        out = []
        while True:
            batch = await scanner.fetch_next_batch(3, ALL)
            out.append(batch.tasks)
            if not batch.has_more:
                return out

    assert await run() == await run()


@pytest.mark.asyncio
async def test_unreadable_document_is_skipped() -> None:
    # Z-A by file name: c.md, b.md (unreadable), a.md, 0-gone.md (missing)
    store = FakeDocumentStore(
        {"c.md": checkbox_doc("x", "x"), "b.md": checkbox_doc("x"), "a.md": checkbox_doc("x")},
        broken={"b.md"},
    )
    scanner = _scanner(store, ["0-gone.md", "a.md", "b.md", "c.md"])
    await scanner.initialize_scan()
    assert scanner.document_ids == ("c.md", "b.md", "a.md", "0-gone.md")

    batch = await scanner.fetch_next_batch(50, ALL)

    assert [t.document_id for t in batch.tasks] == ["c.md", "c.md", "a.md"]
    assert batch.has_more is False
    assert store.reads == ["c.md", "b.md", "a.md", "0-gone.md"]


@pytest.mark.asyncio
async def test_resume_after_failed_document_starts_at_zero() -> None:
    store = FakeDocumentStore({"c.md": checkbox_doc("x", "x", "x"), "a.md": checkbox_doc("x", "x")}, broken=set())
    scanner = _scanner(store, ["c.md", "b.md", "a.md"])
    await scanner.initialize_scan()

    first = await scanner.fetch_next_batch(2, ALL)
    assert scanner.cursor == ScanCursor(0, 2)

    second = await scanner.fetch_next_batch(3, ALL)
    assert _keys(second.tasks) == [("c.md", 3), ("a.md", 1), ("a.md", 2)]
    assert second.has_more is False
    assert len(first.tasks) == 2


@pytest.mark.asyncio
async def test_empty_filter_yields_empty_batches() -> None:
    store = FakeDocumentStore({"a.md": checkbox_doc(" ", "x")})
    scanner = _scanner(store, ["a.md"])
    await scanner.initialize_scan()

    batch = await scanner.fetch_next_batch(5, compile_filter({}))
    assert batch.tasks == ()
    assert batch.has_more is False


@pytest.mark.asyncio
async def test_zero_target_reads_nothing() -> None:
    store = FakeDocumentStore({"a.md": checkbox_doc(" ")})
    scanner = _scanner(store, ["a.md"])
    await scanner.initialize_scan()

    batch = await scanner.fetch_next_batch(0, ALL)
    assert batch.tasks == ()
    assert batch.has_more is True
    assert store.reads == []


@pytest.mark.asyncio
async def test_fetch_after_reset_is_a_contract_violation() -> None:
    store = FakeDocumentStore({"a.md": checkbox_doc(" ")})
    scanner = _scanner(store, ["a.md"])

    with pytest.raises(ScanSessionError):
        await scanner.fetch_next_batch(1, ALL)

    await scanner.initialize_scan()
    scanner.reset_scan()
    assert scanner.document_ids == ()
    assert scanner.cursor == ScanCursor(0, 0)

    with pytest.raises(ScanSessionError):
        await scanner.fetch_next_batch(1, ALL)
    assert store.reads == []


@pytest.mark.asyncio
async def test_initialize_rebuilds_list_and_rewinds_cursor() -> None:
    source = StaticSource(["b.md", "a.md"])
    store = FakeDocumentStore({"b.md": checkbox_doc("x", "x"), "a.md": checkbox_doc("x"), "c.md": checkbox_doc("x")})
    scanner = TaskScanner(store, DocumentAggregator([source]))
    await scanner.initialize_scan()
    await scanner.fetch_next_batch(1, ALL)
    assert scanner.cursor == ScanCursor(0, 1)

    # list is fixed for the session even if the origin changes
    source.ids.append("c.md")
    rest = await scanner.fetch_next_batch(10, ALL)
    assert [t.document_id for t in rest.tasks] == ["b.md", "a.md"]

    await scanner.initialize_scan()
    assert scanner.cursor == ScanCursor(0, 0)
    assert scanner.document_ids == ("c.md", "b.md", "a.md")


class _SlowStore(FakeDocumentStore):
    def __init__(self, docs: dict[str, str]) -> None:
        super().__init__(docs)
        self.gate = asyncio.Event()

    async def read_document(self, document_id: str) -> str:
        await self.gate.wait()
        return await super().read_document(document_id)


@pytest.mark.asyncio
async def test_overlapping_fetch_is_rejected() -> None:
    store = _SlowStore({"a.md": checkbox_doc("x", "x")})
    scanner = _scanner(store, ["a.md"])
    await scanner.initialize_scan()

    running = asyncio.create_task(scanner.fetch_next_batch(1, ALL))
    await asyncio.sleep(0)

    with pytest.raises(ScanSessionError):
        await scanner.fetch_next_batch(1, ALL)
    with pytest.raises(ScanSessionError):
        scanner.reset_scan()

    store.gate.set()
    batch = await running
    assert len(batch.tasks) == 1


@pytest.mark.asyncio
async def test_scan_documents_is_pure() -> None:
    docs = {"a.md": checkbox_doc("x", "x", "x")}
    store = FakeDocumentStore(docs)
    cursor = ScanCursor(0, 1)

    one = await scan_documents(["a.md"], cursor, 1, ALL, store.read_document)
    two = await scan_documents(["a.md"], cursor, 1, ALL, store.read_document)

    assert one == two
    assert one.cursor == ScanCursor(0, 2)
    assert cursor == ScanCursor(0, 1)

"""Tests for streaming reconstruction of dashboard documents."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest

from core.jsonrender.codec import encode_dashboard
from core.jsonrender.errors import DashboardError, SchemaVersionMismatch, SourceIOError, StreamDecodeFailure
from core.jsonrender.examples import EXAMPLE_DASHBOARD, EXAMPLE_DOCUMENT
from core.jsonrender.schema import Dashboard
from core.jsonrender.streaming import DecoderState, JsonPrefixScanner, StreamingDecoder, reconstruct
from core.jsonrender.validator import validate_dashboard

pytestmark = pytest.mark.unit

TRUNCATED_METRIC = '{"version":1,"layout":[{"component":"metric-card","props":{"title":"R'
METRIC_REST = 'evenue","value":1000}}]}'


class Recorder:
    """Collects decoder callbacks."""

    def __init__(self) -> None:
        self.published: list[Dashboard] = []
        self.completed: list[Dashboard] = []
        self.errors: list[DashboardError] = []

    def decoder(self) -> StreamingDecoder:
        return StreamingDecoder(
            on_publish=self.published.append,
            on_complete=self.completed.append,
            on_error=self.errors.append,
        )


async def _chunks(parts: Iterable[Any]) -> AsyncIterator[Any]:
    for part in parts:
        await asyncio.sleep(0)
        yield part


def _collect(decoder: StreamingDecoder, parts: Iterable[Any]) -> list[Dashboard]:
    async def run() -> list[Dashboard]:
        return [dashboard async for dashboard in decoder.publications(_chunks(parts))]

    return asyncio.run(run())


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"a": [1, {"b": "x', ['{"a": [1, {"b": "x"}]}', '{"a": [1, {}]}']),
        ('{"a": 12', ["{}"]),
        ('{"a": 1, "b', ['{"a": 1}']),
        ('{"a": "x\\u00', ['{"a": "x"}', "{}"]),
        ('{"a": "x\\', ['{"a": "x"}', "{}"]),
        ('{"a": tr', ["{}"]),
        ('{"a": true', ['{"a": true}']),
        ('{"a": [], "b": null', ['{"a": [], "b": null}']),
        ('```json\n{"a": 1}\n```', ['{"a": 1}']),
        ("Here you go:", []),
        ('{"a": x', []),
    ],
)
def test_scanner_candidates(text: str, expected: list[str]) -> None:
    scanner = JsonPrefixScanner()
    scanner.feed(text)

    assert scanner.candidates() == expected


def test_scanner_tracks_depth_and_completion() -> None:
    scanner = JsonPrefixScanner()
    scanner.feed('{"a": [{')
    assert scanner.depth == 3
    assert not scanner.complete

    scanner.feed("}]}")
    assert scanner.complete
    assert scanner.depth == 0


def test_scanner_joins_numbers_split_across_feeds() -> None:
    scanner = JsonPrefixScanner()
    scanner.feed('{"a": 1')
    scanner.feed("2")
    scanner.feed("5}")

    assert scanner.complete
    assert scanner.text == '{"a": 125}'
    assert scanner.candidates() == ['{"a": 125}']

    scanner.feed("\n")
    assert scanner.text == '{"a": 125}\n'


def test_every_candidate_parses_as_json() -> None:
    """Whatever prefix is scanned, offered candidates are well-formed JSON."""

    text = json.dumps(EXAMPLE_DOCUMENT)
    scanner = JsonPrefixScanner()
    for char in text:
        scanner.feed(char)
        for candidate in scanner.candidates():
            json.loads(candidate)


def test_reconstruct_returns_none_for_truncated_required_prop() -> None:
    assert reconstruct(TRUNCATED_METRIC) is None


def test_reconstruct_closes_deeply_nested_open_string() -> None:
    depth = 12
    text = '{"version":1,"layout":['
    text += '{"component":"card","props":{},"children":[' * depth
    text += '{"component":"text-block","props":{"content":"Hel'

    dashboard = reconstruct(text)

    assert dashboard is not None
    node = dashboard.layout[0]
    for _ in range(depth - 1):
        assert node.kind == "card"
        node = node.children[0]
    assert node.children[0].kind == "text-block"
    assert node.children[0].props.content == "Hel"  # type: ignore[union-attr]


def test_reconstruct_ignores_candidates_without_version() -> None:
    assert reconstruct('{"layout":[]') is None


def test_reconstruct_raises_on_declared_wrong_version() -> None:
    with pytest.raises(SchemaVersionMismatch):
        reconstruct('{"version":2,"layout":[')


def test_truncated_prefix_publishes_only_once_value_arrives() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()

    assert decoder.feed(TRUNCATED_METRIC) is None
    assert recorder.published == []

    published = decoder.feed(METRIC_REST)
    assert published is not None
    assert published.layout[0].props.title == "Revenue"  # type: ignore[union-attr]
    assert decoder.finish() == published
    assert decoder.state is DecoderState.COMPLETED
    assert recorder.completed == [published]


def test_char_by_char_publications_are_valid_and_monotonic() -> None:
    """Streaming one character at a time never publishes an invalid dashboard."""

    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()
    for char in json.dumps(EXAMPLE_DOCUMENT):
        decoder.feed(char)
    decoder.finish()

    assert decoder.state is DecoderState.COMPLETED
    assert len(recorder.published) > 1
    for published in recorder.published:
        assert validate_dashboard(encode_dashboard(published), strict=True).is_valid
    sizes = [len(published.layout) for published in recorder.published]
    assert sizes == sorted(sizes)
    assert recorder.published[-1] == EXAMPLE_DASHBOARD
    assert recorder.completed == [EXAMPLE_DASHBOARD]
    assert recorder.errors == []


def test_identical_reconstructions_are_not_republished(metric_document: dict[str, Any]) -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()

    decoder.feed(json.dumps(metric_document))
    decoder.feed("\n")
    decoder.finish()

    assert len(recorder.published) == 1


def test_wrong_version_fails_the_session() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()

    for char in '{"version":2,"layout":[]}':
        decoder.feed(char)

    assert decoder.state is DecoderState.FAILED
    assert isinstance(decoder.error, SchemaVersionMismatch)
    assert recorder.errors == [decoder.error]
    assert recorder.published == []
    assert decoder.finish() is None
    assert recorder.completed == []


def test_exhausted_stream_keeps_last_published_value() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()
    text = (
        '{"version":1,"layout":[{"component":"text-block","props":{"content":"kept"}},'
        '{"component":"sparkline","props":{}}'
    )

    for char in text:
        decoder.feed(char)
    decoder.finish()

    assert decoder.state is DecoderState.FAILED
    assert isinstance(decoder.error, StreamDecodeFailure)
    assert decoder.value is not None
    assert decoder.value.layout[0].props.content == "kept"  # type: ignore[union-attr]
    assert recorder.completed == []


def test_stream_with_no_document_fails() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()
    decoder.feed("I could not build that dashboard.")

    assert decoder.finish() is None
    assert isinstance(recorder.errors[0], StreamDecodeFailure)


def test_utf8_sequences_split_across_chunks() -> None:
    raw = json.dumps(
        {"version": 1, "layout": [{"component": "text-block", "props": {"content": "Café"}}]},
        ensure_ascii=False,
    ).encode("utf-8")
    split = raw.index("é".encode("utf-8")) + 1
    decoder = StreamingDecoder()
    decoder.begin()

    decoder.feed(raw[:split])
    decoder.feed(raw[split:])
    final = decoder.finish()

    assert final is not None
    assert final.layout[0].props.content == "Café"  # type: ignore[union-attr]


def test_invalid_utf8_is_a_source_error() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()

    decoder.feed(b'{"version":1,"layout":["\xff')

    assert decoder.state is DecoderState.FAILED
    assert isinstance(recorder.errors[0], SourceIOError)


def test_cancel_stops_publication_and_completion(metric_document: dict[str, Any]) -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    decoder.begin()
    decoder.feed(TRUNCATED_METRIC)

    decoder.cancel()

    assert decoder.feed(METRIC_REST) is None
    assert decoder.finish() is None
    assert decoder.state is DecoderState.CANCELLED
    assert recorder.published == []
    assert recorder.completed == []
    assert recorder.errors == []


def test_publications_yield_each_improvement() -> None:
    text = json.dumps(EXAMPLE_DOCUMENT)
    parts = [text[idx : idx + 40] for idx in range(0, len(text), 40)]
    decoder = StreamingDecoder()

    yielded = _collect(decoder, parts)

    assert yielded[-1] == EXAMPLE_DASHBOARD
    assert len(yielded) == len(set(map(id, yielded)))
    assert all(earlier != later for earlier, later in zip(yielded, yielded[1:]))
    assert decoder.state is DecoderState.COMPLETED


def test_cancelling_mid_stream_is_silent() -> None:
    text = json.dumps(EXAMPLE_DOCUMENT)
    parts = [text[idx : idx + 20] for idx in range(0, len(text), 20)]
    recorder = Recorder()
    decoder = recorder.decoder()

    async def run() -> list[Dashboard]:
        seen: list[Dashboard] = []
        async for dashboard in decoder.publications(_chunks(parts)):
            seen.append(dashboard)
            decoder.cancel()
        return seen

    seen = asyncio.run(run())

    assert len(seen) == 1
    assert recorder.published == seen
    assert recorder.completed == []
    assert decoder.state is DecoderState.CANCELLED


def test_cancelling_closes_the_source() -> None:
    text = json.dumps(EXAMPLE_DOCUMENT)
    closed: list[bool] = []
    decoder = StreamingDecoder()

    async def source() -> AsyncIterator[str]:
        try:
            for idx in range(0, len(text), 20):
                yield text[idx : idx + 20]
        finally:
            closed.append(True)

    async def run() -> bool:
        async for _ in decoder.publications(source()):
            decoder.cancel()
        return bool(closed)

    assert asyncio.run(run()) is True
    assert decoder.state is DecoderState.CANCELLED


def test_consumer_breaking_early_closes_the_source(metric_document: dict[str, Any]) -> None:
    text = json.dumps(metric_document)
    closed: list[bool] = []
    decoder = StreamingDecoder()

    async def source() -> AsyncIterator[str]:
        try:
            yield text
            yield " "
        finally:
            closed.append(True)

    async def run() -> bool:
        publications = decoder.publications(source())
        async for _ in publications:
            break
        await publications.aclose()
        return bool(closed)

    assert asyncio.run(run()) is True
    assert decoder.state is DecoderState.CANCELLED


def test_source_failure_becomes_source_io_error() -> None:
    recorder = Recorder()
    decoder = recorder.decoder()

    async def failing() -> AsyncIterator[str]:
        yield '{"version":1,"lay'
        raise ConnectionResetError("peer went away")

    async def run() -> list[Dashboard]:
        return [dashboard async for dashboard in decoder.publications(failing())]

    assert asyncio.run(run()) == []
    assert decoder.state is DecoderState.FAILED
    assert isinstance(decoder.error, SourceIOError)
    assert "peer went away" in str(decoder.error)
    assert recorder.errors == [decoder.error]


def test_start_streaming_completes_once(metric_document: dict[str, Any]) -> None:
    recorder = Recorder()
    decoder = recorder.decoder()
    text = json.dumps(metric_document)

    async def run() -> Dashboard | None:
        task = decoder.start_streaming(_chunks(text[idx : idx + 7] for idx in range(0, len(text), 7)))
        return await task

    final = asyncio.run(run())

    assert final is not None
    assert final.layout[0].kind == "metric-card"
    assert recorder.completed == [final]


def test_sessions_do_not_share_state(metric_document: dict[str, Any]) -> None:
    decoder = StreamingDecoder()
    decoder.begin()
    decoder.feed(json.dumps(metric_document))
    decoder.finish()

    decoder.begin()

    assert decoder.state is DecoderState.STREAMING
    assert decoder.value is None
    assert decoder.feed(TRUNCATED_METRIC) is None

"""Incremental reconstruction of dashboards from a streamed JSON document.

A text generator emits one JSON document a few characters at a time. The
decoder here keeps publishing the most complete *valid* dashboard that the
text seen so far supports:

- `JsonPrefixScanner` tokenizes the text as it arrives, keeping an explicit
  stack of open objects/arrays. At every point where the prefix ends on a
  complete value (or just after an opening bracket) it records a checkpoint
  together with the exact closing sequence for the open containers. When the
  text currently ends inside a value string it can also close that string.
- `reconstruct` turns those closure candidates into JSON, least aggressive
  first, and returns the first candidate that validates strictly.
- `StreamingDecoder` drives a session (`IDLE -> STREAMING -> COMPLETED |
  FAILED | CANCELLED`) and reports through callbacks.
"""

from __future__ import annotations

import asyncio
import codecs
import enum
import json
import logging
import re
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any, Final, Literal

from .catalog import DEFAULT_REGISTRY, ComponentRegistry
from .errors import DashboardError, InvalidDocument, SchemaVersionMismatch, SourceIOError, StreamDecodeFailure
from .schema import SCHEMA_VERSION, Dashboard
from .validator import validate_dashboard

logger = logging.getLogger("ledgerboard.streaming")

_NUMBER: Final = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_NUMBER_CHARS: Final = frozenset("0123456789+-.eE")
_WHITESPACE: Final = frozenset(" \t\r\n")
_SIMPLE_ESCAPES: Final = frozenset('"\\/bfnrt')
_HEX: Final = frozenset("0123456789abcdefABCDEF")
_LITERALS: Final[dict[str, str]] = {"t": "true", "f": "false", "n": "null"}

FrameState = Literal["key_or_end", "key", "colon", "value", "value_or_end", "comma_or_end"]


@dataclass(slots=True)
class _Frame:
    """An open container on the scanner stack."""

    closer: str
    state: FrameState


class JsonPrefixScanner:
    """Incremental tokenizer that knows how to close a truncated JSON document.

    Text before the first `{` is ignored (so a leading markdown fence does not
    matter), as is anything after the top-level object closes. A character
    that cannot continue a JSON document marks the scanner broken; a broken
    scanner offers no candidates.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._pending: list[str] = []
        self._length = 0
        self._start: int | None = None
        self._stack: list[_Frame] = []
        self._complete = False
        self._broken = False

        self._in_string = False
        self._string_is_key = False
        self._escape_start: int | None = None
        self._unicode_remaining = 0
        self._number_chars: list[str] | None = None
        self._literal: str | None = None
        self._literal_seen = ""

        self._checkpoint: tuple[int, str] | None = None

    @property
    def text(self) -> str:
        """All text fed so far."""

        if self._pending:
            self._buffer += "".join(self._pending)
            self._pending.clear()
        return self._buffer

    @property
    def started(self) -> bool:
        return self._start is not None

    @property
    def complete(self) -> bool:
        """Whether the top-level object has been closed."""

        return self._complete

    @property
    def broken(self) -> bool:
        return self._broken

    @property
    def depth(self) -> int:
        return len(self._stack)

    def feed(self, chunk: str) -> None:
        """Scan another piece of text."""

        offset = self._length
        self._pending.append(chunk)
        self._length += len(chunk)
        for idx, char in enumerate(chunk):
            if self._broken or self._complete:
                return
            self._step(char, offset + idx)

    def candidates(self) -> list[str]:
        """Return closure candidates for the current prefix, least aggressive first.

        A complete document yields exactly itself. Otherwise the list holds the
        prefix with the open value string closed (when the text ends inside
        one), followed by the prefix cut back to the last checkpoint with the
        exact closing sequence appended.
        """

        if self._broken or self._start is None or self._checkpoint is None:
            return []
        text = self.text
        if self._complete:
            return [text[self._start : self._checkpoint[0]]]

        found: list[str] = []
        if self._in_string and not self._string_is_key:
            cut = self._length if self._escape_start is None else self._escape_start
            found.append(text[self._start : cut] + '"' + self._closers())
        end, closers = self._checkpoint
        checkpoint = text[self._start : end] + closers
        if checkpoint not in found:
            found.append(checkpoint)
        return found

    def _step(self, char: str, index: int) -> None:
        if self._start is None:
            if char == "{":
                self._start = index
                self._open("}", "key_or_end", index)
            return

        if self._in_string:
            self._step_string(char, index)
            return

        if self._number_chars is not None:
            if char in _NUMBER_CHARS:
                self._number_chars.append(char)
                return
            number = "".join(self._number_chars)
            self._number_chars = None
            if not _NUMBER.fullmatch(number):
                self._broken = True
                return
            self._value_done(index)

        if self._literal is not None:
            self._literal_seen += char
            if not self._literal.startswith(self._literal_seen):
                self._broken = True
            elif self._literal_seen == self._literal:
                self._literal = None
                self._value_done(index + 1)
            return

        if char in _WHITESPACE:
            return

        frame = self._stack[-1]
        if frame.state in ("value", "value_or_end"):
            self._step_value(char, index, frame)
        elif frame.state in ("key_or_end", "key"):
            if char == '"':
                self._begin_string(is_key=True)
            elif char == "}" and frame.state == "key_or_end":
                self._close(index)
            else:
                self._broken = True
        elif frame.state == "colon":
            if char == ":":
                frame.state = "value"
            else:
                self._broken = True
        elif char == ",":
            frame.state = "key" if frame.closer == "}" else "value"
        elif char == frame.closer:
            self._close(index)
        else:
            self._broken = True

    def _step_value(self, char: str, index: int, frame: _Frame) -> None:
        if char == "]" and frame.state == "value_or_end":
            self._close(index)
        elif char == '"':
            self._begin_string(is_key=False)
        elif char == "{":
            self._open("}", "key_or_end", index)
        elif char == "[":
            self._open("]", "value_or_end", index)
        elif char == "-" or char in "0123456789":
            self._number_chars = [char]
        elif char in _LITERALS:
            self._literal = _LITERALS[char]
            self._literal_seen = char
        else:
            self._broken = True

    def _step_string(self, char: str, index: int) -> None:
        if self._unicode_remaining:
            if char not in _HEX:
                self._broken = True
                return
            self._unicode_remaining -= 1
            if not self._unicode_remaining:
                self._escape_start = None
        elif self._escape_start is not None:
            if char == "u":
                self._unicode_remaining = 4
            elif char in _SIMPLE_ESCAPES:
                self._escape_start = None
            else:
                self._broken = True
        elif char == "\\":
            self._escape_start = index
        elif char == '"':
            self._in_string = False
            if self._string_is_key:
                self._stack[-1].state = "colon"
            else:
                self._value_done(index + 1)
        elif ord(char) < 0x20:
            self._broken = True

    def _begin_string(self, *, is_key: bool) -> None:
        self._in_string = True
        self._string_is_key = is_key

    def _open(self, closer: str, state: FrameState, index: int) -> None:
        self._stack.append(_Frame(closer=closer, state=state))
        self._checkpoint = (index + 1, self._closers())

    def _close(self, index: int) -> None:
        self._stack.pop()
        self._value_done(index + 1)

    def _value_done(self, end: int) -> None:
        if not self._stack:
            self._complete = True
        else:
            self._stack[-1].state = "comma_or_end"
        self._checkpoint = (end, self._closers())

    def _closers(self) -> str:
        return "".join(frame.closer for frame in reversed(self._stack))


def reconstruct(
    source: str | JsonPrefixScanner,
    registry: ComponentRegistry | None = None,
) -> Dashboard | None:
    """Return the most complete valid dashboard a (possibly truncated) buffer supports.

    Candidates are tried in order: the complete document, the document with its
    open string closed, then the last checkpoint with exact closers. The first
    candidate that parses and validates strictly wins.

    Args:
        source: Buffer text, or a scanner that has already consumed it.
        registry: Catalog to validate against; the default catalog when None.

    Returns:
        The reconstructed dashboard, or None when no candidate validates yet.

    Raises:
        SchemaVersionMismatch: When a candidate declares a version other than 1.
    """

    if isinstance(source, str):
        scanner = JsonPrefixScanner()
        scanner.feed(source)
    else:
        scanner = source

    for candidate in scanner.candidates():
        try:
            payload: Any = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict) or "version" not in payload:
            continue
        version = payload["version"]
        if isinstance(version, bool) or version != SCHEMA_VERSION:
            raise SchemaVersionMismatch(version)
        try:
            result = validate_dashboard(payload, registry if registry is not None else DEFAULT_REGISTRY, strict=True)
        except InvalidDocument:
            continue
        if result.is_valid:
            return result.dashboard
    return None


class DecoderState(enum.Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES: Final = frozenset({DecoderState.COMPLETED, DecoderState.FAILED, DecoderState.CANCELLED})

PublishHandler = Callable[[Dashboard], None]
ErrorHandler = Callable[[DashboardError], None]
Chunk = bytes | str


class StreamingDecoder:
    """One streaming session per instance; sessions share no state.

    Args:
        on_publish: Called with each newly published dashboard.
        on_complete: Called exactly once with the final dashboard.
        on_error: Called with the failure for FAILED sessions.
        registry: Catalog to validate against; the default catalog when None.
    """

    def __init__(
        self,
        *,
        on_publish: PublishHandler | None = None,
        on_complete: PublishHandler | None = None,
        on_error: ErrorHandler | None = None,
        registry: ComponentRegistry | None = None,
    ) -> None:
        self.on_publish = on_publish
        self.on_complete = on_complete
        self.on_error = on_error
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.state = DecoderState.IDLE
        self.value: Dashboard | None = None
        self.error: DashboardError | None = None
        self._scanner = JsonPrefixScanner()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def reset(self) -> None:
        """Return to IDLE, discarding the buffer and the published value."""

        self.state = DecoderState.IDLE
        self.value = None
        self.error = None
        self._scanner = JsonPrefixScanner()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._cancelled = False

    def begin(self) -> None:
        """Start a fresh session."""

        self.reset()
        self.state = DecoderState.STREAMING

    def cancel(self) -> None:
        """Stop the session; nothing is published or completed afterwards."""

        self._cancelled = True
        if self.state in (DecoderState.IDLE, DecoderState.STREAMING):
            self.state = DecoderState.CANCELLED
            logger.info("Dashboard stream cancelled")

    def feed(self, chunk: Chunk) -> Dashboard | None:
        """Consume one chunk and publish if the buffer now reconstructs.

        Returns:
            The newly published dashboard, or None when nothing was published.
        """

        if self.state is not DecoderState.STREAMING:
            return None
        if isinstance(chunk, bytes):
            try:
                text = self._decoder.decode(chunk)
            except UnicodeDecodeError as exc:
                self._fail(SourceIOError(f"Stream is not valid UTF-8: {exc}"))
                return None
        else:
            text = chunk
        if not text:
            return None
        self._scanner.feed(text)
        return self._attempt()

    def finish(self) -> Dashboard | None:
        """Handle end of input: complete with a valid dashboard or fail.

        Returns:
            The final dashboard, or None when the session did not complete.
        """

        if self.state is not DecoderState.STREAMING:
            return None
        try:
            tail = self._decoder.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            self._fail(SourceIOError(f"Stream ended inside a UTF-8 sequence: {exc}"))
            return None
        if tail:
            self._scanner.feed(tail)
        self._attempt()
        if self.state is not DecoderState.STREAMING:
            return None

        try:
            final = reconstruct(self._scanner, self.registry)
        except SchemaVersionMismatch as exc:
            self._fail(exc)
            return None
        if final is None:
            self._fail(StreamDecodeFailure("Stream ended without a valid dashboard document."))
            return None
        if self._cancelled:
            return None
        self.state = DecoderState.COMPLETED
        self.value = final
        logger.info("Dashboard stream completed with %d top-level nodes", len(final.layout))
        if self.on_complete is not None:
            self.on_complete(final)
        return final

    async def publications(self, source: AsyncIterable[Chunk]) -> AsyncIterator[Dashboard]:
        """Drain `source`, yielding each published dashboard.

        The cancellation flag is checked between chunk reads and before every
        yield. Source failures end the session as FAILED (reported through
        `on_error`) rather than raising into the consumer.
        """

        self.begin()
        last: Dashboard | None = None
        iterator = source.__aiter__()
        try:
            while not self._cancelled:
                try:
                    chunk = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except Exception as exc:
                    self._fail(SourceIOError(f"Stream source failed: {exc}"))
                    logger.debug("Stream source failure", exc_info=exc)
                    return
                published = self.feed(chunk)
                if published is not None and not self._cancelled:
                    last = published
                    yield published
                if self.state is not DecoderState.STREAMING:
                    return
            if self._cancelled:
                return
            final = self.finish()
            if final is not None and final != last and not self._cancelled:
                yield final
        finally:
            if self.state is DecoderState.STREAMING:
                self.cancel()
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    def start_streaming(self, source: AsyncIterable[Chunk]) -> asyncio.Task[Dashboard | None]:
        """Run a session in a background task; results arrive through callbacks.

        Must be called from a running event loop.
        """

        async def drain() -> Dashboard | None:
            async for _ in self.publications(source):
                pass
            return self.value if self.state is DecoderState.COMPLETED else None

        return asyncio.get_running_loop().create_task(drain())

    def _attempt(self) -> Dashboard | None:
        try:
            candidate = reconstruct(self._scanner, self.registry)
        except SchemaVersionMismatch as exc:
            self._fail(exc)
            return None
        if candidate is None or self._cancelled or candidate == self.value:
            return None
        self.value = candidate
        logger.debug("Published dashboard with %d top-level nodes", len(candidate.layout))
        if self.on_publish is not None:
            self.on_publish(candidate)
        return candidate

    def _fail(self, error: DashboardError) -> None:
        self.state = DecoderState.FAILED
        self.error = error
        logger.warning("Dashboard stream failed: %s", error)
        if self.on_error is not None:
            self.on_error(error)

"""Streaming URL rewriting over line-aligned batches.

:class:`UrlRewriteStream` accepts text (or bytes in a single encoding) in
chunks of any size. Each chunk is appended to a pending buffer; everything up
to and including the last line boundary in the buffer is released as one batch
and rewritten, while the trailing partial line stays pending. ``finish()``
releases whatever is left. Because batches always end on a line boundary, a
URL contained in one line is never split across two rewrite calls.

Rewritten batches are pushed to the output channel in input order. Rewrite
failures never raise out of ``accept``/``finish``; they are reported on a
separate error channel and the failed batch produces no output.

Usage::

    stream = UrlRewriteStream(lambda url: "https://cdn.example.com/" + url)
    stream.on_data(sink.write)
    stream.on_error(log_error)
    for chunk in chunks:
        stream.accept(chunk)
    stream.finish()
"""

from __future__ import annotations

import codecs
import inspect
import logging
from collections import deque
from collections.abc import Callable
from enum import Enum
from typing import Any

from splurge_url_stream.constants import CANONICAL_NEWLINE, DEFAULT_ENCODING, DEFAULT_ERRORS
from splurge_url_stream.exceptions import (
    SplurgeUrlStreamRewriteError,
    SplurgeUrlStreamStateError,
    SplurgeUrlStreamTypeError,
    SplurgeUrlStreamUnicodeError,
)
from splurge_url_stream.url_rewriter import CssUrlRewriter, Replacer, UrlRewriter

logger = logging.getLogger(__name__)

DataCallback = Callable[[str], Any]
ErrorCallback = Callable[[SplurgeUrlStreamRewriteError], Any]


class StreamState(Enum):
    OPEN = "open"
    ACCEPTING = "accepting"
    FLUSHING = "flushing"
    CLOSED = "closed"


def _accepts_one_positional(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins expose no signature; trust callable() for those.
        return True
    try:
        signature.bind("url")
    except TypeError:
        return False
    return True


class UrlRewriteStream:
    """Rewrite URLs in a chunked text stream, one line-aligned batch at a time.

    Args:
        replacer: Function called with each URL found; returns its replacement.
        rewriter_factory: Zero-argument callable returning a fresh rewriter
            for each batch. Defaults to :class:`CssUrlRewriter`.
        encoding: Encoding used to decode ``bytes`` chunks.
        decode_errors: Decoder error handler (``"strict"``, ``"replace"``, ...).

    Raises:
        SplurgeUrlStreamTypeError: If ``replacer`` is not a one-argument
            callable or ``rewriter_factory`` is not callable.
    """

    def __init__(
        self,
        replacer: Replacer,
        *,
        rewriter_factory: Callable[[], UrlRewriter] = CssUrlRewriter,
        encoding: str = DEFAULT_ENCODING,
        decode_errors: str = DEFAULT_ERRORS,
    ) -> None:
        if not callable(replacer) or not _accepts_one_positional(replacer):
            raise SplurgeUrlStreamTypeError(
                error_code="invalid-replacer",
                message="replacer must be a function accepting one URL argument",
                details={"replacer": repr(replacer)},
            )
        if not callable(rewriter_factory):
            raise SplurgeUrlStreamTypeError(
                error_code="invalid-rewriter-factory",
                message="rewriter_factory must be callable",
                details={"rewriter_factory": repr(rewriter_factory)},
            )

        self.replacer = replacer
        self.rewriter_factory = rewriter_factory
        self.encoding = encoding
        self.decode_errors = decode_errors

        self._buffer = ""
        self._decoder: codecs.IncrementalDecoder | None = None
        self._state = StreamState.OPEN
        self._data_callbacks: list[DataCallback] = []
        self._error_callbacks: list[ErrorCallback] = []
        self._unread: deque[str] = deque()
        self._errors: list[SplurgeUrlStreamRewriteError] = []
        self._batches_dispatched = 0

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def pending(self) -> str:
        """Text received after the last released line boundary."""
        return self._buffer

    @property
    def errored(self) -> bool:
        return bool(self._errors)

    @property
    def errors(self) -> list[SplurgeUrlStreamRewriteError]:
        return list(self._errors)

    @property
    def batches_dispatched(self) -> int:
        return self._batches_dispatched

    def on_data(self, callback: DataCallback) -> None:
        """Subscribe to rewritten output units.

        Units emitted before the first subscription stay queued for
        :meth:`read`.
        """
        self._data_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        """Subscribe to rewrite failures."""
        self._error_callbacks.append(callback)

    def read(self) -> list[str]:
        """Return and clear the output units queued while nobody subscribed."""
        units = list(self._unread)
        self._unread.clear()
        return units

    def accept(self, chunk: str | bytes | bytearray | memoryview) -> None:
        """Append ``chunk`` and rewrite every complete line now available.

        Returns once the released batch (if any) has been rewritten and
        emitted. Rewrite failures are reported on the error channel instead
        of being raised.

        Raises:
            SplurgeUrlStreamStateError: If the stream was already finished, or
                ``chunk`` is text while a multi-byte sequence is incomplete.
            SplurgeUrlStreamTypeError: If ``chunk`` is not text or bytes.
            SplurgeUrlStreamUnicodeError: If a bytes chunk cannot be decoded.
        """
        if self._state in (StreamState.FLUSHING, StreamState.CLOSED):
            raise SplurgeUrlStreamStateError(
                error_code="stream-finished",
                message="accept() called after finish()",
            )
        self._state = StreamState.ACCEPTING

        self._buffer += self._to_text(chunk)

        last_newline = self._buffer.rfind(CANONICAL_NEWLINE)
        if last_newline == -1:
            return

        ready = self._buffer[: last_newline + 1]
        self._buffer = self._buffer[last_newline + 1 :]
        logger.debug("released batch of %d chars, %d chars pending", len(ready), len(self._buffer))
        self._rewrite(ready)

    def finish(self) -> None:
        """Rewrite whatever remains in the pending buffer and close the stream.

        Raises:
            SplurgeUrlStreamStateError: If called more than once.
            SplurgeUrlStreamUnicodeError: If the decoder holds an incomplete
                multi-byte sequence.
        """
        if self._state in (StreamState.FLUSHING, StreamState.CLOSED):
            raise SplurgeUrlStreamStateError(
                error_code="stream-finished",
                message="finish() called more than once",
            )
        self._state = StreamState.FLUSHING
        try:
            if self._decoder is not None:
                self._buffer += self._decode(b"", final=True)

            if self._buffer:
                remaining = self._buffer
                self._buffer = ""
                self._rewrite(remaining)
        finally:
            self._buffer = ""
            self._state = StreamState.CLOSED

    def _to_text(self, chunk: str | bytes | bytearray | memoryview) -> str:
        if isinstance(chunk, str):
            # Text must not jump ahead of a multi-byte sequence still in the decoder.
            if self._decoder is not None and self._decoder.getstate()[0]:
                raise SplurgeUrlStreamStateError(
                    error_code="partial-sequence-pending",
                    message="text chunk received while a multi-byte sequence is incomplete",
                    details={"pending_bytes": len(self._decoder.getstate()[0])},
                )
            return chunk
        if isinstance(chunk, (bytes, bytearray, memoryview)):
            return self._decode(bytes(chunk))
        raise SplurgeUrlStreamTypeError(
            error_code="invalid-chunk",
            message=f"chunk must be str or bytes, got {type(chunk).__name__}",
        )

    def _decode(self, data: bytes, final: bool = False) -> str:
        if self._decoder is None:
            self._decoder = codecs.getincrementaldecoder(self.encoding)(errors=self.decode_errors)
        try:
            return self._decoder.decode(data, final=final)
        except UnicodeDecodeError as exc:
            raise SplurgeUrlStreamUnicodeError(
                error_code="decoding",
                message=f"cannot decode input as {self.encoding}: {exc.reason}",
                details={"encoding": self.encoding},
                original_exception=exc,
            ) from exc

    def _rewrite(self, text: str) -> None:
        batch_index = self._batches_dispatched
        self._batches_dispatched += 1
        try:
            rewriter = self.rewriter_factory()
            result = rewriter.rewrite(text, self.replacer)
            if not isinstance(result, str):
                raise TypeError(f"rewriter returned {type(result).__name__}, expected str")
        except Exception as exc:
            self._report(
                SplurgeUrlStreamRewriteError(
                    error_code="rewrite-failed",
                    message=str(exc) or type(exc).__name__,
                    details={"batch_index": batch_index, "batch_length": len(text)},
                    original_exception=exc,
                ),
                exc,
            )
            return
        self._emit(result)

    def _emit(self, unit: str) -> None:
        if not self._data_callbacks:
            self._unread.append(unit)
            return
        for callback in self._data_callbacks:
            callback(unit)

    def _report(self, error: SplurgeUrlStreamRewriteError, cause: Exception) -> None:
        error.__cause__ = cause
        self._errors.append(error)
        logger.warning("rewrite failed for batch %s: %s", error.details.get("batch_index"), error.message)
        for callback in self._error_callbacks:
            callback(error)


__all__ = ["StreamState", "UrlRewriteStream"]

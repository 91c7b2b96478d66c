"""Pipeline adapters that drive :class:`UrlRewriteStream`.

The stream itself only knows about ``accept``/``finish`` and its two output
channels. The helpers here own the surrounding read/write loop: iterating
chunks from any iterable, or reading a file in raw byte blocks and writing the
rewritten text through splurge-safe-io's :class:`SafeTextFileWriter`.
Failures from splurge-safe-io are re-raised as ``SplurgeUrlStream*`` errors
naming the path that failed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterable, Iterator
from contextlib import closing, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from splurge_safe_io.exceptions import (
    SplurgeSafeIoError,
    SplurgeSafeIoFileNotFoundError,
    SplurgeSafeIoOSError,
    SplurgeSafeIoPathValidationError,
    SplurgeSafeIoPermissionError,
    SplurgeSafeIoUnicodeError,
    SplurgeSafeIoValueError,
)
from splurge_safe_io.path_validator import PathValidator
from splurge_safe_io.safe_text_file_writer import SafeTextFileWriter

from splurge_url_stream.constants import DEFAULT_BUFFER_SIZE, DEFAULT_ENCODING, MIN_BUFFER_SIZE
from splurge_url_stream.exceptions import (
    SplurgeUrlStreamError,
    SplurgeUrlStreamFileNotFoundError,
    SplurgeUrlStreamOSError,
    SplurgeUrlStreamPathValidationError,
    SplurgeUrlStreamPermissionError,
    SplurgeUrlStreamRewriteError,
    SplurgeUrlStreamUnicodeError,
    SplurgeUrlStreamValueError,
)
from splurge_url_stream.url_rewrite_stream import ErrorCallback, UrlRewriteStream
from splurge_url_stream.url_rewriter import Replacer

logger = logging.getLogger(__name__)

Chunk = str | bytes | bytearray | memoryview

# Most specific first.
_SAFE_IO_ERROR_MAP: tuple[tuple[type[SplurgeSafeIoError], type[SplurgeUrlStreamError]], ...] = (
    (SplurgeSafeIoFileNotFoundError, SplurgeUrlStreamFileNotFoundError),
    (SplurgeSafeIoPermissionError, SplurgeUrlStreamPermissionError),
    (SplurgeSafeIoPathValidationError, SplurgeUrlStreamPathValidationError),
    (SplurgeSafeIoUnicodeError, SplurgeUrlStreamUnicodeError),
    (SplurgeSafeIoValueError, SplurgeUrlStreamValueError),
    (SplurgeSafeIoOSError, SplurgeUrlStreamOSError),
)


class SupportsWrite(Protocol):
    def write(self, text: str) -> Any: ...


@dataclass
class RewriteReport:
    """Summary of a :func:`rewrite_file` run."""

    batches: int = 0
    bytes_read: int = 0
    chars_written: int = 0
    errors: list[SplurgeUrlStreamRewriteError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@contextmanager
def open_url_rewrite_stream(replacer: Replacer, **options: Any) -> Iterator[UrlRewriteStream]:
    """Yield a :class:`UrlRewriteStream` and finish it on normal exit.

    ``options`` are passed to the stream constructor. If the body raises, the
    stream is left unfinished and the exception propagates.
    """
    stream = UrlRewriteStream(replacer, **options)
    yield stream
    stream.finish()


def rewrite_iter(
    chunks: Iterable[Chunk],
    replacer: Replacer,
    *,
    on_error: ErrorCallback | None = None,
    fail_fast: bool = False,
    **options: Any,
) -> Iterator[str]:
    """Rewrite ``chunks`` lazily, yielding each output unit as it is emitted.

    Args:
        chunks: Text or byte chunks of any size.
        replacer: URL mapping function.
        on_error: Optional error channel subscriber.
        fail_fast: Raise the first rewrite error after yielding the units
            produced before it.
        **options: Passed to :class:`UrlRewriteStream`.
    """
    stream = UrlRewriteStream(replacer, **options)
    if on_error is not None:
        stream.on_error(on_error)

    def _drain() -> Iterator[str]:
        yield from stream.read()
        if fail_fast and stream.errored:
            raise stream.errors[0]

    for chunk in chunks:
        stream.accept(chunk)
        yield from _drain()
    stream.finish()
    yield from _drain()


def rewrite_text(text: Chunk, replacer: Replacer, **options: Any) -> str:
    """Rewrite a complete string (or encoded bytes) in one call."""
    return "".join(rewrite_iter([text], replacer, **options))


def _from_safe_io_error(exc: SplurgeSafeIoError, path: Path) -> SplurgeUrlStreamError:
    """Map a splurge-safe-io error raised for ``path`` onto this package's hierarchy."""
    error_type: type[SplurgeUrlStreamError] = SplurgeUrlStreamError
    for safe_io_type, mapped_type in _SAFE_IO_ERROR_MAP:
        if isinstance(exc, safe_io_type):
            error_type = mapped_type
            break
    return error_type(
        error_code=exc.error_code or "general",
        message=exc.message or str(exc),
        details={"path": str(path)},
        original_exception=exc,
    )


def _from_os_error(exc: OSError, path: Path) -> SplurgeUrlStreamOSError:
    details = {"path": str(path)}
    if isinstance(exc, FileNotFoundError):
        return SplurgeUrlStreamFileNotFoundError(
            error_code="file-not-found", message=f"File not found: {path}", details=details, original_exception=exc
        )
    if isinstance(exc, PermissionError):
        return SplurgeUrlStreamPermissionError(
            error_code="permission-denied",
            message=f"Permission denied reading file: {path}",
            details=details,
            original_exception=exc,
        )
    return SplurgeUrlStreamOSError(
        error_code="general",
        message=f"General OS error reading file: {path} : {exc}",
        details=details,
        original_exception=exc,
    )


def _validate_source(src: Path | str) -> Path:
    try:
        return PathValidator.get_validated_path(src, must_exist=True, must_be_file=True, must_be_readable=True)
    except SplurgeSafeIoError as exc:
        raise _from_safe_io_error(exc, Path(src)) from exc


def _read_blocks(path: Path, buffer_size: int, report: RewriteReport) -> Generator[bytes, None, None]:
    # Raw blocks, so the stream sees line endings and multi-byte sequences
    # exactly as stored.
    try:
        with path.open("rb") as fh:
            while raw := fh.read(buffer_size):
                report.bytes_read += len(raw)
                yield raw
    except OSError as exc:
        raise _from_os_error(exc, path) from exc


def rewrite_file_to(
    src: Path | str,
    out: SupportsWrite,
    replacer: Replacer,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    encoding: str = DEFAULT_ENCODING,
    fail_fast: bool = False,
    on_error: ErrorCallback | None = None,
    rewriter_factory: Callable[[], Any] | None = None,
) -> RewriteReport:
    """Stream the file ``src`` through a rewrite stream into ``out``.

    ``out`` is anything with a ``write(str)`` method: ``sys.stdout``, an
    ``io.StringIO`` or a :class:`SafeTextFileWriter`. Units are written as
    emitted, with no newline translation of their own.

    Raises:
        SplurgeUrlStreamFileNotFoundError: If ``src`` does not exist.
        SplurgeUrlStreamPermissionError: If ``src`` is not readable.
        SplurgeUrlStreamPathValidationError: If ``src`` is not a usable file path.
        SplurgeUrlStreamOSError: For other OS level failures reading ``src``.
        SplurgeUrlStreamUnicodeError: If ``src`` cannot be decoded.
        SplurgeUrlStreamRewriteError: On the first rewrite failure when
            ``fail_fast`` is true.
    """
    src_path = _validate_source(src)
    buffer_size = max(buffer_size, MIN_BUFFER_SIZE)
    report = RewriteReport()
    options: dict[str, Any] = {"encoding": encoding}
    if rewriter_factory is not None:
        options["rewriter_factory"] = rewriter_factory

    def _collect(error: SplurgeUrlStreamRewriteError) -> None:
        report.errors.append(error)
        if on_error is not None:
            on_error(error)

    blocks = _read_blocks(src_path, buffer_size, report)
    # Closing the block reader releases the source handle if a write fails.
    with closing(blocks):
        for unit in rewrite_iter(blocks, replacer, on_error=_collect, fail_fast=fail_fast, **options):
            out.write(unit)
            report.batches += 1
            report.chars_written += len(unit)
    return report


def rewrite_file(
    src: Path | str,
    dst: Path | str,
    replacer: Replacer,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    encoding: str = DEFAULT_ENCODING,
    fail_fast: bool = False,
    on_error: ErrorCallback | None = None,
    rewriter_factory: Callable[[], Any] | None = None,
) -> RewriteReport:
    """Rewrite URLs in ``src`` and write the result to ``dst``.

    ``src`` is read in raw blocks of ``buffer_size`` bytes. ``dst`` is written
    through :class:`SafeTextFileWriter` in the same encoding, so ``\\r\\n`` and
    ``\\r`` line endings come out as ``\\n``.

    Errors reading ``src`` carry ``details["path"] == str(src)``; errors
    opening or writing ``dst`` carry the destination path.

    Raises:
        SplurgeUrlStreamFileNotFoundError: If ``src`` does not exist.
        SplurgeUrlStreamPermissionError: If either file cannot be opened.
        SplurgeUrlStreamPathValidationError: If either path fails validation.
        SplurgeUrlStreamOSError: For other OS level failures, e.g. a full disk.
        SplurgeUrlStreamUnicodeError: If ``src`` cannot be decoded or the
            output cannot be encoded.
        SplurgeUrlStreamRewriteError: On the first rewrite failure when
            ``fail_fast`` is true.
    """
    src_path = _validate_source(src)
    dst_path = Path(dst)
    try:
        writer = SafeTextFileWriter(dst_path, encoding=encoding)
    except SplurgeSafeIoError as exc:
        raise _from_safe_io_error(exc, dst_path) from exc

    try:
        report = rewrite_file_to(
            src_path,
            writer,
            replacer,
            buffer_size=buffer_size,
            encoding=encoding,
            fail_fast=fail_fast,
            on_error=on_error,
            rewriter_factory=rewriter_factory,
        )
        writer.flush()
    except SplurgeSafeIoError as exc:
        # Source failures are already mapped; only the writer raises these.
        raise _from_safe_io_error(exc, dst_path) from exc
    finally:
        writer.close()

    logger.info(
        "rewrote %s -> %s: %d batches, %d errors", src_path, dst_path, report.batches, len(report.errors)
    )
    return report


__all__ = [
    "RewriteReport",
    "open_url_rewrite_stream",
    "rewrite_file",
    "rewrite_file_to",
    "rewrite_iter",
    "rewrite_text",
]

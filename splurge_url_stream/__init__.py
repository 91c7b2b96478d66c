"""splurge-url-stream: rewrite URLs in chunked text streams.

Public API:

- :class:`UrlRewriteStream` - line-aligned chunk assembler and rewrite dispatch
- :class:`CssUrlRewriter` - default rewriter for ``url(...)`` and ``@import``
- :func:`rewrite_iter`, :func:`rewrite_text`, :func:`rewrite_file`, :func:`rewrite_file_to` - pipeline helpers
- :func:`open_url_rewrite_stream` - context manager that finishes the stream
"""

__version__ = "2026.0.1"

from splurge_url_stream.exceptions import (
    SplurgeUrlStreamError,
    SplurgeUrlStreamFileNotFoundError,
    SplurgeUrlStreamOSError,
    SplurgeUrlStreamPathValidationError,
    SplurgeUrlStreamPermissionError,
    SplurgeUrlStreamRewriteError,
    SplurgeUrlStreamStateError,
    SplurgeUrlStreamTypeError,
    SplurgeUrlStreamUnicodeError,
    SplurgeUrlStreamValueError,
)
from splurge_url_stream.pipeline import (
    RewriteReport,
    open_url_rewrite_stream,
    rewrite_file,
    rewrite_file_to,
    rewrite_iter,
    rewrite_text,
)
from splurge_url_stream.url_rewrite_stream import StreamState, UrlRewriteStream
from splurge_url_stream.url_rewriter import CssUrlRewriter, UrlRewriter

__all__ = [
    "__version__",
    "CssUrlRewriter",
    "RewriteReport",
    "SplurgeUrlStreamError",
    "SplurgeUrlStreamFileNotFoundError",
    "SplurgeUrlStreamOSError",
    "SplurgeUrlStreamPathValidationError",
    "SplurgeUrlStreamPermissionError",
    "SplurgeUrlStreamRewriteError",
    "SplurgeUrlStreamStateError",
    "SplurgeUrlStreamTypeError",
    "SplurgeUrlStreamUnicodeError",
    "SplurgeUrlStreamValueError",
    "StreamState",
    "UrlRewriteStream",
    "UrlRewriter",
    "open_url_rewrite_stream",
    "rewrite_file",
    "rewrite_file_to",
    "rewrite_iter",
    "rewrite_text",
]

"""Exception hierarchy for splurge-url-stream.

Every exception carries a short machine readable ``error_code``, a human
readable ``message``, an optional ``details`` mapping and, when the error was
mapped from a lower level exception, the ``original_exception``. Mapped errors
are also raised with ``raise ... from exc`` so ``__cause__`` is populated.
"""

from __future__ import annotations

from typing import Any


class SplurgeUrlStreamError(Exception):
    """Base class for all splurge-url-stream errors."""

    def __init__(
        self,
        *,
        error_code: str = "general",
        message: str = "",
        details: dict[str, Any] | None = None,
        original_exception: BaseException | None = None,
    ) -> None:
        super().__init__(message or error_code)
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        if self.message:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}]"


class SplurgeUrlStreamTypeError(SplurgeUrlStreamError):
    """Raised when a replacer, rewriter factory or chunk has an unusable type."""


class SplurgeUrlStreamStateError(SplurgeUrlStreamError):
    """Raised when the stream lifecycle is misused (e.g. accept after finish)."""


class SplurgeUrlStreamRewriteError(SplurgeUrlStreamError):
    """Reported on the error channel when rewriting a batch fails.

    This error is never raised out of :meth:`UrlRewriteStream.accept`; the
    pipeline helpers raise it only when asked to fail fast.
    """


class SplurgeUrlStreamValueError(SplurgeUrlStreamError):
    """Raised for invalid values."""


class SplurgeUrlStreamUnicodeError(SplurgeUrlStreamValueError):
    """Raised when byte chunks cannot be decoded with the stream encoding."""


class SplurgeUrlStreamPathValidationError(SplurgeUrlStreamError):
    """Raised when a file path is rejected (traversal, bad characters, not a file)."""


class SplurgeUrlStreamOSError(SplurgeUrlStreamError):
    """Raised for OS level failures in the file adapter."""


class SplurgeUrlStreamFileNotFoundError(SplurgeUrlStreamOSError):
    """Raised when the source file does not exist."""


class SplurgeUrlStreamPermissionError(SplurgeUrlStreamOSError):
    """Raised when a file cannot be opened due to permissions."""


__all__ = [
    "SplurgeUrlStreamError",
    "SplurgeUrlStreamTypeError",
    "SplurgeUrlStreamStateError",
    "SplurgeUrlStreamRewriteError",
    "SplurgeUrlStreamValueError",
    "SplurgeUrlStreamUnicodeError",
    "SplurgeUrlStreamPathValidationError",
    "SplurgeUrlStreamOSError",
    "SplurgeUrlStreamFileNotFoundError",
    "SplurgeUrlStreamPermissionError",
]

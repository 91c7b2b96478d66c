"""Shared constants for splurge-url-stream.

These values are the defaults used by :class:`UrlRewriteStream`, the pipeline
helpers and the command line tool. They are plain module attributes so callers
can reference them when building their own configuration.
"""

# CANONICAL_NEWLINE is both the line boundary searched for by the chunk
# assembler and the newline SafeTextFileWriter writes. Only its last
# occurrence in the pending buffer decides what is released.
from splurge_safe_io.constants import CANONICAL_NEWLINE, DEFAULT_ENCODING

# Error handler passed to the incremental decoder for byte chunks.
DEFAULT_ERRORS = "strict"

# Raw read size used by the file adapter. The floor is well below
# splurge_safe_io.constants.MIN_BUFFER_SIZE.
DEFAULT_BUFFER_SIZE = 32768
MIN_BUFFER_SIZE = 16

# URL prefixes that the CLI prefix mapping never rewrites.
NON_RELATIVE_PREFIXES = ("/", "#", "data:")

__all__ = [
    "CANONICAL_NEWLINE",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_ENCODING",
    "DEFAULT_ERRORS",
    "MIN_BUFFER_SIZE",
    "NON_RELATIVE_PREFIXES",
]

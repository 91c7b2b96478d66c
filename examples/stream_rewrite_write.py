"""Example: streaming read -> rewrite URLs -> write

This example drives :class:`UrlRewriteStream` by hand: it reads a stylesheet
in small raw blocks, pushes each block into the stream and writes every
rewritten unit into a splurge-safe-io writer buffer as soon as it is emitted.
Rewrite errors are printed as they arrive on the error channel.

The ``rewrite_stylesheet`` function is intentionally small so it's easy to
follow; :func:`splurge_url_stream.rewrite_file` does the same with error
mapping and a report.
"""

from __future__ import annotations

from pathlib import Path

from splurge_safe_io.safe_text_file_writer import open_safe_text_writer

from splurge_url_stream import SplurgeUrlStreamRewriteError, UrlRewriteStream


def to_cdn(url: str) -> str:
    """Point relative URLs at a CDN and leave everything else alone."""
    if url.startswith(("http:", "https:", "data:", "/")):
        return url
    return "https://cdn.example.com/assets/" + url


def rewrite_stylesheet(src: Path | str, dst: Path | str, block_size: int = 64) -> int:
    """Rewrite ``src`` into ``dst``; return the number of units written."""
    written = 0

    def report(error: SplurgeUrlStreamRewriteError) -> None:
        print(f"batch {error.details['batch_index']} dropped: {error.message}")

    with Path(src).open("rb") as in_fh, open_safe_text_writer(dst, encoding="utf-8") as out_buf:
        stream = UrlRewriteStream(to_cdn)

        def write(unit: str) -> None:
            nonlocal written
            out_buf.write(unit)
            written += 1

        stream.on_data(write)
        stream.on_error(report)
        while block := in_fh.read(block_size):
            stream.accept(block)
        stream.finish()
    return written


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Stream/rewrite/write example")
    parser.add_argument("src", help="Source stylesheet")
    parser.add_argument("dst", help="Destination file")
    parser.add_argument("--block-size", type=int, default=64)
    args = parser.parse_args()
    count = rewrite_stylesheet(args.src, args.dst, args.block_size)
    print(f"wrote {count} units to {args.dst}")

"""Property-based checks of the chunk assembly guarantees."""

import hypothesis.strategies as st
from hypothesis import given, settings

from splurge_url_stream import CssUrlRewriter, UrlRewriteStream

_css_text = st.lists(
    st.sampled_from(
        [
            "a{background:url(a.png)}",
            "b{color:red}",
            "url('x y.png')",
            '@import "base.css";',
            "\n",
            "\n\n",
            "é",
            " ",
            "url(",
            ")",
        ]
    ),
    max_size=40,
).map("".join)


def _split(text: str, cuts: list[int]) -> list[str]:
    points = sorted({c % (len(text) + 1) for c in cuts})
    chunks, prev = [], 0
    for p in points:
        chunks.append(text[prev:p])
        prev = p
    chunks.append(text[prev:])
    return chunks


def _run(chunks, replacer, rewriter_factory=CssUrlRewriter):
    stream = UrlRewriteStream(replacer, rewriter_factory=rewriter_factory)
    for chunk in chunks:
        stream.accept(chunk)
    stream.finish()
    return stream.read()


@settings(max_examples=200, deadline=None)
@given(text=_css_text, cuts=st.lists(st.integers(min_value=0, max_value=10_000), max_size=12))
def test_identity_mapping_reproduces_input(text, cuts):
    assert "".join(_run(_split(text, cuts), lambda url: url)) == text


@settings(max_examples=200, deadline=None)
@given(text=_css_text, cuts=st.lists(st.integers(min_value=0, max_value=10_000), max_size=12))
def test_output_independent_of_chunking(text, cuts):
    def replacer(url):
        return "cdn/" + url

    chunked = "".join(_run(_split(text, cuts), replacer))
    assert chunked == CssUrlRewriter().rewrite(text, replacer)


@settings(max_examples=200, deadline=None)
@given(text=_css_text, cuts=st.lists(st.integers(min_value=0, max_value=10_000), max_size=12))
def test_batches_are_line_aligned(text, cuts):
    batches = []

    class Recording:
        def rewrite(self, batch, replacer):
            batches.append(batch)
            return batch

    _run(_split(text, cuts), lambda url: url, rewriter_factory=Recording)

    assert "".join(batches) == text
    # Every batch but the last ends on a boundary, and none is empty.
    for batch in batches[:-1]:
        assert batch.endswith("\n")
    assert all(batches)
    # No line is ever split across two batches.
    lines = text.splitlines(keepends=True)
    batch_lines = [ln for batch in batches for ln in batch.splitlines(keepends=True)]
    assert batch_lines == lines


@settings(max_examples=100, deadline=None)
@given(data=st.binary(max_size=64), size=st.integers(min_value=1, max_value=9))
def test_bytes_identity_with_replace_handler(data, size):
    expected = data.decode("utf-8", errors="replace")
    stream = UrlRewriteStream(lambda url: url, decode_errors="replace")
    for i in range(0, len(data), size):
        stream.accept(data[i : i + size])
    stream.finish()
    assert "".join(stream.read()) == expected

"""Unit tests for core/extract/refs.py"""

from mdblog.core.extract.refs import extract_refs, heading_anchors


def test_extract_links_and_images(parser):
    """Inline links and images are returned in order with their line numbers."""
    md = "See [docs](https://example.com).\n\n![plot](img/plot.png)\n"
    refs = extract_refs(parser.parse(md))
    assert [(r.kind, r.target, r.line) for r in refs] == [
        ("link", "https://example.com", 1),
        ("image", "img/plot.png", 3),
    ]


def test_extract_reference_style_link(parser):
    """Reference-style links resolve to their definition target."""
    md = "Read [the notes][n].\n\n[n]: notes/event-loop.md\n"
    refs = extract_refs(parser.parse(md))
    assert [r.target for r in refs] == ["notes/event-loop.md"]


def test_extract_refs_from_html(parser):
    """<img src> in HTML blocks and inline HTML are picked up."""
    md = '<p align="center"><img src="figs/bz.svg" width="300"></p>\n\nInline <a href="other.md">x</a>.\n'
    refs = extract_refs(parser.parse(md))
    assert ("image", "figs/bz.svg") in [(r.kind, r.target) for r in refs]
    assert ("link", "other.md") in [(r.kind, r.target) for r in refs]


def test_extract_refs_inside_lists(parser):
    """Links nested in list items are found."""
    refs = extract_refs(parser.parse("- [aiomonitor](https://github.com/aio-libs/aiomonitor)\n"))
    assert refs[0].target == "https://github.com/aio-libs/aiomonitor"


def test_code_is_not_scanned_for_refs(parser):
    """Link syntax inside code fences is not a reference."""
    assert extract_refs(parser.parse("```\n[x](missing.md)\n```\n")) == []


def test_heading_anchors(parser):
    """Heading anchors are slugified and repeated headings get numeric suffixes."""
    md = "# Band Structure\n\n## Notes\n\n## Notes\n\n### The `loop.run` call\n"
    assert heading_anchors(parser.parse(md)) == {
        "band-structure", "notes", "notes-1", "the-looprun-call",
    }

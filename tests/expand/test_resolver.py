import asyncio

import pytest

from embex.expand.resolver import Fallback, Outcome, Resolver, SectionKind, strip_anchor_token
from embex.markdown.model import DocMetadata, Heading

from tests.infrastructure import make_store, resolve


def test_full_note():
    store = make_store({"Base.md": "", "Note.md": "hello\n"})
    res = resolve(store, "Note")
    assert res.ok
    assert res.document.path == "Note.md"
    assert res.text == "hello\n"
    assert res.section is SectionKind.FULL
    assert res.fallback is None


def test_unresolved():
    store = make_store({"Base.md": ""})
    res = resolve(store, "NoSuchDoc")
    assert res.outcome is Outcome.UNRESOLVED
    assert res.text is None and res.document is None


def test_non_text_target_is_not_read():
    store = make_store({"Base.md": "", "pic.png": "binary"})
    res = resolve(store, "pic.png")
    assert res.outcome is Outcome.NOT_EXPANDABLE
    assert res.document.path == "pic.png"
    assert store.reads == []


def test_block_extraction_strips_caret_token():
    store = make_store({"Base.md": "", "D.md": "a\nb\n^x\nc"})
    res = resolve(store, "D#^x")
    assert res.text == "a\nb"
    assert res.section is SectionKind.BLOCK
    assert res.line_range == (0, 3)


def test_block_lookup_is_by_slug():
    store = make_store({"Base.md": "", "D.md": "first\n\nsecond line ^My-Block\n"})
    assert resolve(store, "D#^my-block").text == "second line"


def test_header_extraction_with_sibling_cutoff():
    text = "# A\n1\n2\n3\n4\n# B\n5\n"
    store = make_store({"Base.md": "", "D.md": text})
    res = resolve(store, "D#A")
    assert res.text == "# A\n1\n2\n3\n4"
    assert res.section is SectionKind.HEADING
    assert res.line_range == (0, 5)


def test_header_section_keeps_deeper_headings_and_stops_at_higher():
    text = "# Top\n## A\nx\n### A.1\ny\n## B\nz\n# Next\n"
    store = make_store({"Base.md": "", "D.md": text})
    assert resolve(store, "D#A").text == "## A\nx\n### A.1\ny"
    assert resolve(store, "D#B").text == "## B\nz"


@pytest.mark.parametrize("body", [
    "- x\n- y",
    "> quoted",
    "| a | b |\n| 1 | 2 |",
])
def test_header_section_runs_past_a_rule_under_lists_quotes_and_tables(body):
    text = f"## A\n{body}\n---\nmore\n## B\nb\n"
    store = make_store({"Base.md": "", "D.md": text})
    assert resolve(store, "D#A").text == f"## A\n{body}\n---\nmore"


def test_header_section_keeps_thematic_breaks():
    text = "# A\npara\n\n---\n\nrest\n# B\n"
    store = make_store({"Base.md": "", "D.md": text})
    assert resolve(store, "D#A").text == "# A\npara\n\n---\n\nrest"


def test_last_header_runs_to_end_of_document():
    store = make_store({"Base.md": "", "D.md": "# A\nx\n## B\ny\n"})
    assert resolve(store, "D#B").text == "## B\ny\n"


def test_duplicate_heading_text_resolves_to_first():
    store = make_store({"Base.md": "", "D.md": "## Notes\nfirst\n## Notes\nsecond\n"})
    assert resolve(store, "D#Notes").text == "## Notes\nfirst"


def test_missing_header_and_anchor_fall_back_to_full_text():
    store = make_store({"Base.md": "", "D.md": "# A\nbody\n"})
    res = resolve(store, "D#Nope")
    assert res.ok and res.text == "# A\nbody\n"
    assert res.fallback is Fallback.HEADER_NOT_FOUND

    res = resolve(store, "D#^nope")
    assert res.ok and res.text == "# A\nbody\n"
    assert res.fallback is Fallback.ANCHOR_NOT_FOUND


def test_missing_metadata_falls_back_to_full_text():
    store = make_store({"Base.md": ""})
    store.add("D.md", "# A\nbody\n", metadata=None)
    res = resolve(store, "D#A")
    assert res.ok and res.text == "# A\nbody\n"
    assert res.fallback is Fallback.METADATA_UNAVAILABLE


def test_explicit_metadata_is_trusted():
    store = make_store({"Base.md": ""})
    meta = DocMetadata(headings=[Heading(text="Custom", level=2, start_line=1)])
    store.add("D.md", "zero\none\ntwo\n", metadata=meta)
    assert resolve(store, "D#Custom").text == "one\ntwo\n"


def test_self_reference_by_heading():
    store = make_store({"Base.md": "# Intro\nhi\n# Other\n"})
    res = resolve(store, "#Intro", base_path="Base.md")
    assert res.document.path == "Base.md"
    assert res.text == "# Intro\nhi"


def test_store_failure_becomes_failed_outcome(caplog):
    class Broken:
        def resolve_link(self, linkpath, from_path):
            raise RuntimeError("index corrupted")

    res = asyncio.run(Resolver(Broken()).resolve("X", "Base.md"))
    assert res.outcome is Outcome.FAILED
    assert "index corrupted" in res.error
    assert "Failed to resolve embed 'X'" in caplog.text


def test_strip_anchor_token_variants():
    assert strip_anchor_token("para text ^id", "id") == "para text"
    assert strip_anchor_token("para\n\n^id", "id") == "para"
    assert strip_anchor_token("line ^ID\nnext", "id") == "line\nnext"
    # token that does not close a line: plain first replacement
    assert strip_anchor_token("a ^id b", "id") == "a  b"

import asyncio
import os

import pytest

from embex.config.model import ExpanderCfg
from embex.docstore import Document, DocumentStore, FsVault, MemoryStore
from embex.errors import VaultNotFoundError
from embex.expand import Expander

from tests.infrastructure import write, write_markdown


def test_stores_satisfy_the_protocol(vault_dir):
    assert isinstance(FsVault(vault_dir), DocumentStore)
    assert isinstance(MemoryStore(), DocumentStore)


def test_missing_root(tmp_path):
    with pytest.raises(VaultNotFoundError):
        FsVault(tmp_path / "nope")


def test_index_lists_every_file_but_tool_folders(vault_dir):
    write(vault_dir / ".obsidian" / "app.json", "{}")
    write(vault_dir / ".git" / "HEAD", "ref")
    vault = FsVault(vault_dir)
    paths = vault.index.paths()
    assert "Notes/Ideas.md" in paths
    assert "diagram.png" in paths
    assert not any(p.startswith((".obsidian/", ".git/")) for p in paths)


def test_ignore_patterns(vault_dir):
    write(vault_dir / "templates" / "Tpl.md", "template")
    write(vault_dir / "scratch.tmp.md", "tmp")
    vault = FsVault(vault_dir, ExpanderCfg(ignore=["templates/", "*.tmp.md"]))
    assert vault.resolve_link("Tpl", "Home.md") is None
    assert vault.resolve_link("scratch.tmp", "Home.md") is None
    assert vault.resolve_link("Home", "Home.md") == Document.from_path("Home.md")


def test_resolution_prefers_root_over_deeper_namesake(vault_dir):
    vault = FsVault(vault_dir)
    assert vault.resolve_link("Project", "Home.md").path == "Project.md"
    assert vault.resolve_link("Project", "Notes/Ideas.md").path == "Notes/Project.md"


def test_read_and_metadata(vault_dir):
    vault = FsVault(vault_dir)
    doc = vault.resolve_link("Glossary", "Home.md")
    text = asyncio.run(vault.read_text(doc))
    assert text.startswith("# Glossary\n")
    meta = vault.get_metadata(doc)
    assert [h.text for h in meta.headings] == ["Glossary", "Terms", "Appendix"]

    pic = vault.resolve_link("diagram.png", "Home.md")
    assert vault.get_metadata(pic) is None


def test_cache_is_refreshed_when_file_changes(vault_dir):
    vault = FsVault(vault_dir)
    doc = vault.get_document("Glossary.md")
    assert vault.get_metadata(doc).headings[0].text == "Glossary"

    path = vault_dir / "Glossary.md"
    path.write_text("# Renamed heading here\n", encoding="utf-8")
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))

    assert asyncio.run(vault.read_text(doc)) == "# Renamed heading here\n"
    assert vault.get_metadata(doc).headings[0].text == "Renamed heading here"


def test_new_files_show_up_after_refresh(vault_dir):
    vault = FsVault(vault_dir)
    assert vault.resolve_link("Later", "Home.md") is None
    write_markdown(vault_dir / "Later.md", "Later", "late")
    assert vault.resolve_link("Later", "Home.md") is None
    vault.refresh()
    assert vault.resolve_link("Later", "Home.md").path == "Later.md"


def test_metadata_of_vanished_file_is_unavailable(vault_dir):
    vault = FsVault(vault_dir)
    doc = vault.get_document("Glossary.md")
    (vault_dir / "Glossary.md").unlink()
    assert vault.get_metadata(doc) is None


def test_expand_over_vault(vault_dir):
    vault = FsVault(vault_dir)
    text = (vault_dir / "Home.md").read_text(encoding="utf-8")
    out = asyncio.run(Expander(vault).expand(text, "Home.md"))
    assert out == (
        "# Home\n"
        "\n"
        "\n"
        "## Goals\n"
        "Ship it.\n"
        "## Glossary\n"
        "## Terms\n"
        "- API: interface\n"
        "\n"
        "\n"
        "A bright idea\n"
        "worth keeping\n"
    )


def test_memory_store_add_remove():
    store = MemoryStore()
    doc = store.add("a/B.md", "# T\n")
    assert doc == Document(path="a/B.md", name="B", extension="md")
    assert store.get_metadata(doc).headings[0].text == "T"
    store.remove("a/B.md")
    assert store.resolve_link("B", "x.md") is None
    with pytest.raises(FileNotFoundError):
        asyncio.run(store.read_text(doc))


def test_metadata_matches_the_text_last_read(vault_dir):
    vault = FsVault(vault_dir)
    doc = vault.get_document("Glossary.md")
    text = asyncio.run(vault.read_text(doc))

    path = vault_dir / "Glossary.md"
    path.write_text("# Newer\n", encoding="utf-8")
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))

    # structure of the version read above, not of the file on disk now
    meta = vault.get_metadata(doc)
    assert [h.text for h in meta.headings] == ["Glossary", "Terms", "Appendix"]
    assert text.split("\n")[meta.headings[1].start_line] == "## Terms"

    assert asyncio.run(vault.read_text(doc)) == "# Newer\n"
    assert [h.text for h in vault.get_metadata(doc).headings] == ["Newer"]


def test_read_text_parses_text_notes_only(vault_dir):
    vault = FsVault(vault_dir)
    asyncio.run(vault.read_text(vault.get_document("Glossary.md")))
    asyncio.run(vault.read_text(vault.get_document("diagram.png")))
    assert vault._cache["Glossary.md"].parsed
    assert not vault._cache["diagram.png"].parsed

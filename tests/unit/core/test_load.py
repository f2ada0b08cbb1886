"""Unit tests for core/load.py"""

import pytest

from mdsite.core.load import _strip_frontmatter, discover_files, load_corpus, load_document
from mdsite.core.models import ProblemKind
from mdsite.errors import ConfigError, LoadError


def test_strip_frontmatter_with_yaml():
    """_strip_frontmatter extracts YAML header and returns body."""
    fm, body = _strip_frontmatter("---\ntitle: Hello\n---\n# Body\n")
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_strip_frontmatter_no_frontmatter():
    """_strip_frontmatter returns empty dict and full text when no header."""
    text = "# No frontmatter\n"
    assert _strip_frontmatter(text) == ({}, text)


def test_discover_files_recursive_sorted_and_filtered(make_corpus):
    """discover_files finds .md/.mdx recursively, skipping other files and hidden dirs."""
    root = make_corpus({
        "b.md": "b", "a.mdx": "a", "notes.txt": "x",
        "sub/c.md": "c", ".git/d.md": "d",
    })
    rels = [p.relative_to(root).as_posix() for p in discover_files(root)]
    assert rels == ["a.mdx", "b.md", "sub/c.md"]


def test_title_from_first_h1(make_corpus):
    root = make_corpus({"process-model.md": "Intro line.\n\n# Process Model\n\n# Second\n"})
    doc = load_document(root / "process-model.md", root)
    assert doc.title == "Process Model"
    assert doc.path == "process-model.md"


def test_title_falls_back_to_filename(make_corpus):
    """Without a level-1 heading the title is the filename stem, never empty."""
    root = make_corpus({"notes.md": "## Only a subheading\n\ntext\n", "empty.md": ""})
    assert load_document(root / "notes.md", root).title == "notes"
    assert load_document(root / "empty.md", root).title == "empty"


def test_title_ignores_heading_inside_code_fence(make_corpus):
    root = make_corpus({"snippet.md": "```sh\n# not a title\n```\n"})
    assert load_document(root / "snippet.md", root).title == "snippet"


def test_title_from_frontmatter_and_inline_markup(make_corpus):
    root = make_corpus({
        "fm.md": "---\ntitle: From Frontmatter\n---\n# Heading\n",
        "markup.md": "# The `cc` **Compositor**\n",
    })
    assert load_document(root / "fm.md", root).title == "From Frontmatter"
    assert load_document(root / "markup.md", root).title == "The cc Compositor"


def test_status_and_last_updated_lines(make_corpus):
    root = make_corpus({
        "a.md": "# A\n\n**Status:** Draft\n*Last Updated: 2024-01-15*\n\nBody.\n",
        "b.md": "# B\n\n> Status: **Stable**\n",
        "c.md": "# C\n\nNo metadata here.\n\n```\nStatus: inside code\n```\n",
    })
    a = load_document(root / "a.md", root)
    assert a.status == "Draft"
    assert a.last_updated == "2024-01-15"
    assert load_document(root / "b.md", root).status == "Stable"
    c = load_document(root / "c.md", root)
    assert c.status is None
    assert c.last_updated is None


def test_sections_in_order_with_unique_anchors(make_corpus):
    root = make_corpus({"s.md": "# A\n## B\n## B\n#### D\n"})
    doc = load_document(root / "s.md", root)
    assert [(s.level, s.text, s.anchor) for s in doc.sections] == [
        (1, "A", "a"), (2, "B", "b"), (2, "B", "b-1"), (4, "D", "d"),
    ]


def test_nested_path_is_posix_relative(make_corpus):
    root = make_corpus({"architecture/gpu/compositor.md": "# Compositor\n"})
    doc = load_document(root / "architecture/gpu/compositor.md", root)
    assert doc.path == "architecture/gpu/compositor.md"
    assert doc.directory == "architecture/gpu"


def test_load_document_undecodable_raises_load_error(make_corpus):
    root = make_corpus({"bad.md": b"# Bad\n\xff\xfe\xfa\n"})
    with pytest.raises(LoadError) as exc:
        load_document(root / "bad.md", root)
    assert exc.value.path == "bad.md"


def test_load_corpus_missing_root(tmp_path):
    with pytest.raises(ConfigError, match="does not exist"):
        load_corpus(tmp_path / "nope")


def test_load_corpus_root_is_file(tmp_path):
    f = tmp_path / "file.md"
    f.write_text("# x")
    with pytest.raises(ConfigError, match="not a directory"):
        load_corpus(f)


def test_load_corpus_partial_failure(make_corpus):
    """One corrupt file is reported and excluded; healthy files still load."""
    root = make_corpus({
        "a.md": "# A\n",
        "bad.md": b"# Bad\n\xff\xfe\xfa\n",
        "c.md": "# C\n",
        "broken-fm.md": "---\nkey: [unclosed\n---\n# X\n",
    })
    corpus = load_corpus(root, max_workers=2)
    assert [d.path for d in corpus.documents] == ["a.md", "c.md"]
    assert sorted(e.path for e in corpus.errors) == ["bad.md", "broken-fm.md"]
    assert all(e.kind == ProblemKind.load_error for e in corpus.errors)


def test_load_corpus_order_independent_of_workers(make_corpus):
    root = make_corpus({f"d{i}.md": f"# Doc {i}\n" for i in range(8)})
    serial = load_corpus(root, max_workers=1)
    parallel = load_corpus(root, max_workers=4)
    assert [d.path for d in serial.documents] == [d.path for d in parallel.documents]
    assert serial.documents == parallel.documents

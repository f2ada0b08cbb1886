"""Unit tests for core/utils/slug.py"""

import pytest

from mdsite.core.utils.slug import slugify, titleize, unique_anchors


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-ch-rs"),
    ("C++ & Rust", "c-rust"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify lowercases and collapses whitespace/punctuation runs to one hyphen."""
    assert slugify(text) == expected


def test_unique_anchors_suffixes_collisions_in_order():
    """Repeated headings get -1, -2 suffixes in order of occurrence."""
    assert unique_anchors(["Overview", "Overview", "Overview"]) == ["overview", "overview-1", "overview-2"]


def test_unique_anchors_empty_text_falls_back():
    """Headings with no slug-able characters use the fallback id."""
    assert unique_anchors(["", "!!!"]) == ["section", "section-1"]


def test_unique_anchors_pairwise_unique_with_suffix_lookalikes():
    """A heading that already looks like a suffixed id never duplicates a generated one."""
    anchors = unique_anchors(["A", "A", "A-1", "a 1"])
    assert len(set(anchors)) == len(anchors)
    assert anchors[:2] == ["a", "a-1"]


def test_titleize_directory_segment():
    """Hyphenated and underscored names become title-cased words."""
    assert titleize("render-pipeline") == "Render Pipeline"
    assert titleize("gpu_process") == "Gpu Process"

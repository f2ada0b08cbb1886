"""Slug and anchor-id generation for headings and breadcrumb labels"""

import re


def slugify(text: str) -> str:
    """Lowercase text with runs of whitespace/punctuation collapsed to single hyphens."""
    return re.sub(r'[\W_]+', '-', text.lower()).strip('-')


def unique_anchors(texts: list[str], fallback: str = 'section') -> list[str]:
    """Return one anchor id per heading text, unique within the list.

    Repeats of the same base id get -1, -2, ... suffixes in order of occurrence.
    """
    counts: dict[str, int] = {}
    taken: set[str] = set()
    anchors = []
    for text in texts:
        base = slugify(text) or fallback
        n = counts.get(base, 0)
        anchor = base if n == 0 else f"{base}-{n}"
        while anchor in taken:
            n += 1
            anchor = f"{base}-{n}"
        counts[base] = n + 1
        taken.add(anchor)
        anchors.append(anchor)
    return anchors


def titleize(segment: str) -> str:
    """'render-pipeline' -> 'Render Pipeline' (used for directory breadcrumbs)."""
    words = re.split(r'[-_\s]+', segment)
    return ' '.join(w[:1].upper() + w[1:] for w in words if w)

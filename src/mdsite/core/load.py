"""Document loader: file discovery, frontmatter, title/status metadata and headings"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from mdsite.core.models import Corpus, Document, Problem, ProblemKind, Section
from mdsite.core.utils.hashing import sha256
from mdsite.core.utils.pool import parallel_map
from mdsite.core.utils.slug import unique_anchors
from mdsite.core.utils.tokens import heading_level, inline_text, make_parser
from mdsite.errors import ConfigError, LoadError


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
MD_EXTENSIONS = {'.md', '.mdx'}

# "Status: Draft", "**Status:** Draft", "_Status_: Draft" at the start of a paragraph line
STATUS_RE = re.compile(r'^[*_]*status[*_]*\s*:\s*(?P<value>.+)$', re.IGNORECASE)
UPDATED_RE = re.compile(r'^[*_]*last[\s_-]*updated[*_]*\s*:\s*(?P<value>.+)$', re.IGNORECASE)


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _clean(value: str) -> str:
    return value.strip().strip('*_`').strip()


def _paragraph_lines(tokens: list):
    """Yield each source line of every paragraph (including those inside block quotes)."""
    for i, tok in enumerate(tokens):
        if tok.type == 'inline' and i > 0 and tokens[i - 1].type == 'paragraph_open':
            yield from tok.content.splitlines()


def _meta_value(tokens: list, pattern: re.Pattern) -> Optional[str]:
    """Return the first paragraph line value matching pattern, else None."""
    for line in _paragraph_lines(tokens):
        m = pattern.match(line.strip())
        if m and _clean(m.group('value')):
            return _clean(m.group('value'))
    return None


def extract_sections(tokens: list) -> tuple[Section, ...]:
    """Collect headings in document order with collision-free anchors."""
    headings = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is not None:
            headings.append((level, inline_text(tokens[i + 1])))
    anchors = unique_anchors([text for _, text in headings])
    return tuple(Section(level=lvl, text=text, anchor=a) for (lvl, text), a in zip(headings, anchors))


def _title(frontmatter: dict[str, Any], sections: tuple[Section, ...], path: Path) -> str:
    """Frontmatter title, else first non-empty h1, else the filename stem."""
    fm_title = frontmatter.get('title')
    if fm_title is not None and str(fm_title).strip():
        return str(fm_title).strip()
    for s in sections:
        if s.level == 1 and s.text:
            return s.text
    return path.stem or path.name


def _fm_str(frontmatter: dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        if frontmatter.get(key) is not None:
            return str(frontmatter[key])
    return None


def discover_files(root: Path) -> list[Path]:
    """Return sorted .md/.mdx files under root, skipping hidden directories."""
    return sorted(
        p for p in root.rglob('*')
        if p.suffix.lower() in MD_EXTENSIONS
        and p.is_file()
        and not any(part.startswith('.') for part in p.relative_to(root).parts)
    )


def load_document(path: Path, root: Path, parser_config: str = 'gfm-like') -> Document:
    """Read and parse a single file. Raises LoadError if it cannot be read or decoded."""
    rel = path.relative_to(root).as_posix()
    try:
        raw = path.read_text(encoding='utf-8')
        frontmatter, body = _strip_frontmatter(raw)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise LoadError(rel, e) from e

    tokens = make_parser(parser_config).parse(body)
    sections = extract_sections(tokens)
    return Document(
        path=rel,
        title=_title(frontmatter, sections, path),
        body=body,
        raw=raw,
        hash=sha256(raw),
        frontmatter=frontmatter,
        sections=sections,
        status=_fm_str(frontmatter, 'status') or _meta_value(tokens, STATUS_RE),
        last_updated=_fm_str(frontmatter, 'last_updated', 'updated') or _meta_value(tokens, UPDATED_RE),
    )


def check_root(root: Path) -> Path:
    """Validate the corpus root. Raises ConfigError if missing or unreadable."""
    if not root.exists():
        raise ConfigError("Root directory does not exist", root)
    if not root.is_dir():
        raise ConfigError("Root is not a directory", root)
    if not os.access(root, os.R_OK | os.X_OK):
        raise ConfigError("Root directory is not readable", root)
    return root


def load_corpus(root: Path, parser_config: str = 'gfm-like', max_workers: int = 0) -> Corpus:
    """Load every markdown file under root. One bad file never aborts the run."""
    root = check_root(Path(root))
    files = discover_files(root)
    logger.debug("Discovered %d markdown file(s) under %s", len(files), root)

    def _load(p: Path) -> Document | Problem:
        try:
            return load_document(p, root, parser_config)
        except LoadError as e:
            logger.warning("%s", e)
            return Problem(kind=ProblemKind.load_error, path=e.path, detail=str(e.cause))

    corpus = Corpus()
    for item in parallel_map(_load, files, max_workers):
        if isinstance(item, Problem):
            corpus.errors.append(item)
        else:
            corpus.documents.append(item)
    return corpus

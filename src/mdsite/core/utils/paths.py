"""Link target classification and corpus-relative path arithmetic (POSIX style)"""

import posixpath
import re


# RFC 3986 scheme, but at least two characters so Windows drive letters are not schemes
SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.-]+:')
MD_SUFFIXES = ('.md', '.mdx')


def is_external(target: str) -> bool:
    """True for targets with a URI scheme (http:, https:, mailto:, ...) or protocol-relative //host."""
    return bool(SCHEME_RE.match(target)) or target.startswith('//')


def split_target(target: str) -> tuple[str, str | None]:
    """Split 'path?query#frag' into (path, fragment). Query strings are dropped."""
    path, sep, fragment = target.partition('#')
    path = path.split('?', 1)[0]
    return path, (fragment if sep else None)


def resolve(source: str, target_path: str) -> str:
    """Resolve target_path against the directory of source; empty target means source itself.

    The result may start with '../' when the target escapes the corpus root.
    """
    if not target_path:
        return source
    if target_path.startswith('/'):
        return posixpath.normpath(target_path.lstrip('/'))
    return posixpath.normpath(posixpath.join(posixpath.dirname(source), target_path))


def output_path(doc_path: str) -> str:
    """'a/b.md' -> 'a/b.html'."""
    root, ext = posixpath.splitext(doc_path)
    return f"{root}.html" if ext.lower() in MD_SUFFIXES else doc_path


def relative_url(from_page: str, to_page: str) -> str:
    """URL of to_page as seen from from_page; both are output-root relative paths."""
    return posixpath.relpath(to_page, posixpath.dirname(from_page) or '.')

"""Data models shared by the load, link, render and assemble stages"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class LinkKind(str, Enum):
    """Classification of a link target at build time"""
    valid = "internal-valid"
    dangling = "internal-dangling"
    external = "external"


class ProblemKind(str, Enum):
    """Findings surfaced in the build report"""
    dangling_link = "dangling_link"
    missing_image = "missing_image"
    duplicate_title = "duplicate_title"
    load_error = "load_error"
    render_error = "render_error"
    output_collision = "output_collision"


@dataclass(frozen=True)
class Section:
    """A heading within a document."""
    level:  int             # 1-6
    text:   str
    anchor: str             # unique within the owning document


@dataclass(frozen=True)
class Document:
    """One loaded source file; immutable for the duration of a build."""
    path:         str                       # corpus-relative POSIX path, unique key
    title:        str
    body:         str                       # markdown without frontmatter
    raw:          str                       # full file content
    hash:         str
    frontmatter:  dict[str, Any] = field(default_factory=dict)
    sections:     tuple[Section, ...] = ()
    status:       Optional[str] = None
    last_updated: Optional[str] = None

    @property
    def directory(self) -> str:
        """Source subdirectory ('' for files at the corpus root)."""
        head, _, _ = self.path.rpartition('/')
        return head


@dataclass(frozen=True)
class Link:
    """A directed reference from a document to a target."""
    source:   str
    target:   str                           # as written in the source
    text:     str
    kind:     LinkKind
    resolved: Optional[str] = None          # corpus-relative path; None for external targets
    fragment: Optional[str] = None
    is_image: bool = False


@dataclass
class LinkGraph:
    """All links plus outbound and inbound adjacency keyed by document path."""
    links:    list[Link] = field(default_factory=list)
    outbound: dict[str, list[Link]] = field(default_factory=dict)
    inbound:  dict[str, list[Link]] = field(default_factory=dict)


class Problem(BaseModel):
    """A single finding about one document: a link, image, title, load, render or output problem."""
    kind:   ProblemKind
    path:   str
    target: Optional[str] = None
    detail: str = ""


@dataclass
class Corpus:
    """Loader output: documents in discovery order plus per-file failures."""
    documents: list[Document] = field(default_factory=list)
    errors:    list[Problem] = field(default_factory=list)

    def by_path(self) -> dict[str, Document]:
        return {d.path: d for d in self.documents}


@dataclass(frozen=True)
class RenderedDoc:
    """Renderer output for one document."""
    path:     str
    html:     str
    toc:      str                           # nested <ul> of sections, '' when empty
    sections: tuple[Section, ...] = ()


@dataclass
class BuildResult:
    """Aggregate output and problem report of one pipeline run."""
    documents: dict[str, Document] = field(default_factory=dict)
    rendered:  dict[str, RenderedDoc] = field(default_factory=dict)
    graph:     LinkGraph = field(default_factory=LinkGraph)
    problems:  list[Problem] = field(default_factory=list)
    outputs:   list[str] = field(default_factory=list)

    @property
    def has_problems(self) -> bool:
        return bool(self.problems)

    def count(self, kind: ProblemKind) -> int:
        return sum(1 for p in self.problems if p.kind == kind)


class BuildReport(BaseModel):
    """Serialized form of the problem report written to the output directory."""
    documents: int
    problems:  list[Problem]
    counts:    dict[str, int]

    @classmethod
    def from_result(cls, result: BuildResult) -> "BuildReport":
        return cls(
            documents=len(result.documents),
            problems=result.problems,
            counts={k.value: result.count(k) for k in ProblemKind},
        )

"""Link-graph snapshot persistence: replace, list documents, query links and problems"""

from datetime import datetime

from sqlmodel import Session, select

from mdsite.core.models import BuildResult, LinkKind
from mdsite.crud.models import DocumentRow, LinkRow, ProblemRow


def clear_snapshot(session: Session, root: str) -> None:
    """Delete every row previously exported for root."""
    for table in (DocumentRow, LinkRow, ProblemRow):
        for row in session.exec(select(table).where(table.root == root)).all():
            session.delete(row)
    session.flush()


def save_graph(session: Session, root: str, result: BuildResult) -> dict[str, int]:
    """Replace the stored snapshot for root with result's documents, links and problems.

    Flushes but does not commit; caller controls the transaction.
    Returns row counts per table.
    """
    clear_snapshot(session, root)
    exported_at = datetime.now()

    for doc in sorted(result.documents.values(), key=lambda d: d.path):
        session.add(DocumentRow(
            root=root, path=doc.path, title=doc.title, status=doc.status,
            last_updated=doc.last_updated, hash=doc.hash,
            sections=len(doc.sections), exported_at=exported_at,
        ))
    for position, link in enumerate(result.graph.links):
        session.add(LinkRow(
            root=root, position=position, source=link.source, target=link.target,
            text=link.text, kind=link.kind, resolved=link.resolved,
            fragment=link.fragment, is_image=link.is_image,
        ))
    for position, problem in enumerate(result.problems):
        session.add(ProblemRow(
            root=root, position=position, kind=problem.kind, path=problem.path,
            target=problem.target, detail=problem.detail,
        ))
    session.flush()
    return {
        "documents": len(result.documents),
        "links": len(result.graph.links),
        "problems": len(result.problems),
    }


def get_documents(session: Session, root: str) -> list[DocumentRow]:
    """Return stored documents for root ordered by path."""
    return list(session.exec(
        select(DocumentRow).where(DocumentRow.root == root).order_by(DocumentRow.path)
    ).all())


def get_links(session: Session, root: str, kind: LinkKind | None = None) -> list[LinkRow]:
    """Return stored links for root in export order, optionally filtered by kind."""
    query = select(LinkRow).where(LinkRow.root == root)
    if kind is not None:
        query = query.where(LinkRow.kind == kind)
    return list(session.exec(query.order_by(LinkRow.position)).all())


def get_inbound(session: Session, root: str, path: str) -> list[LinkRow]:
    """Return internal-valid links pointing at path ("referenced by")."""
    return list(session.exec(
        select(LinkRow)
        .where(LinkRow.root == root)
        .where(LinkRow.resolved == path)
        .where(LinkRow.kind == LinkKind.valid)
        .order_by(LinkRow.position)
    ).all())


def get_problems(session: Session, root: str) -> list[ProblemRow]:
    """Return stored problems for root in report order."""
    return list(session.exec(
        select(ProblemRow).where(ProblemRow.root == root).order_by(ProblemRow.position)
    ).all())

"""Database table definitions for exported link-graph snapshots"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from mdsite.core.models import LinkKind, ProblemKind


class DocumentRow(SQLModel, table=True):
    """A loaded document as seen by the most recent export of its corpus root"""
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("root", "path", name="uq_doc_root_path"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    root: str = Field(..., index=True, nullable=False)
    path: str = Field(..., sa_column=Column(Text, nullable=False))
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    status: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    last_updated: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    sections: int = Field(default=0, description="Number of headings in the document")
    exported_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class LinkRow(SQLModel, table=True):
    """A classified link or image reference between documents"""
    __tablename__ = "links"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    root: str = Field(..., index=True, nullable=False)
    position: int = Field(..., description="Order of the link within the export")
    source: str = Field(..., index=True, nullable=False)
    target: str = Field(..., sa_column=Column(Text, nullable=False))
    text: str = Field(default="", sa_column=Column(Text, nullable=False))
    kind: LinkKind = Field(..., nullable=False)
    resolved: Optional[str] = Field(default=None, index=True)
    fragment: Optional[str] = Field(default=None)
    is_image: bool = Field(default=False, nullable=False)


class ProblemRow(SQLModel, table=True):
    """A finding from the build report"""
    __tablename__ = "problems"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    root: str = Field(..., index=True, nullable=False)
    position: int = Field(..., description="Order of the problem within the report")
    kind: ProblemKind = Field(..., nullable=False)
    path: str = Field(..., sa_column=Column(Text, nullable=False))
    target: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    detail: str = Field(default="", sa_column=Column(Text, nullable=False))

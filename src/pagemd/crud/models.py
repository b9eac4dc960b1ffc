"""Database table definitions for the local page store"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Text
from sqlmodel import Field, SQLModel


class Page(SQLModel, table=True):
    """Page metadata; mirrors PageProperties"""
    __tablename__ = "pages"
    id: str = Field(primary_key=True)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    type: Optional[str] = Field(default=None, index=True)
    status: Optional[str] = Field(default=None, index=True)
    category: Optional[str] = Field(default=None, index=True)
    tags: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    date: Optional[str] = Field(default=None)
    updated_date: Optional[str] = Field(default=None)
    slug: Optional[str] = Field(default=None, index=True)
    summary: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    extra: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Block(SQLModel, table=True):
    """One block of a page's tree; ids are unique per page, children referenced by id"""
    __tablename__ = "blocks"
    id: str = Field(primary_key=True)
    page_id: str = Field(..., foreign_key="pages.id", primary_key=True)
    position: int = Field(..., nullable=False, description="Storage order within the page")
    type: str = Field(..., nullable=False)
    runs: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    language: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    caption: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    child_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

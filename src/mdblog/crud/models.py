"""Database table definitions for posts, versions, tags, and categories"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, JSON, Text, String, UniqueConstraint


class PostTag(SQLModel, table=True):
    """Many-to-many relationship between posts and tags"""
    __tablename__ = "post_tags"
    post_id: UUID = Field(foreign_key="posts.id", primary_key=True)
    tag_name: str = Field(foreign_key="tags.name", primary_key=True)
    position: int = Field(default=0, nullable=False)


class PostCategory(SQLModel, table=True):
    """Many-to-many relationship between posts and categories"""
    __tablename__ = "post_categories"
    post_id: UUID = Field(foreign_key="posts.id", primary_key=True)
    category_name: str = Field(foreign_key="categories.name", primary_key=True)
    position: int = Field(default=0, nullable=False)


class Post(SQLModel, table=True):
    """A blog post and the originating content source of truth"""
    __tablename__ = "posts"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., index=True, nullable=False)
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    title: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True, index=True))
    draft: bool = Field(default=False, nullable=False)
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    frontmatter: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    stats: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    tags: List["Tag"] = Relationship(back_populates="posts", link_model=PostTag)
    categories: List["Category"] = Relationship(back_populates="posts", link_model=PostCategory)


class PostVersion(SQLModel, table=True):
    """Immutable snapshot of a Post at a prior state."""
    __tablename__ = "post_versions"
    __table_args__ = (UniqueConstraint("post_id", "version_num", name="uq_postver_post_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    post_id: UUID = Field(..., foreign_key="posts.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-post version number")
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    frontmatter: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    stats: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Tag(SQLModel, table=True):
    """A free-form label from the post front matter 'tags' list"""
    __tablename__ = "tags"
    name: str = Field(primary_key=True)
    posts: List[Post] = Relationship(back_populates="tags", link_model=PostTag)


class Category(SQLModel, table=True):
    """A category from the post front matter 'categories' list"""
    __tablename__ = "categories"
    name: str = Field(primary_key=True)
    posts: List[Post] = Relationship(back_populates="categories", link_model=PostCategory)

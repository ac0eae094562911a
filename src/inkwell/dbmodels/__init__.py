"""
Database models for Inkwell (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
constraint names, and exposes `target_metadata` for table creation.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


class Users(Base):
    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="users_pkey"),
        UniqueConstraint("username", name="users_username_key"),
        UniqueConstraint("email", name="users_email_key"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column("password", String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    posts: Mapped[list["Posts"]] = relationship(
        "Posts", uselist=True, back_populates="author", passive_deletes=True
    )
    comments: Mapped[list["Comments"]] = relationship(
        "Comments", uselist=True, back_populates="author", passive_deletes=True
    )


class Posts(Base):
    __tablename__ = "posts"
    __table_args__ = (
        ForeignKeyConstraint(
            ["author_id"], ["users.id"], ondelete="CASCADE", name="posts_author_id_fkey"
        ),
        PrimaryKeyConstraint("id", name="posts_pkey"),
        Index("idx_posts_author", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    author_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    author: Mapped["Users"] = relationship("Users", back_populates="posts")
    comments: Mapped[list["Comments"]] = relationship(
        "Comments", uselist=True, back_populates="post", passive_deletes=True
    )


class Comments(Base):
    __tablename__ = "comments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["post_id"], ["posts.id"], ondelete="CASCADE", name="comments_post_id_fkey"
        ),
        ForeignKeyConstraint(
            ["author_id"], ["users.id"], ondelete="CASCADE", name="comments_author_id_fkey"
        ),
        PrimaryKeyConstraint("id", name="comments_pkey"),
        Index("idx_comments_post", "post_id"),
        Index("idx_comments_author", "author_id"),
    )

    id: Mapped[int] = mapped_column(Integer, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, server_default=text("CURRENT_TIMESTAMP")
    )

    post: Mapped["Posts"] = relationship("Posts", back_populates="comments")
    author: Mapped["Users"] = relationship("Users", back_populates="comments")


target_metadata = Base.metadata

__all__ = ["Base", "Users", "Posts", "Comments", "target_metadata"]

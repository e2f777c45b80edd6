"""
Bookshelf Backend — Book SQLAlchemy Model
===========================================

What:  ORM model representing the `books` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by BookService for CRUD, search, and aggregate queries.

Table Design Rationale:
    - Integer autoincrement id: stable for the record's lifetime, used in URLs
    - title NOT NULL: the one required field; the service rejects blank titles
    - author/publisher/description/category/image/url nullable at the column
      level, but the service always fills them with defaults on write
    - published_date kept as free-form text (catalog data arrives in mixed formats)
    - price as NUMERIC(10, 2) so currency values are exact at rest
    - view_count only ever changes through an in-database increment
"""

from typing import Optional

from sqlalchemy import Boolean, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base


class Book(Base):
    """
    Represents one catalog entry.

    Lifecycle:
        1. Created by POST /api/books (defaults applied by BookService)
        2. Replaced field-by-field by PUT /api/books/{id}; id and view_count kept
        3. view_count bumped atomically by POST /api/books/{id}/views
        4. Deleted permanently by DELETE /api/books/{id}
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    publisher: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    published_date: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    rating: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    # asdecimal=False: the API exposes price as a JSON number
    price: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0, server_default=text("0")
    )
    featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    # Never assigned from a draft; see BookService.increment_views
    view_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    # author lookups (by-author listing, distinct authors) and featured filter
    __table_args__ = (
        Index("idx_books_author", "author"),
        Index("idx_books_featured", "featured"),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', views={self.view_count})>"

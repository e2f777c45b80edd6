"""
Bookshelf Backend — Book Service (Catalog Business Logic)
===========================================================

What:  Listing, search, filtering, aggregates, and mutations over the `books` table.
Why:   Encapsulates catalog rules (title validation, field defaults, atomic view
       counting) independent of HTTP concerns.
How:   Each method receives the request's AsyncSession and issues SQLAlchemy
       Core/ORM statements. Commit happens in get_db_session, so each call is
       one transaction.
Who:   Called by the /api/books route handlers.

Write Rules:
    create/update both run the draft through `resolve_draft()`:
        1. Title must be non-blank after trimming, else ValidationError (400)
        2. Every absent (None) optional field gets its default from BOOK_DEFAULTS
    update additionally requires the id to exist (NotFoundError, 404) and
    replaces all mutable fields in place. id and view_count are never taken
    from a draft.

View Counting:
    increment_views issues `UPDATE books SET view_count = view_count + 1`.
    The addition happens inside the database, so concurrent increments on the
    same row serialize on the row lock and none are lost. A Python-side
    read-modify-write would drop updates under concurrency.

Design Decision:
    BookService is stateless, so a single module-level instance is shared by
    all requests.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.exceptions import DatabaseError, NotFoundError, ValidationError
from bookshelf.models.book import Book
from bookshelf.schemas.book import BookDraft, BookResponse

logger = logging.getLogger(__name__)


# Substituted field-by-field for any draft field that is None
BOOK_DEFAULTS: Dict[str, Any] = {
    "author": "Unknown Author",
    "publisher": "Unknown Publisher",
    "description": "No description available",
    "category": "General",
    "image": "",
    "url": "",
    "rating": 0,
    "price": 0.0,
    "featured": False,
}


def resolve_draft(draft: BookDraft) -> Dict[str, Any]:
    """
    Validate a draft and fill in defaults.

    Returns:
        Column values for every mutable Book field.

    Raises:
        ValidationError: title missing or blank
    """
    if draft.title is None or not draft.title.strip():
        raise ValidationError(message="Title is required", field="title")

    values = draft.model_dump()
    for field, default in BOOK_DEFAULTS.items():
        if values.get(field) is None:
            values[field] = default
    return values


@contextmanager
def _database_errors(operation: str, **context: Any) -> Iterator[None]:
    """Translate SQLAlchemy failures into DatabaseError, logging the detail."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            message="Could not complete the catalog operation. Please try again.",
            context={"operation": operation, "error_type": type(e).__name__, **context},
        )


class BookService:
    """
    Business logic layer for book operations.

    Responsibilities:
        - Reads: list_all, get, search, list_by_author, list_by_min_rating,
          list_featured, list_authors, average_rating, total_count
        - Writes: create, update, delete, increment_views
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_all(self, db: AsyncSession) -> List[BookResponse]:
        with _database_errors("list_all"):
            result = await db.execute(select(Book).order_by(Book.id))
            return [BookResponse.model_validate(book) for book in result.scalars().all()]

    async def get(self, db: AsyncSession, book_id: int) -> BookResponse:
        """
        Retrieve a single book by ID.

        Raises:
            NotFoundError: No book with that id (→ 404)
        """
        with _database_errors("get", book_id=book_id):
            book = await self._load(db, book_id)
        return BookResponse.model_validate(book)

    async def search(self, db: AsyncSession, query: Optional[str]) -> List[BookResponse]:
        """
        Substring search over title, author, and description.

        A missing or blank query returns the whole catalog. `autoescape`
        makes `%` and `_` in the query match literally. Case sensitivity is
        whatever the database's LIKE does (insensitive on SQLite, sensitive
        on PostgreSQL).
        """
        if query is None or not query.strip():
            return await self.list_all(db)

        term = query.strip()
        stmt = (
            select(Book)
            .where(
                or_(
                    Book.title.contains(term, autoescape=True),
                    Book.author.contains(term, autoescape=True),
                    Book.description.contains(term, autoescape=True),
                )
            )
            .order_by(Book.id)
        )
        with _database_errors("search"):
            result = await db.execute(stmt)
            return [BookResponse.model_validate(book) for book in result.scalars().all()]

    async def list_by_author(self, db: AsyncSession, author: str) -> List[BookResponse]:
        """Books whose author contains `author`, ignoring case."""
        stmt = (
            select(Book)
            .where(Book.author.icontains(author, autoescape=True))
            .order_by(Book.id)
        )
        with _database_errors("list_by_author"):
            result = await db.execute(stmt)
            return [BookResponse.model_validate(book) for book in result.scalars().all()]

    async def list_by_min_rating(self, db: AsyncSession, min_rating: int) -> List[BookResponse]:
        stmt = select(Book).where(Book.rating >= min_rating).order_by(Book.id)
        with _database_errors("list_by_min_rating"):
            result = await db.execute(stmt)
            return [BookResponse.model_validate(book) for book in result.scalars().all()]

    async def list_featured(self, db: AsyncSession) -> List[BookResponse]:
        stmt = select(Book).where(Book.featured.is_(True)).order_by(Book.id)
        with _database_errors("list_featured"):
            result = await db.execute(stmt)
            return [BookResponse.model_validate(book) for book in result.scalars().all()]

    async def list_authors(self, db: AsyncSession) -> List[str]:
        """Distinct author names, alphabetically."""
        stmt = (
            select(Book.author)
            .where(Book.author.is_not(None))
            .distinct()
            .order_by(Book.author)
        )
        with _database_errors("list_authors"):
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def average_rating(self, db: AsyncSession) -> Optional[float]:
        """Mean rating across the catalog, or None when it is empty."""
        with _database_errors("average_rating"):
            result = await db.execute(select(func.avg(Book.rating)))
            value = result.scalar()
        # PostgreSQL returns NUMERIC (Decimal) for AVG over integers
        return float(value) if value is not None else None

    async def total_count(self, db: AsyncSession) -> int:
        with _database_errors("total_count"):
            result = await db.execute(select(func.count(Book.id)))
            return result.scalar() or 0

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, draft: BookDraft) -> BookResponse:
        """
        Validate, apply defaults, and insert a new book.

        Raises:
            ValidationError: Blank title (→ 400)
        """
        values = resolve_draft(draft)
        book = Book(**values, view_count=0)
        with _database_errors("create"):
            db.add(book)
            # Assigns the autoincrement id without committing
            await db.flush()
        logger.info("Book created: id=%s title='%s'", book.id, book.title)
        return BookResponse.model_validate(book)

    async def update(self, db: AsyncSession, book_id: int, draft: BookDraft) -> BookResponse:
        """
        Replace every mutable field of an existing book.

        Existence is checked first, so an unknown id is a 404 even when the
        draft is also invalid, and nothing is written in either failure case.

        Raises:
            NotFoundError: No book with that id (→ 404)
            ValidationError: Blank title (→ 400)
        """
        with _database_errors("update", book_id=book_id):
            book = await self._load(db, book_id)

        values = resolve_draft(draft)
        for field, value in values.items():
            setattr(book, field, value)

        with _database_errors("update", book_id=book_id):
            await db.flush()
        logger.info("Book updated: id=%s", book_id)
        return BookResponse.model_validate(book)

    async def delete(self, db: AsyncSession, book_id: int) -> None:
        """
        Permanently remove a book.

        Raises:
            NotFoundError: No book with that id (→ 404)
        """
        with _database_errors("delete", book_id=book_id):
            result = await db.execute(delete(Book).where(Book.id == book_id))
        if result.rowcount == 0:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        logger.info("Book deleted: id=%s", book_id)

    async def increment_views(self, db: AsyncSession, book_id: int) -> int:
        """
        Atomically add one to a book's view counter.

        The follow-up SELECT runs in the same transaction, after the UPDATE
        took the row's write lock, so it reads this call's own increment.

        Returns:
            The new view count.

        Raises:
            NotFoundError: No book with that id (→ 404)
        """
        with _database_errors("increment_views", book_id=book_id):
            result = await db.execute(
                update(Book)
                .where(Book.id == book_id)
                .values(view_count=Book.view_count + 1)
            )
            if result.rowcount == 0:
                raise NotFoundError(resource="book", resource_id=str(book_id))

            count_result = await db.execute(
                select(Book.view_count).where(Book.id == book_id)
            )
            new_count = count_result.scalar_one()

        logger.debug("Book %s views -> %d", book_id, new_count)
        return new_count

    async def _load(self, db: AsyncSession, book_id: int) -> Book:
        result = await db.execute(select(Book).where(Book.id == book_id))
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFoundError(resource="book", resource_id=str(book_id))
        return book


# ── Singleton Instance ────────────────────────────────────────────────────
book_service = BookService()

"""
Bookshelf Backend — Book Route Handlers
=========================================

What:  The /api/books resource: listing, search, filters, stats, and CRUD.
How:   Thin handlers that pass the request's session to BookService.
Who:   Called by the catalog frontend and admin tools.

Route Inventory (auth enforced by the Request Gate middleware):
    public         GET    /api/books
    public         GET    /api/books/search?query=
    public         GET    /api/books/authors
    public         GET    /api/books/featured
    public         GET    /api/books/stats/average-rating
    public         GET    /api/books/stats/total
    public         GET    /api/books/author/{author}
    public         GET    /api/books/rating/{min_rating}
    authenticated  GET    /api/books/{book_id}
    authenticated  POST   /api/books
    authenticated  PUT    /api/books/{book_id}
    authenticated  DELETE /api/books/{book_id}
    authenticated  POST   /api/books/{book_id}/views

Ordering note:
    The fixed paths (/search, /authors, /featured, /stats/...) are declared
    before /{book_id}; FastAPI matches in declaration order.

Authenticated routes also declare `get_current_username`, which fails with
401 if the gate's rules and this table ever drift apart.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.database import get_db_session
from bookshelf.dependencies import get_current_username
from bookshelf.schemas.book import INT32_MAX, INT32_MIN, BookDraft, BookResponse
from bookshelf.schemas.common import ErrorResponse
from bookshelf.services.book_service import book_service

router = APIRouter(prefix="/api/books", tags=["Books"])

_NOT_FOUND = {404: {"description": "Book not found", "model": ErrorResponse}}
_UNAUTHORIZED = {401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}}
_BAD_REQUEST = {400: {"description": "Blank title, or a field too long or out of range", "model": ErrorResponse}}


# ── Public reads ─────────────────────────────────────────────────────────


@router.get("", response_model=List[BookResponse], summary="List every book")
async def list_books(db: AsyncSession = Depends(get_db_session)) -> List[BookResponse]:
    return await book_service.list_all(db)


@router.get(
    "/search",
    response_model=List[BookResponse],
    summary="Substring search over title, author, and description",
)
async def search_books(
    query: Optional[str] = Query(
        default=None,
        description="Text to look for. Blank or omitted returns the whole catalog.",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookResponse]:
    return await book_service.search(db, query)


@router.get("/authors", response_model=List[str], summary="Distinct author names")
async def list_authors(db: AsyncSession = Depends(get_db_session)) -> List[str]:
    return await book_service.list_authors(db)


@router.get("/featured", response_model=List[BookResponse], summary="Featured books")
async def list_featured(db: AsyncSession = Depends(get_db_session)) -> List[BookResponse]:
    return await book_service.list_featured(db)


@router.get(
    "/stats/average-rating",
    response_model=Optional[float],
    summary="Mean rating (null when the catalog is empty)",
)
async def average_rating(db: AsyncSession = Depends(get_db_session)) -> Optional[float]:
    return await book_service.average_rating(db)


@router.get("/stats/total", response_model=int, summary="Number of books")
async def total_books(db: AsyncSession = Depends(get_db_session)) -> int:
    return await book_service.total_count(db)


@router.get(
    "/author/{author}",
    response_model=List[BookResponse],
    summary="Books whose author contains the given text (case-insensitive)",
)
async def books_by_author(
    author: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[BookResponse]:
    return await book_service.list_by_author(db, author)


@router.get(
    "/rating/{min_rating}",
    response_model=List[BookResponse],
    summary="Books rated at least min_rating",
)
async def books_by_rating(
    min_rating: int = Path(ge=INT32_MIN, le=INT32_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> List[BookResponse]:
    return await book_service.list_by_min_rating(db, min_rating)


# ── Authenticated ────────────────────────────────────────────────────────


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    dependencies=[Depends(get_current_username)],
    summary="Get one book",
)
async def get_book(
    book_id: int = Path(ge=INT32_MIN, le=INT32_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.get(db, book_id)


@router.post(
    "",
    response_model=BookResponse,
    responses={**_BAD_REQUEST, **_UNAUTHORIZED},
    dependencies=[Depends(get_current_username)],
    summary="Create a book; absent fields get defaults",
)
async def create_book(
    draft: BookDraft,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.create(db, draft)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    responses={**_BAD_REQUEST, **_UNAUTHORIZED, **_NOT_FOUND},
    dependencies=[Depends(get_current_username)],
    summary="Replace every mutable field of a book",
)
async def update_book(
    draft: BookDraft,
    book_id: int = Path(ge=INT32_MIN, le=INT32_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.update(db, book_id, draft)


@router.delete(
    "/{book_id}",
    response_class=Response,
    responses={200: {"description": "Deleted"}, **_UNAUTHORIZED, **_NOT_FOUND},
    dependencies=[Depends(get_current_username)],
    summary="Delete a book",
)
async def delete_book(
    book_id: int = Path(ge=INT32_MIN, le=INT32_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await book_service.delete(db, book_id)
    return Response(status_code=200)


@router.post(
    "/{book_id}/views",
    response_model=int,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    dependencies=[Depends(get_current_username)],
    summary="Record one view; returns the new view count",
)
async def increment_views(
    book_id: int = Path(ge=INT32_MIN, le=INT32_MAX),
    db: AsyncSession = Depends(get_db_session),
) -> int:
    return await book_service.increment_views(db, book_id)

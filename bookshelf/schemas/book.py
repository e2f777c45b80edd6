"""
Bookshelf Backend — Book Request/Response Schemas
===================================================

What:  Pydantic models defining the book part of the API contract.
How:   FastAPI validates request bodies against `BookDraft` and serializes
       responses through `BookResponse`.

Wire format:
    Field names are camelCase on the wire (`publishedDate`, `viewCount`), which
    is what existing clients send and read. `populate_by_name=True` also
    accepts the snake_case spelling on input.

Why every draft field is Optional:
    A draft is a partial record. `None` means "absent", and BookService
    substitutes the documented default for each absent field. Title is
    Optional too, so a missing title reaches the service and gets the
    "Title is required" message. Length and range limits mirror the `books`
    columns; violations are rejected before any SQL runs.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Bounds of the `books` columns; anything outside them is a 400, not a driver error
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
PRICE_MAX = 99_999_999.99  # NUMERIC(10, 2)


class BookDraft(BaseModel):
    """
    What:  Caller-supplied (possibly partial) book fields for create/update.
    Who:   Body of POST /api/books and PUT /api/books/{id}.

    `id` and `viewCount` are not accepted; unknown keys are ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = Field(default=None, max_length=255, description="Required, non-blank")
    author: Optional[str] = Field(default=None, max_length=255)
    publisher: Optional[str] = Field(default=None, max_length=255)
    published_date: Optional[str] = Field(default=None, max_length=255, description="Free-form date text")
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    image: Optional[str] = Field(default=None, max_length=1024, description="Cover image URL")
    url: Optional[str] = Field(default=None, max_length=1024, description="External link")
    rating: Optional[int] = Field(default=None, ge=INT32_MIN, le=INT32_MAX)
    price: Optional[float] = Field(
        default=None, ge=-PRICE_MAX, le=PRICE_MAX, allow_inf_nan=False
    )
    featured: Optional[bool] = None


class BookResponse(BaseModel):
    """
    What:  Full representation of a stored book.
    Who:   Returned by every endpoint that yields a book or a list of books.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    title: str
    author: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    rating: int = 0
    price: float = 0.0
    featured: bool = False
    view_count: int = 0

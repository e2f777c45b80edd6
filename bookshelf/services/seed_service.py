"""
Bookshelf Backend — First-boot Data Seeding
=============================================

What:  Ensures an ADMIN account exists and fills an empty catalog with samples.
When:  Once during application startup, after tables are created.
How:   Both steps check before inserting, so restarting the server (or running
       several replicas) never duplicates rows.
"""

import asyncio
import logging
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookshelf.config import Settings
from bookshelf.models.book import Book
from bookshelf.models.user import Role, User
from bookshelf.services.auth_service import hash_password

logger = logging.getLogger(__name__)


SAMPLE_BOOKS: List[Dict[str, Any]] = [
    {
        "title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "publisher": "Scribner",
        "published_date": "1925-04-10",
        "description": "A story of decadence and excess, Gatsby explores the darker aspects of the Jazz Age.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=1",
        "url": "https://example.com/gatsby", "rating": 5, "price": 12.99, "featured": True,
    },
    {
        "title": "To Kill a Mockingbird", "author": "Harper Lee", "publisher": "Grand Central Publishing",
        "published_date": "1960-07-11",
        "description": "A powerful story of racial injustice and the loss of innocence in the American South.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=2",
        "url": "https://example.com/mockingbird", "rating": 4, "price": 14.99, "featured": True,
    },
    {
        "title": "1984", "author": "George Orwell", "publisher": "Signet Classic",
        "published_date": "1949-06-08",
        "description": "A dystopian novel about totalitarianism and the manipulation of truth and reality.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=3",
        "url": "https://example.com/1984", "rating": 5, "price": 11.99, "featured": True,
    },
    {
        "title": "Pride and Prejudice", "author": "Jane Austen", "publisher": "Penguin Classics",
        "published_date": "1813-01-28",
        "description": "A classic romance novel exploring themes of love, marriage, and social class.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=4",
        "url": "https://example.com/pride", "rating": 4, "price": 9.99, "featured": False,
    },
    {
        "title": "The Hobbit", "author": "J.R.R. Tolkien", "publisher": "Houghton Mifflin Harcourt",
        "published_date": "1937-09-21",
        "description": "An epic fantasy adventure following Bilbo Baggins on his journey with thirteen dwarves.",
        "category": "Fantasy", "image": "https://picsum.photos/300/400?random=5",
        "url": "https://example.com/hobbit", "rating": 5, "price": 15.99, "featured": True,
    },
    {
        "title": "The Catcher in the Rye", "author": "J.D. Salinger", "publisher": "Little, Brown and Company",
        "published_date": "1951-07-16",
        "description": "A coming-of-age story about teenage alienation and loss of innocence in post-World War II America.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=6",
        "url": "https://example.com/catcher", "rating": 3, "price": 13.99, "featured": False,
    },
    {
        "title": "Lord of the Flies", "author": "William Golding", "publisher": "Penguin Books",
        "published_date": "1954-09-17",
        "description": "A group of British boys stranded on an uninhabited island and their disastrous attempt to govern themselves.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=7",
        "url": "https://example.com/flies", "rating": 4, "price": 10.99, "featured": False,
    },
    {
        "title": "Animal Farm", "author": "George Orwell", "publisher": "Signet",
        "published_date": "1945-08-17",
        "description": "A satirical allegory of the Russian Revolution and the rise of Stalinism.",
        "category": "Fiction", "image": "https://picsum.photos/300/400?random=8",
        "url": "https://example.com/farm", "rating": 4, "price": 8.99, "featured": False,
    },
    {
        "title": "The Alchemist", "author": "Paulo Coelho", "publisher": "HarperOne",
        "published_date": "1988-01-01",
        "description": "A magical story about following your dreams and listening to your heart.",
        "category": "Fiction", "image": "",
        "url": "https://example.com/alchemist", "rating": 5, "price": 16.99, "featured": True,
    },
    {
        "title": "Brave New World", "author": "Aldous Huxley", "publisher": "Harper Perennial",
        "published_date": "1932-01-01",
        "description": "A dystopian novel about a futuristic society controlled by technology and conditioning.",
        "category": "Fiction", "image": "",
        "url": "https://example.com/brave", "rating": 4, "price": 13.99, "featured": False,
    },
]


async def ensure_admin(db: AsyncSession, username: str, password: str, rounds: int) -> bool:
    """Create the ADMIN credential if missing. Returns True when a row was added."""
    result = await db.execute(select(User.id).where(User.username == username))
    if result.scalar_one_or_none() is not None:
        return False

    password_hash = await asyncio.to_thread(hash_password, password, rounds)
    db.add(User(username=username, password_hash=password_hash, role=Role.ADMIN))
    await db.flush()
    return True


async def ensure_sample_books(db: AsyncSession) -> int:
    """Insert SAMPLE_BOOKS when the catalog is empty. Returns rows added."""
    result = await db.execute(select(func.count(Book.id)))
    if (result.scalar() or 0) > 0:
        return 0

    db.add_all([Book(**values, view_count=0) for values in SAMPLE_BOOKS])
    await db.flush()
    return len(SAMPLE_BOOKS)


async def seed_initial_data(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    """Run both seeding steps in one transaction."""
    async with session_factory() as db:
        async with db.begin():
            admin_created = await ensure_admin(
                db, settings.admin_username, settings.admin_password, settings.bcrypt_rounds
            )
            books_added = await ensure_sample_books(db)

    if admin_created:
        logger.info("Seeded admin account '%s'", settings.admin_username)
    if books_added:
        logger.info("Seeded %d sample books", books_added)

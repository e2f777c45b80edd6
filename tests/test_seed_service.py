"""
Bookshelf Backend — First-boot Seeding Tests
===============================================

What:  seed_initial_data creates the admin account and sample catalog once.
Why:   Startup runs it on every boot; a second run must be a no-op.
"""

import pytest
from sqlalchemy import func, select

from bookshelf.models.book import Book
from bookshelf.models.user import Role, User
from bookshelf.services.auth_service import verify_password
from bookshelf.services.seed_service import SAMPLE_BOOKS, seed_initial_data


async def _counts(session_factory):
    async with session_factory() as db:
        users = (await db.execute(select(func.count(User.id)))).scalar()
        books = (await db.execute(select(func.count(Book.id)))).scalar()
    return users, books


class TestSeedInitialData:

    @pytest.mark.asyncio
    async def test_seeds_admin_and_books(self, app, test_settings):
        session_factory = app.state.database.session_factory

        await seed_initial_data(session_factory, test_settings)

        assert await _counts(session_factory) == (1, len(SAMPLE_BOOKS))
        async with session_factory() as db:
            admin = (await db.execute(select(User).where(User.username == "admin"))).scalar_one()
        assert admin.role == Role.ADMIN
        assert verify_password("admin123", admin.password_hash)

    @pytest.mark.asyncio
    async def test_second_run_adds_nothing(self, app, test_settings):
        session_factory = app.state.database.session_factory

        await seed_initial_data(session_factory, test_settings)
        await seed_initial_data(session_factory, test_settings)

        assert await _counts(session_factory) == (1, len(SAMPLE_BOOKS))

    @pytest.mark.asyncio
    async def test_existing_catalog_left_alone(self, app, test_settings, test_client, auth_headers):
        await test_client.post("/api/books", json={"title": "Dune"}, headers=auth_headers)

        await seed_initial_data(app.state.database.session_factory, test_settings)

        # alice + admin, and only the one book
        assert await _counts(app.state.database.session_factory) == (2, 1)

    @pytest.mark.asyncio
    async def test_admin_can_log_in(self, app, test_settings, test_client):
        await seed_initial_data(app.state.database.session_factory, test_settings)

        response = await test_client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})

        assert response.status_code == 200
        assert response.json()["role"] == "ADMIN"

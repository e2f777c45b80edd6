"""
Bookshelf Backend — User (Credential) SQLAlchemy Model
========================================================

What:  ORM model for the `users` table: username, bcrypt hash, role.
Who:   Read and written by AuthService; seeded with an ADMIN account at first boot.

The plain-text password never reaches this table. The unique constraint on
username backs up the service-level existence check when two registrations
race.
"""

import enum

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.database import Base


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    # bcrypt output is 60 chars; leave room for a future scheme
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # native_enum=False: stored as VARCHAR + CHECK, portable across PostgreSQL and SQLite
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role.value}')>"

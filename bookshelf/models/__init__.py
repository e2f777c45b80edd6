# Models package init
"""
Bookshelf Backend — ORM Models
================================

    - book.py: Book     (`books` table)
    - user.py: User     (`users` table) and the Role enum
"""

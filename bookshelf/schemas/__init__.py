# Schemas package init
"""
Bookshelf Backend — API Schemas
=================================

Pydantic models that define the HTTP contract. Kept separate from the ORM
models so the wire format (camelCase, no password hashes) can evolve without
touching the tables.
"""

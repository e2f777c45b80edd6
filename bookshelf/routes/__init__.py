# Routes package init
"""
Bookshelf Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login, GET /api/auth/test
    - books.py:   /api/books (list, search, filters, stats, CRUD, view counter)
    - health.py:  GET  /health

Design Principle:
    Routes stay THIN: extract request data, call a service, return its result.
    Access control lives in the Request Gate middleware, business rules in
    services, and error-to-status mapping in main.register_exception_handlers.
"""

# Services package init
"""
Bookshelf Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).

Service Inventory:
    - TokenService: Issues and verifies HS256 JWTs (stateless, clock injectable)
    - AuthService: Registration and login on top of bcrypt + TokenService
    - BookService: Catalog reads, writes, defaults, and atomic view counting
    - seed_service: First-boot admin account and sample catalog

Services never import the FastAPI app or read settings on their own; the app
factory constructs the configured ones (TokenService, AuthService) and the
stateless BookService is a shared module-level instance.
"""

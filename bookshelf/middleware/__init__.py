# Middleware package init
"""
Bookshelf Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Auth Gate] → Route Handler

    Why this order:
    1. Request ID first: every later log line, including gate rejections,
       carries the correlation ID
    2. Logging: records the final status, so 401s from the gate show up
    3. CORS outside the gate: preflight requests are answered before any token
       check, and 401 responses still carry CORS headers for the browser
    4. Auth Gate last: decides just before routing
"""

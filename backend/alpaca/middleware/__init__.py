# Middleware package init
"""
Alpaca API — Middleware Package
================================

What:  Cross-cutting concerns applied to every request.
Why:   Tracing and access logging apply to every route without repeating code
       in each handler.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID is stored in a ContextVar and echoed in X-Request-ID
    - Logging records method, path, status and duration with that ID
    - CORS answers preflight OPTIONS requests for browser clients
"""

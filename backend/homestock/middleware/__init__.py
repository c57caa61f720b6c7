# Middleware package init
"""
HomeStock Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID stored in a ContextVar for log lines and
       error bodies, echoed back in the X-Request-ID header
    2. Logging: one access line per request with status and duration
"""

"""
Todo API - Middleware Package
=============================

Middleware Chain (request direction):
    [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is assigned first, so every response (429s included)
    carries X-Request-ID; rate limiting still rejects before any route work.
"""

# Middleware package init
"""
Sparkz Backend: Middleware Package
===================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Body Limit] → [GZip] → [CORS] → Route

    - Request ID runs first so every later log line carries the id
    - Logging records the final status, including 413s from the body limit
    - Body Limit rejects oversized requests before the body is read
"""

# Middleware package init
"""
Email Builder Backend — Middleware Package
===========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → [Unexpected Error] → Route Handler

    - Request ID runs first so every log line of the request can carry it
    - Access Log measures duration and status on the way back out
    - CORS answers preflight requests before they reach a route
    - Unexpected Error sits inside CORS so generic 500s keep CORS headers
"""

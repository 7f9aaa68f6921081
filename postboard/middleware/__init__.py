# Middleware package init
"""
Postboard Backend — Middleware Package
========================================

Middleware Chain (request direction):
    Request → [CORS] → [Request ID] → [Logging] → [Auth] → Route / GraphQL

    1. Request ID first, so every later log line can carry it
    2. Logging wraps Auth, so the access line can name the caller
    3. Auth decodes the bearer token into request.state.identity; it never
       rejects a request
"""

# Middleware package init
"""
Edward Backend — Middleware Package
=====================================

Middleware Chain (first to last on the way in):
    Request → [Rate Limit] → [Request ID] → [Access Logging] → [GZip] → [CORS] → Route

    1. Rate limit first: reject a runaway client before any work is done
    2. Request ID: correlation id for every later log line and error body
    3. Access logging: one line per request with status and duration
"""

# Middleware package init
"""
ScorePress Backend — Middleware Package
=========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first, so the access log line and error envelopes share it
    2. Logging wraps everything below it, so duration includes upstream fetches
    3. CORS (FastAPI's CORSMiddleware) answers browser preflights

Responses pass back through the chain in reverse order.
"""

"""
ScorePress Backend — Application Package Initializer
=====================================================

What: Marks the `scorepress` directory as a Python package.
Why:  Enables module imports like `from scorepress.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows the same layered shape for every endpoint:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, fetch, compose
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Mongo documents + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Upstream HTTP (I/O)    │  ← pymongo async, httpx
    └─────────────────────────────────────┘

    Routes never talk to MongoDB or remote hosts directly; they receive
    handles (collection, HTTP client) through FastAPI dependencies and pass
    them to services.
"""

__version__ = "1.0.0"

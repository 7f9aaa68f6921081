"""
Postboard Backend — Application Package Initializer
====================================================

What: Marks the `postboard` directory as a Python package.
Who:  Imported by uvicorn (postboard.main:app), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes (REST) + GraphQL resolvers │  ← transport concerns only
    ├─────────────────────────────────────┤
    │   Middleware (request ID, auth)     │  ← per-request identity
    ├─────────────────────────────────────┤
    │   Services + Validation             │  ← ownership, credentials, rules
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

"""
HomeStock Backend — Application Package Initializer
====================================================

What: Marks the `homestock` directory as a Python package.
Why:  Enables module imports like `from homestock.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows the same layered layout for every request:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Orchestration)    │  ← upload → persist → respond
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← single-record CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes handle status codes and form parsing, services coordinate the image
    host and the database, repositories own every query.
"""

__version__ = "1.0.0"

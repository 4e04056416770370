"""
Email Builder Backend — Application Package Initializer
========================================================

What: Marks the `emailbuilder` directory as a Python package.
Who:  Imported by uvicorn (`emailbuilder.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a thin layered CRUD service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← status codes, body parsing
    ├─────────────────────────────────────┤
    │   Repository / Upload client        │  ← store calls, error translation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   TemplateStore / Cloudinary SDK    │  ← external collaborators
    └─────────────────────────────────────┘

    The store and the upload client are built once in the application
    lifespan and handed to routes through FastAPI dependencies.
"""

__version__ = "1.0.0"

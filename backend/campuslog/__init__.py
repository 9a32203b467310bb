"""
CampusLog Backend — Application Package Initializer
===================================================

What: Marks the `campuslog` directory as a Python package.
Why:  Enables module imports like `from campuslog.config import settings`.
Who:  Used by uvicorn (`campuslog.main:app`), Alembic, and pytest.

Architecture Note:
    The backend treats a spreadsheet as a row-oriented datastore and a
    file-storage service as a blob store:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Domain Services (Trip, File…)   │  ← Required fields, row layouts
    ├─────────────────────────────────────┤
    │  Tabular Record Store │ Blob Store  │  ← find / append / merge / upload
    ├─────────────────────────────────────┤
    │ Google Sheets / SQL │ Drive / Disk  │  ← Interchangeable backends
    └─────────────────────────────────────┘

    Every backend client is built once at startup (see container.py) and
    handed to the services that need it. Nothing is cached in-process:
    every read goes back to the backing service.
"""

__version__ = "1.0.0"

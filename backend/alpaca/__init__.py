"""
Alpaca API — Application Package Initializer
=============================================

What: Marks the `alpaca` directory as a Python package.
Who:  Imported by uvicorn (`alpaca.main:app`), pytest and the `alpaca-api` script.

Architecture Note:
    The backend is a thin layered CRUD service:

    ┌─────────────────────────────────────┐
    │   Routes + RecordEndpointMaker      │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   RecordService (per collection)    │  ← one driver call per operation
    ├─────────────────────────────────────┤
    │   Document shapes (pydantic)        │  ← id, validity, insertion prep
    ├─────────────────────────────────────┤
    │   Database (pymongo async client)   │  ← lazily created, shared
    └─────────────────────────────────────┘
"""

__version__ = "0.1.0"

# app/__init__.py
"""
Customer / invoice / telephone-number API.

Re-exports the FastAPI instance so the server can be started with:
    uvicorn app:app --reload
"""

from .main import app

__all__ = ["app"]

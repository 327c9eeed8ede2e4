"""
Firebase-backed Todo API package.

Exposes the application factory for convenience imports
(``from src.todo_api import create_app``).
"""

from .main import create_app, run  # noqa: F401

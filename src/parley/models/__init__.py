# src/parley/models/__init__.py
"""SQLAlchemy models for the Parley application."""

from .message import Message

__all__ = ["Message"]

# utils/__init__.py
"""General utilities for SL Score."""

from .logging import setup_logging

__all__ = ["setup_logging"]

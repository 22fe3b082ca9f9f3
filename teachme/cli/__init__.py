"""Terminal presentation layer for TeachMe."""

from .app import app, main

__all__ = ["app", "main"]

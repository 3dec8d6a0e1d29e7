"""Command-line entry points."""

from .main import main

__all__ = ["main"]

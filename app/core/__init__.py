"""Core module for the link shortener application."""

from app.core.config import settings

__all__ = ["settings"]

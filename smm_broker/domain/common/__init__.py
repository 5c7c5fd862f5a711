"""Shared abstractions used across domain modules."""

from .repository import AsyncRepository

__all__ = ["AsyncRepository"]

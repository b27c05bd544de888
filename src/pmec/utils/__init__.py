"""Utility modules for PMEC."""

from . import text

__all__ = ['text']

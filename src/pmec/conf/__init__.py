"""CONF file reading for PMEC."""

from .config import Config

__all__ = ['Config']

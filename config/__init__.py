"""Configuration package for the weather dashboard API."""

from .settings import settings
from .logging import setup_logging

__all__ = ["settings", "setup_logging"]

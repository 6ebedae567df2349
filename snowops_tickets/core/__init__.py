"""Configuration and logging setup."""

from .config import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""Configuration package: settings, logging and the database handle."""

from dairy_ops.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]

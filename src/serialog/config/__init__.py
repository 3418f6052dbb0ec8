"""Configuration management for serialog."""

from .settings import LayoutSettings, get_settings, reset_settings

__all__ = ["LayoutSettings", "get_settings", "reset_settings"]

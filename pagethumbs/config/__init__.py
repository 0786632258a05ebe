"""Configuration helpers for pagethumbs.

Expose `get_settings` as the canonical accessor for environment-driven
configuration. Modules should avoid loading `.env` directly and instead
import from this package to retrieve typed snapshots.
"""

from .settings import LoggingSettings, PagethumbsSettings, RasterizerSettings, get_settings


__all__ = ["LoggingSettings", "PagethumbsSettings", "RasterizerSettings", "get_settings"]

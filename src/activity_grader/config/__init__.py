"""
Configuration module.

Handles loading of portal, scorer, polling and report settings.
"""

from .loader import ConfigLoader
from .models import PortalConfig, BackendSettings, ScorerSettings, PollingSettings, ReportSettings

__all__ = [
    "ConfigLoader",
    "PortalConfig",
    "BackendSettings",
    "ScorerSettings",
    "PollingSettings",
    "ReportSettings",
]

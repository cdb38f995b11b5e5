"""Schema definitions for the settings document."""

from typing import Any, Dict, TypedDict

from config.config import DEFAULT_REFRESH_INTERVAL_MS, DEFAULT_THEME


class DashboardSettings(TypedDict):
    refreshInterval: int  # milliseconds
    theme: str


class SettingsDocument(TypedDict):
    measurements: Dict[str, Dict[str, Any]]  # measurement name -> free-form settings
    dashboard: DashboardSettings


def default_settings() -> SettingsDocument:
    """Document written on first boot."""
    return SettingsDocument(
        measurements={},
        dashboard=DashboardSettings(
            refreshInterval=DEFAULT_REFRESH_INTERVAL_MS,
            theme=DEFAULT_THEME,
        ),
    )

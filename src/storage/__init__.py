"""Settings document persistence."""

from .settings_store import JsonFileSettingsStore, SettingsStore, SettingsStoreError

__all__ = ["JsonFileSettingsStore", "SettingsStore", "SettingsStoreError"]

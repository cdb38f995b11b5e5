"""Persistence for the dashboard settings document."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

from config.schemas import default_settings
from utils.io import read_json, write_json_atomic
from utils.logging import get_logger

logger = get_logger(__name__)


class SettingsStoreError(Exception):
    """Raised when the settings document cannot be read or written."""


class SettingsStore(ABC):
    """Narrow read/replace/patch interface over one JSON document.

    Request handlers depend only on this interface, so the backing storage
    can change without touching them. There is no locking: two concurrent
    patches may race and one of them can be lost.
    """

    @abstractmethod
    def initialize(self) -> bool:
        """Create the document with defaults if absent. Returns True if created."""

    @abstractmethod
    def read(self) -> Any:
        """Return the full document."""

    @abstractmethod
    def replace(self, document: Dict[str, Any]) -> None:
        """Overwrite the full document."""

    def patch_measurement(self, name: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``partial`` into the settings of one measurement.

        Keys in ``partial`` are added or overwritten; sibling keys already
        stored for the measurement are kept. Nested objects are replaced, not
        merged.

        Args:
            name: Measurement name
            partial: Keys to set for this measurement

        Returns:
            The merged settings object for ``name``.
        """
        document = self.read()
        if not isinstance(document, dict):
            raise SettingsStoreError("Settings document is not a JSON object")

        measurements = document.get("measurements")
        if not isinstance(measurements, dict):
            measurements = {}
            document["measurements"] = measurements

        current = measurements.get(name)
        merged = {**(current if isinstance(current, dict) else {}), **partial}
        measurements[name] = merged

        self.replace(document)
        return merged


class JsonFileSettingsStore(SettingsStore):
    """Settings document kept as a pretty-printed JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def initialize(self) -> bool:
        if self.path.exists():
            return False
        self.replace(dict(default_settings()))
        logger.info(f"Created default settings file at {self.path}")
        return True

    def read(self) -> Any:
        try:
            document = read_json(self.path)
        except FileNotFoundError as e:
            raise SettingsStoreError(f"Settings file not found: {self.path}") from e
        except ValueError as e:
            raise SettingsStoreError(f"Settings file is not valid JSON: {e}") from e
        except OSError as e:
            raise SettingsStoreError(str(e)) from e
        return document

    def replace(self, document: Dict[str, Any]) -> None:
        try:
            write_json_atomic(self.path, document)
        except (OSError, TypeError, ValueError) as e:
            raise SettingsStoreError(str(e)) from e

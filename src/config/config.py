"""Project-wide single-source configuration constants for the dashboard backend."""

from pathlib import Path
from utils.path_utils import find_repo_root

# ----- Base directory configuration -------
PROJECT_ROOT = find_repo_root()
ENV_FILE_PATH: Path = PROJECT_ROOT / ".env"

# ------ Local persistence -------
SETTINGS_PATH: Path = PROJECT_ROOT / "settings.json"
STATIC_DIR: Path = PROJECT_ROOT / "public"
SETTINGS_JSON_INDENT: int = 2

# ------ Settings document defaults -------
DEFAULT_REFRESH_INTERVAL_MS: int = 30000   # dashboard auto-refresh, milliseconds
DEFAULT_THEME: str = "dark"

# ------ HTTP service -------
DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 3000
DEFAULT_LOG_LEVEL: str = "INFO"
API_TITLE: str = "InfluxDB Dashboard API"
API_VERSION: str = "1.0.0"

# ------ Upstream (InfluxDB 2.x) protocol -------
FLUX_CONTENT_TYPE: str = "application/vnd.flux"
CSV_ACCEPT: str = "application/csv"
JSON_ACCEPT: str = "application/json"
AUTH_SCHEME: str = "Token"
QUERY_ENDPOINT: str = "query"
BUCKETS_ENDPOINT: str = "buckets"

# ------ Query templates -------
DEVICE_TAG: str = "device_name"           # tag holding the device identifier
DEVICE_LOOKBACK: str = "-30d"             # range scanned when filtering measurements by device

"""Configuration models loaded once from the environment at startup."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from config.config import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    ENV_FILE_PATH,
    SETTINGS_PATH,
    STATIC_DIR,
)
from utils.logging import get_logger

logger = get_logger(__name__)


def load_env_file(path: Path = ENV_FILE_PATH) -> bool:
    """Load a ``.env`` file into the process environment.

    Variables already present in the environment win over the file.
    """
    from dotenv import load_dotenv

    return load_dotenv(path, override=False)


@dataclass(frozen=True)
class InfluxConfig:
    """Connection details for the upstream InfluxDB query API."""
    base_url: str = ""
    bucket: str = ""
    organization: str = ""
    token: str = field(default="", repr=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InfluxConfig":
        env = os.environ if environ is None else environ
        config = cls(
            base_url=env.get("INFLUX_BASE_URL", "").rstrip("/"),
            bucket=env.get("INFLUX_BUCKET", ""),
            organization=env.get("INFLUX_ORGANIZATION", ""),
            token=env.get("INFLUX_TOKEN", ""),
        )
        for name in config.missing():
            logger.warning(f"{name} is not set; upstream requests may fail")
        return config

    def missing(self) -> Tuple[str, ...]:
        """Names of the environment variables left empty."""
        values = {
            "INFLUX_BASE_URL": self.base_url,
            "INFLUX_BUCKET": self.bucket,
            "INFLUX_ORGANIZATION": self.organization,
            "INFLUX_TOKEN": self.token,
        }
        return tuple(name for name, value in values.items() if not value)

    def public_view(self) -> dict:
        """Subset safe to hand to dashboard clients (never the token)."""
        return {"bucket": self.bucket, "organization": self.organization}


@dataclass(frozen=True)
class ServiceConfig:
    """Configuration for the HTTP service layer."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    settings_path: Path = SETTINGS_PATH
    static_dir: Optional[Path] = STATIC_DIR
    log_level: str = DEFAULT_LOG_LEVEL
    cors_origins: Tuple[str, ...] = ()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ

        port_raw = env.get("PORT", "")
        try:
            port = int(port_raw) if port_raw else DEFAULT_PORT
        except ValueError:
            logger.warning(f"Invalid PORT {port_raw!r}; falling back to {DEFAULT_PORT}")
            port = DEFAULT_PORT

        origins = tuple(
            o.strip() for o in env.get("CORS_ORIGINS", "").split(",") if o.strip()
        )
        return cls(
            host=env.get("HOST", DEFAULT_HOST),
            port=port,
            settings_path=Path(env.get("SETTINGS_FILE") or SETTINGS_PATH),
            static_dir=Path(env.get("STATIC_DIR") or STATIC_DIR),
            log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            cors_origins=origins,
        )

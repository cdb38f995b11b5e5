"""Entry point for the InfluxDB dashboard backend."""

import argparse
from typing import Optional, Sequence

from config.models import InfluxConfig, ServiceConfig, load_env_file
from service.api.dashboard_api import create_app
from utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="InfluxDB dashboard backend")
    parser.add_argument("--host", help="Bind address (overrides HOST)")
    parser.add_argument("--port", type=int, help="Listening port (overrides PORT)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    import uvicorn

    args = parse_args(argv)

    load_env_file()
    service_config = ServiceConfig.from_env()
    setup_logging(level=service_config.log_level, log_file=args.log_file)
    influx_config = InfluxConfig.from_env()

    host = args.host or service_config.host
    port = args.port or service_config.port

    app = create_app(influx_config, service_config)

    logger.info(f"InfluxDB Dashboard running at http://localhost:{port}")
    logger.info(f"Connected to InfluxDB: {influx_config.base_url}")
    logger.info(f"Bucket: {influx_config.bucket}")

    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()

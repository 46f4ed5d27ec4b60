"""
Main entry point for GradePilot.
"""

import logging
import threading
import time
from typing import Optional

from .api.rest_api import GradePilotRestAPI
from .config import EngineSettings, load_config
from .persistence import InMemoryGradeRepository
from .services import GradeService


logger = logging.getLogger(__name__)


class GradePilotPlatform:
    """Wires the repository, grade service and REST API together."""

    def __init__(self, config: Optional[dict] = None):
        self._config = config or {}
        self._repository = None
        self._grade_service = None
        self._rest_api = None
        self._rest_thread = None
        self._running = False

        self._initialize_platform()

    @property
    def repository(self) -> InMemoryGradeRepository:
        return self._repository

    @property
    def grade_service(self) -> GradeService:
        return self._grade_service

    @property
    def app(self):
        return self._rest_api.app

    def _initialize_platform(self):
        """Initialize the platform with all services."""
        logger.info("Initializing GradePilot platform...")

        settings = EngineSettings.from_dict(self._config.get('engine', {}))
        logger.info("Engine settings loaded: term_rule=%s gpa_precision=%d",
                    settings.term_rule.value, settings.gpa_precision)

        self._repository = InMemoryGradeRepository()
        self._grade_service = GradeService(self._repository, settings)
        self._rest_api = GradePilotRestAPI(self._repository, self._grade_service)

        logger.info("GradePilot platform initialized")

    def start_rest_server(self, host: str = "0.0.0.0", port: int = 8000):
        """Start the REST server in a background thread."""
        import uvicorn

        def run_server():
            uvicorn.run(
                self._rest_api.app,
                host=host,
                port=port,
                log_level="info"
            )

        self._rest_thread = threading.Thread(target=run_server, daemon=True)
        self._rest_thread.start()
        self._running = True

        logger.info("REST server started on %s:%d (docs at /docs)", host, port)

    def stop_platform(self):
        """Stop the platform."""
        if not self._running:
            logger.info("Platform not running")
            return
        self._running = False
        logger.info("GradePilot platform stopped")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="GradePilot grade aggregation service")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="REST server host")
    parser.add_argument("--rest-port", type=int, default=8000, help="REST server port")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    platform = GradePilotPlatform(config)

    try:
        platform.start_rest_server(args.host, args.rest_port)
        logger.info("Platform is running. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        platform.stop_platform()


if __name__ == "__main__":
    main()

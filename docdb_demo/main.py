import logging
import sys
from typing import Optional

from docdb_demo.config import Settings, settings as default_settings
from docdb_demo.errors import DemoError
from docdb_demo.models.options import ClientOptionsBuilder
from docdb_demo.services.connection import close_client, create_client
from docdb_demo.services.demo import run_demo

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )


def main(settings: Optional[Settings] = None) -> int:
    """Run the demo once; returns the process exit status"""
    settings = settings or default_settings
    configure_logging(settings)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    try:
        options = ClientOptionsBuilder.from_settings(settings).build()
        client = create_client(options)
    except DemoError as e:
        logger.error(f"Could not connect: {e.message}")
        return 1

    try:
        report = run_demo(client, settings)
    except DemoError as e:
        logger.error(f"Demo failed: {e.message}")
        return 1
    finally:
        close_client(client)

    logger.info(f"Demo finished in {sum(s.execution_time_ms for s in report.steps):.2f}ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())

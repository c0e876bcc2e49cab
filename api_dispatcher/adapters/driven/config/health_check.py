"""Configuration self-check for container orchestration."""

import logging

from api_dispatcher.adapters.driven.batch.decoder import load_batch_file
from api_dispatcher.adapters.driven.config.settings import load_settings
from api_dispatcher.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run configuration check.

    Validates:
    - Environment variables hold valid values.
    - The configured batch file, if any, exists and decodes.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        if settings.batch_file_path:
            batch = load_batch_file(settings.batch_file_path)
            logger.info(f"Batch file holds {len(batch)} requests")
    except Exception as exc:
        logger.error(f"Dispatcher healthcheck FAILED: {exc}")
        return 1

    logger.info("Dispatcher healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

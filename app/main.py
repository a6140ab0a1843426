"""
Telegram Bot Entry Point for Telexpenses

Loads settings, configures logging, connects the storage backend
(applying migrations for Postgres), and long-polls Telegram until
interrupted.

Run from the repository root with:
    python -m app.main
"""

import sys

import structlog
from pydantic import ValidationError

from telexpenses.audit import configure_logging
from telexpenses.config import get_settings, validate_all_settings
from telexpenses.orchestrator import create_app_components
from telexpenses.services.storage import StorageError
from telexpenses.transport import TelegramTransport


def main() -> int:
    """Main application entry point."""
    try:
        app_settings = get_settings().app
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(app_settings.log_level, json_output=app_settings.log_json)
    logger = structlog.get_logger("telexpenses.main")

    # Fail early, with every problem listed at once
    status = validate_all_settings()
    errors = {k: v for k, v in status.items() if k.endswith("_error")}
    if errors:
        for key, error in errors.items():
            logger.error("invalid_configuration", setting=key[: -len("_error")], error=error)
        return 1

    telegram_settings = get_settings().telegram

    try:
        components = create_app_components()
    except StorageError as e:
        logger.error("storage_unavailable", backend=app_settings.storage_backend, error=str(e))
        return 1

    logger.info(
        "starting",
        environment=app_settings.app_environment,
        backend=app_settings.storage_backend,
    )

    transport = TelegramTransport(components.dispatcher, components.audit_logger)
    try:
        transport.run(telegram_settings.apitoken, poll_timeout=telegram_settings.poll_timeout)
    finally:
        components.close()
        logger.info("stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())

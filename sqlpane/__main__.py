"""
Command line entry point: `sqlpane` or `python -m sqlpane`.
"""
import sys
from pathlib import Path

from sqlpane.core.config import get_settings
from sqlpane.core.logging_config import get_logger, setup_logging


def main() -> int:
    """
    Load settings, configure logging and run the client.

    Returns:
        Process exit code (0 for every intentional quit)
    """
    settings = get_settings()
    setup_logging(settings.log_level, Path(settings.log_file))
    logger = get_logger(__name__)
    logger.info(f"Starting {settings.app_name}")

    # Imported here so that logging is configured before the UI modules load
    from sqlpane.ui.app import SqlPaneApp
    from sqlpane.ui.state import DatabaseClientUI

    app = SqlPaneApp(DatabaseClientUI.create(settings))
    app.run()

    logger.info(f"{settings.app_name} exited with code {app.return_code or 0}")
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())

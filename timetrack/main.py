"""Main entry point for Time Tracking application."""

import logging
import os
import sys

from timetrack.ui.application import Application


def configure_logging() -> None:
    """
    Send log records to stderr; DEBUG if ``TIMETRACK_DEBUG`` is set.
    """
    level = logging.DEBUG if os.environ.get("TIMETRACK_DEBUG") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    """
    Run the Time Tracking application.
    """
    configure_logging()
    application = Application()
    sys.exit(application.run())


if __name__ == "__main__":
    main()

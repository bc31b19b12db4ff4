"""
Main entry point for the ChopChop application.

This module reports the active configuration, runs the requested CLI
command and closes database connections on the way out.
"""

import logging
import sys
import traceback

from src.services.database import close_connections
from src.utils.config import get_config
from src.utils.recipe_cli import main as cli_main

logger = logging.getLogger(__name__)


def main(argv=None):
    """
    Main application entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
    """
    config = get_config()
    logger.info(f"Starting {config.app_name} v{config.app_version} ({config.environment})")

    try:
        exit_code = cli_main(argv)
    except Exception as e:
        print(f"ERROR: {config.app_name} crashed: {e}")
        traceback.print_exc()
        exit_code = 1
    finally:
        close_connections()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

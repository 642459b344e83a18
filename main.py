"""
Calli entry point.

Runs the operator console either against the in-memory mock backend or
against the live booking API configured by ``API_BASE``.

Usage:
    Mock backend:  python main.py console
    Live backend:  python main.py live
"""

import asyncio
import logging
import sys

from calli.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode(live: bool) -> None:
    from console_demo import ConsoleSession

    session = ConsoleSession(live=live)
    asyncio.run(session.run())


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "console"
    if mode not in ("console", "live"):
        print(f"Unknown mode {mode!r}; use 'console' or 'live'")
        sys.exit(2)
    logger.info("Starting %s in %s mode", settings.app_name, mode)
    _run_console_mode(live=mode == "live")

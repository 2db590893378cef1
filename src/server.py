"""Protean Engine runner for the laundry domain.

Processes Order events asynchronously when ``event_processing = "async"``:
projectors (available orders, order summaries) plus the notification and
refund handlers.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages and exit
"""

import argparse
import sys

from laundry.domain import laundry
from laundry.utils.logging import configure_logging
from protean.server.engine import Engine


def main():
    parser = argparse.ArgumentParser(description="FreshDrop Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    parser.add_argument("--debug", action="store_true", help="Log engine internals")
    args = parser.parse_args()

    configure_logging()
    laundry.init()

    engine = Engine(laundry, test_mode=args.test_mode, debug=args.debug)
    engine.run()
    sys.exit(engine.exit_code)


if __name__ == "__main__":
    main()

"""Protean Engine runner for the logistics domain.

Needed when events are processed asynchronously (the production overlay):
the Engine delivers Deal events to the DealOrigin projector and the chat
notification handler.

Usage:
    python src/server.py
    python src/server.py --test-mode   # process pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


async def run(test_mode: bool) -> None:
    from logistics.domain import logistics
    from logistics.utils.logging import configure_logging

    configure_logging()
    logistics.init()
    engine = Engine(logistics, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="RouteShare Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()

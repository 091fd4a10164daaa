"""
Seed the board with random pins from the configured image source.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pinboard.config import get_settings
from pinboard.dependencies import get_gateway
from pinboard.random_pin import RandomPinGenerator

logger = logging.getLogger(__name__)


async def seed(generator: RandomPinGenerator, count: int) -> int:
    created = 0
    for i in range(count):
        result = await generator.generate()
        if result.value is None:
            logger.error("Pin %d/%d failed: %s", i + 1, count, result.error.message)
            continue
        created += 1
        if result.error is not None:
            logger.warning(
                "Pin %s created without image: %s", result.value.id, result.error.message
            )
        else:
            logger.info("Created pin %s (%s)", result.value.id, result.value.title)
    return created


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed random pins")
    parser.add_argument(
        "-n",
        "--num",
        type=int,
        default=10,
        help="How many pins to create",
    )
    parser.add_argument(
        "--source-url",
        type=str,
        default=None,
        help="Override the random image URL template ({width}/{height})",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    settings = get_settings()
    generator = RandomPinGenerator(
        get_gateway(),
        args.source_url or settings.random_pin_source_url,
        timeout=settings.request_timeout_seconds,
        author=settings.default_author,
        board=settings.default_board,
    )

    created = asyncio.run(seed(generator, args.num))
    logger.info("Created %d of %d pins", created, args.num)
    return 0 if created == args.num else 1


if __name__ == "__main__":
    sys.exit(main())

"""CLI tool for managing the face gallery."""
import argparse
import asyncio
import sys

from attendance.core.config import settings
from attendance.core.exceptions import ProviderError
from attendance.core.logging import get_logger, setup_logging
from attendance.infrastructure.vision import RekognitionVisionProvider

logger = get_logger(__name__)


async def run(command: str) -> int:
    provider = RekognitionVisionProvider()
    try:
        if command == "ensure":
            await provider.ensure_gallery()
            logger.info("Gallery ready", collection_id=settings.COLLECTION_ID)
        else:
            for external_id in sorted(await provider.list_enrolled_ids()):
                print(external_id)
    except ProviderError as e:
        logger.error("Gallery command failed", command=command, error=str(e))
        return 1
    finally:
        await provider.cleanup()
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Manage the face gallery")
    parser.add_argument(
        "command",
        choices=["ensure", "list"],
        help="'ensure' creates the gallery if missing, 'list' prints enrolled external ids"
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run(args.command)))


if __name__ == "__main__":
    main()

"""
Content build step.

Usage:
    steadcore-build                       Verify $CONFIG_PATH, write snapshots there
    steadcore-build --config-path PATH    Verify another content folder
    steadcore-build --check               Verify only, write nothing

Exits with status 1 and prints where the problem is when content fails
verification.
"""

import argparse
import logging
import sys
from pathlib import Path

from steadcore.config import get_settings
from steadcore.services.rules import (
    VerifError,
    write_binary_snapshot,
    write_json_snapshot,
    yaml_and_verify,
)

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Verify game content and write config snapshots",
        prog="steadcore-build",
    )
    parser.add_argument(
        "--config-path", default=settings.CONFIG_PATH, help="Content folder to verify"
    )
    parser.add_argument(
        "--out-dir", help="Where to write snapshots (defaults to the content folder)"
    )
    parser.add_argument("--check", action="store_true", help="Verify only, write nothing")
    args = parser.parse_args(argv)

    try:
        config = yaml_and_verify(args.config_path, settings)
    except VerifError as e:
        print(e.report(), file=sys.stderr)
        return 1

    print(
        f"I like all {len(config.possession_archetypes)} items "
        f"and {len(config.plant_archetypes)} plants!"
    )
    if args.check:
        return 0

    out_dir = Path(args.out_dir or args.config_path)
    out_dir.mkdir(parents=True, exist_ok=True)
    write_json_snapshot(config, out_dir / settings.JSON_SNAPSHOT_NAME)
    write_binary_snapshot(config, out_dir / settings.BINARY_SNAPSHOT_NAME)
    logger.info("Snapshots written: dir=%s", out_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())

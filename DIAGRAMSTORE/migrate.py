"""Open the configured storage, applying pending migrations and bootstrap.

Command-line arguments:
- --config: Path to an alternative config.yaml (optional)
- --status: Only report the embedded store's version and pending steps
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from DIAGRAMSTORE.config import load_config
from DIAGRAMSTORE.storage import EmbeddedStore, open_storage
from DIAGRAMSTORE.storage.embedded.migrations import MigrationRunner
from DIAGRAMSTORE.utils.error_handling import StorageError
from DIAGRAMSTORE.utils.logging import get_logger, setup_logging_from_config

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Bring the configured diagram storage up to date.",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument(
        "--status",
        action="store_true",
        help="Report the embedded store's version and pending migrations without applying them",
    )
    return parser.parse_args(argv)


def report_status(path: str) -> List[str]:
    """One line per fact about the embedded store at `path`."""
    store = EmbeddedStore(path)
    store.connect()
    try:
        runner = MigrationRunner(store)
        lines = [f"Version: {store.get_version()} of {runner.latest_version}"]
        lines.extend(f"Pending {version}: {step.description}" for version, step in runner.pending())
        return lines
    finally:
        store.close()


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging_from_config(config.get("logging", {}))
    storage_config = config.get("storage", {})

    if args.status:
        if storage_config.get("backend", "embedded") != "embedded":
            logger.error("--status only applies to the embedded backend")
            return 2
        path = (storage_config.get("embedded") or {}).get("path", "data/diagrams.db")
        for line in report_status(path):
            print(line)
        return 0

    try:
        storage = await open_storage(storage_config)
    except StorageError as e:
        logger.error(f"Storage could not be opened: {e}")
        return 1
    try:
        config_row = await storage.get_config()
        print(f"Storage ready ({storage.name}); default diagram: {config_row.default_diagram_id!r}")
    finally:
        await storage.close()
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()

"""Applies pending migration steps to an embedded store."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from DIAGRAMSTORE.utils.error_handling import (
    ErrorContext,
    MigrationError,
    StorageError,
    log_error_with_context,
)
from DIAGRAMSTORE.utils.logging import get_logger

from .registry import MIGRATIONS
from .types import MigrationStep

if TYPE_CHECKING:
    from ..store import EmbeddedStore

logger = get_logger(__name__)


class MigrationRunner:
    """Brings an embedded store from its stored version to the latest one.

    Each step runs in its own transaction together with the version write, so
    a failing step leaves the store exactly at the previous version.
    """

    def __init__(self, store: "EmbeddedStore", migrations: Optional[Sequence[MigrationStep]] = None):
        self.store = store
        self.migrations: List[MigrationStep] = list(MIGRATIONS if migrations is None else migrations)

    @property
    def latest_version(self) -> int:
        return len(self.migrations)

    def pending(self) -> List[Tuple[int, MigrationStep]]:
        current = self.store.get_version()
        return [
            (version, step)
            for version, step in enumerate(self.migrations, start=1)
            if version > current
        ]

    def run(self) -> int:
        """Apply every pending step in ascending order. Returns the new version."""
        current = self.store.get_version()
        if current > self.latest_version:
            raise StorageError(
                f"Store is at version {current}, newer than the latest known version {self.latest_version}"
            )

        pending = self.pending()
        if not pending:
            logger.debug(f"Embedded store already at version {current}")
            return current

        logger.info(f"Migrating embedded store from version {current} to {self.latest_version}")
        for version, step in pending:
            self._apply(version, step)
        return self.latest_version

    def _apply(self, version: int, step: MigrationStep) -> None:
        try:
            with self.store.transaction():
                if step.collections is not None:
                    self.store.apply_shape(step.collections)
                for data_transform in step.transforms:
                    rewritten = self.store.rewrite(data_transform.collection, data_transform.transform)
                    logger.debug(
                        f"Version {version}: rewrote {rewritten} document(s) in {data_transform.collection}"
                    )
                for collection in step.clears:
                    self.store.clear(collection)
                self.store.set_version(version)
        except Exception as e:
            log_error_with_context(
                e,
                ErrorContext(
                    operation="migrate",
                    additional_context={"version": version, "description": step.description},
                ),
            )
            raise MigrationError(version, step.description, e) from e

        logger.info(f"Applied migration {version} ({step.kind}): {step.description}")

"""SQLite access for the record service."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from backend.models.columns import ALL_MAPPINGS
from DIAGRAMSTORE.utils.logging import get_logger

logger = get_logger(__name__)


class RecordDatabase:
    """Relational store behind the REST API.

    Every unit of work opens its own connection; `transaction()` commits on
    success and rolls back on any exception.
    """

    def __init__(self, path: str):
        self.path = str(path)

    def connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.path)
        connection.row_factory = sqlite3.Row
        return connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Connection whose statements commit or roll back together.

        Example:
            with database.transaction() as conn:
                conn.execute("DELETE FROM areas WHERE diagram_id = ?", (diagram_id,))
        """
        connection = self.connect()
        try:
            yield connection
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def init_schema(self) -> None:
        """Create every table and index that does not exist yet."""
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self.transaction() as conn:
            for mapping in ALL_MAPPINGS:
                for statement in mapping.ddl():
                    conn.execute(statement)
        logger.info(f"Record database ready at {self.path}")

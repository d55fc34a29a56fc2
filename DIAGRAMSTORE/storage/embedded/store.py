"""SQLite-backed document store used by the embedded backend.

Every collection is a table of `(pk, doc)` rows where `doc` is the JSON
document and `pk` is the document's key attribute as text. Indexed
attributes become expression indexes over `json_extract(doc, '$.attr')`.
Row ids preserve insertion order, which is the natural order of every
listing.

All methods are synchronous and guarded by a re-entrant lock; the embedded
adapter runs them in a worker thread.
"""

from __future__ import annotations

import json
import re
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from DIAGRAMSTORE.utils.error_handling import StorageError, TransportError, ValidationError
from DIAGRAMSTORE.utils.logging import get_logger

from .migrations.types import CollectionSchema, Document, DocumentTransform

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_INDEX_PREFIX = "idx_"

_META_DDL = (
    "CREATE TABLE IF NOT EXISTS _meta (key TEXT PRIMARY KEY, value TEXT NOT NULL)",
    "CREATE TABLE IF NOT EXISTS _collections ("
    "name TEXT PRIMARY KEY, key_path TEXT NOT NULL, indexes TEXT NOT NULL)",
)


def _identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise StorageError(f"Invalid identifier: {name!r}")
    return name


def _index_name(collection: str, attribute: str) -> str:
    return f"{_INDEX_PREFIX}{collection}_{attribute}"


class EmbeddedStore:
    """Document collections in one SQLite file."""

    def __init__(self, path: str):
        self.path = str(path)
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self._schemas: Dict[str, CollectionSchema] = {}

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self) -> None:
        with self._lock:
            if self._connection is not None:
                return
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            try:
                # Autocommit; explicit transactions go through transaction()
                self._connection = sqlite3.connect(
                    self.path, isolation_level=None, check_same_thread=False
                )
                for statement in _META_DDL:
                    self._connection.execute(statement)
            except sqlite3.Error as e:
                raise TransportError(f"Cannot open embedded store: {e}", url=self.path) from e
            self._load_schemas()
            logger.info(f"Embedded store opened at {self.path}")

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                logger.info(f"Embedded store at {self.path} closed")

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageError("Embedded store is not open")
        return self._connection

    def _execute(self, sql: str, parameters: Tuple[Any, ...] = ()) -> sqlite3.Cursor:
        try:
            return self.connection.execute(sql, parameters)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Duplicate key: {e}") from e
        except sqlite3.Error as e:
            raise TransportError(f"Embedded store error: {e}", url=self.path) from e

    @contextmanager
    def transaction(self) -> Iterator["EmbeddedStore"]:
        """Run a block of operations atomically."""
        with self._lock:
            self._execute("BEGIN")
            try:
                yield self
            except BaseException:
                self.connection.execute("ROLLBACK")
                raise
            else:
                self._execute("COMMIT")

    # ------------------------------------------------------------------
    # Version and shape
    # ------------------------------------------------------------------

    def get_version(self) -> int:
        with self._lock:
            row = self._execute("SELECT value FROM _meta WHERE key = 'version'").fetchone()
            return int(row[0]) if row else 0

    def set_version(self, version: int) -> None:
        with self._lock:
            self._execute(
                "INSERT INTO _meta (key, value) VALUES ('version', ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (str(version),),
            )

    def _load_schemas(self) -> None:
        rows = self._execute("SELECT name, key_path, indexes FROM _collections").fetchall()
        self._schemas = {
            name: CollectionSchema(name=name, key_path=key_path, indexes=tuple(json.loads(indexes)))
            for name, key_path, indexes in rows
        }

    def collections(self) -> Dict[str, CollectionSchema]:
        with self._lock:
            return dict(self._schemas)

    def index_names(self, collection: str) -> List[str]:
        with self._lock:
            rows = self._execute(
                "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ? AND name LIKE ?",
                (collection, f"{_INDEX_PREFIX}%"),
            ).fetchall()
            return sorted(row[0] for row in rows)

    def apply_shape(self, collections: Tuple[CollectionSchema, ...]) -> None:
        """Make the store match the declared collections.

        Missing collections and indexes are created and undeclared indexes are
        dropped. Rows are never touched and collections are never dropped.
        """
        with self._lock:
            for schema in collections:
                table = _identifier(schema.name)
                self._execute(
                    f'CREATE TABLE IF NOT EXISTS "{table}" (pk TEXT PRIMARY KEY, doc TEXT NOT NULL)'
                )
                wanted = {_index_name(table, _identifier(attr)): attr for attr in schema.indexes}
                for existing in self.index_names(table):
                    if existing not in wanted:
                        self._execute(f'DROP INDEX IF EXISTS "{existing}"')
                for index, attr in wanted.items():
                    self._execute(
                        f'CREATE INDEX IF NOT EXISTS "{index}" '
                        f"ON \"{table}\" (json_extract(doc, '$.{attr}'))"
                    )
                self._execute(
                    "INSERT INTO _collections (name, key_path, indexes) VALUES (?, ?, ?) "
                    "ON CONFLICT(name) DO UPDATE SET key_path = excluded.key_path, "
                    "indexes = excluded.indexes",
                    (table, schema.key_path, json.dumps(list(schema.indexes))),
                )
                self._schemas[table] = schema

    def _schema(self, collection: str) -> CollectionSchema:
        schema = self._schemas.get(collection)
        if schema is None:
            raise StorageError(f"Unknown collection: {collection!r}")
        return schema

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _where(self, criteria: Dict[str, Any]) -> Tuple[str, Tuple[Any, ...]]:
        if not criteria:
            return "", ()
        clauses = [f"json_extract(doc, '$.{_identifier(attr)}') = ?" for attr in criteria]
        return " WHERE " + " AND ".join(clauses), tuple(criteria.values())

    def _key_of(self, schema: CollectionSchema, document: Document) -> str:
        key = document.get(schema.key_path)
        if key in (None, ""):
            raise ValidationError(f"Missing key '{schema.key_path}' for {schema.name}")
        return str(key)

    def get(self, collection: str, key: Any, **criteria: Any) -> Optional[Document]:
        """Document with the given key, or None. Extra criteria must also match."""
        with self._lock:
            self._schema(collection)
            where, params = self._where(criteria)
            clause = " AND pk = ?" if where else " WHERE pk = ?"
            row = self._execute(
                f'SELECT doc FROM "{collection}"{where}{clause}', params + (str(key),)
            ).fetchone()
            return json.loads(row[0]) if row else None

    def find(self, collection: str, **criteria: Any) -> List[Document]:
        """Documents matching every criterion, in insertion order."""
        with self._lock:
            self._schema(collection)
            where, params = self._where(criteria)
            rows = self._execute(
                f'SELECT doc FROM "{collection}"{where} ORDER BY rowid', params
            ).fetchall()
            return [json.loads(row[0]) for row in rows]

    def all(self, collection: str) -> List[Document]:
        return self.find(collection)

    def count(self, collection: str, **criteria: Any) -> int:
        with self._lock:
            self._schema(collection)
            where, params = self._where(criteria)
            return self._execute(f'SELECT COUNT(*) FROM "{collection}"{where}', params).fetchone()[0]

    def add(self, collection: str, document: Document) -> None:
        """Insert a new document; an existing key raises ValidationError."""
        with self._lock:
            schema = self._schema(collection)
            key = self._key_of(schema, document)
            try:
                self._execute(
                    f'INSERT INTO "{collection}" (pk, doc) VALUES (?, ?)', (key, json.dumps(document))
                )
            except ValidationError as e:
                raise ValidationError(f"{schema.name} entry {key!r} already exists") from e

    def put(self, collection: str, document: Document) -> None:
        """Insert or replace by key; a replaced document keeps its position."""
        with self._lock:
            schema = self._schema(collection)
            self._execute(
                f'INSERT INTO "{collection}" (pk, doc) VALUES (?, ?) '
                "ON CONFLICT(pk) DO UPDATE SET doc = excluded.doc",
                (self._key_of(schema, document), json.dumps(document)),
            )

    def _rewrite_rows(self, schema: CollectionSchema, rows: List[Tuple[int, str]], changes: Document) -> int:
        for rowid, raw in rows:
            document = json.loads(raw)
            document.update(changes)
            self._execute(
                f'UPDATE "{schema.name}" SET pk = ?, doc = ? WHERE rowid = ?',
                (self._key_of(schema, document), json.dumps(document), rowid),
            )
        return len(rows)

    def update(self, collection: str, key: Any, changes: Document) -> int:
        """Merge `changes` into one document. Returns the number updated (0 or 1).

        Changing the key attribute re-keys the document.
        """
        with self._lock:
            schema = self._schema(collection)
            rows = self._execute(
                f'SELECT rowid, doc FROM "{collection}" WHERE pk = ?', (str(key),)
            ).fetchall()
            return self._rewrite_rows(schema, rows, changes)

    def modify(self, collection: str, changes: Document, **criteria: Any) -> int:
        """Merge `changes` into every document matching the criteria."""
        with self._lock:
            schema = self._schema(collection)
            where, params = self._where(criteria)
            rows = self._execute(
                f'SELECT rowid, doc FROM "{collection}"{where} ORDER BY rowid', params
            ).fetchall()
            return self._rewrite_rows(schema, rows, changes)

    def rewrite(self, collection: str, transform: DocumentTransform) -> int:
        """Replace each document with `transform(document)` unless it returns None."""
        with self._lock:
            schema = self._schema(collection)
            rows = self._execute(f'SELECT rowid, doc FROM "{collection}" ORDER BY rowid').fetchall()
            rewritten = 0
            for rowid, raw in rows:
                migrated = transform(json.loads(raw))
                if migrated is None:
                    continue
                self._execute(
                    f'UPDATE "{collection}" SET pk = ?, doc = ? WHERE rowid = ?',
                    (self._key_of(schema, migrated), json.dumps(migrated), rowid),
                )
                rewritten += 1
            return rewritten

    def delete(self, collection: str, key: Any, **criteria: Any) -> int:
        with self._lock:
            self._schema(collection)
            where, params = self._where(criteria)
            clause = " AND pk = ?" if where else " WHERE pk = ?"
            return self._execute(
                f'DELETE FROM "{collection}"{where}{clause}', params + (str(key),)
            ).rowcount

    def delete_where(self, collection: str, **criteria: Any) -> int:
        with self._lock:
            self._schema(collection)
            where, params = self._where(criteria)
            return self._execute(f'DELETE FROM "{collection}"{where}', params).rowcount

    def clear(self, collection: str) -> int:
        return self.delete_where(collection)

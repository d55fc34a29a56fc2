"""Row-level helpers shared by the record services."""

import sqlite3
from typing import Any, Dict, List, Optional

from backend.models.columns import TableMapping


def insert(conn: sqlite3.Connection, mapping: TableMapping, document: Dict[str, Any], upsert: bool = False) -> None:
    """Insert one document; with `upsert`, replace the row sharing its key."""
    columns = ", ".join(column.sql for column in mapping.columns)
    placeholders = ", ".join("?" for _ in mapping.columns)
    sql = f"INSERT INTO {mapping.sql} ({columns}) VALUES ({placeholders})"
    if upsert:
        key = mapping.column(mapping.key)
        updates = ", ".join(
            f"{column.sql} = excluded.{column.sql}"
            for column in mapping.columns
            if column is not key
        )
        sql += f" ON CONFLICT({key.sql}) DO UPDATE SET {updates}"
    conn.execute(sql, mapping.to_row(document))


def update(conn: sqlite3.Connection, mapping: TableMapping, key: Any, attributes: Dict[str, Any]) -> int:
    """Apply supplied attributes to the row with the given key."""
    if not attributes:
        return 0
    columns = [mapping.column(attribute) for attribute in attributes]
    assignments = ", ".join(f"{column.sql} = ?" for column in columns)
    values = [column.to_sql(attributes[column.attribute]) for column in columns]
    cursor = conn.execute(
        f"UPDATE {mapping.sql} SET {assignments} WHERE {mapping.column(mapping.key).sql} = ?",
        values + [key],
    )
    return cursor.rowcount


def fetch_one(conn: sqlite3.Connection, mapping: TableMapping, key: Any, parent_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    sql = f"SELECT {mapping.select_list} FROM {mapping.sql} WHERE {mapping.column(mapping.key).sql} = ?"
    params: List[Any] = [key]
    if parent_id is not None and mapping.parent is not None:
        sql += f" AND {mapping.column(mapping.parent).sql} = ?"
        params.append(parent_id)
    row = conn.execute(sql, params).fetchone()
    return mapping.to_document(row) if row else None


def fetch_children(conn: sqlite3.Connection, mapping: TableMapping, parent_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        f"SELECT {mapping.select_list} FROM {mapping.sql} "
        f"WHERE {mapping.column(mapping.parent).sql} = ?{mapping.order_clause}",
        (parent_id,),
    ).fetchall()
    return [mapping.to_document(row) for row in rows]


def fetch_all(conn: sqlite3.Connection, mapping: TableMapping) -> List[Dict[str, Any]]:
    rows = conn.execute(f"SELECT {mapping.select_list} FROM {mapping.sql}{mapping.order_clause}").fetchall()
    return [mapping.to_document(row) for row in rows]


def delete_one(conn: sqlite3.Connection, mapping: TableMapping, key: Any, parent_id: Optional[str] = None) -> int:
    sql = f"DELETE FROM {mapping.sql} WHERE {mapping.column(mapping.key).sql} = ?"
    params: List[Any] = [key]
    if parent_id is not None and mapping.parent is not None:
        sql += f" AND {mapping.column(mapping.parent).sql} = ?"
        params.append(parent_id)
    return conn.execute(sql, params).rowcount


def delete_children(conn: sqlite3.Connection, mapping: TableMapping, parent_id: str) -> int:
    return conn.execute(
        f"DELETE FROM {mapping.sql} WHERE {mapping.column(mapping.parent).sql} = ?", (parent_id,)
    ).rowcount

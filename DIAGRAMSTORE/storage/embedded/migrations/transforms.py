"""Document transforms used by data migrations.

Each function is pure: it never mutates its argument and returns None when
the document does not need rewriting, so re-running a transform over
already-migrated data changes nothing.
"""

from __future__ import annotations

import copy
from typing import Optional

from DIAGRAMSTORE.models import determine_cardinalities

from .types import Document


def split_legacy_field_types(table: Document) -> Optional[Document]:
    """Field types used to be plain strings ("character varying").

    They become `{id: "character_varying", name: "character varying"}`.
    """
    fields = table.get("fields") or []
    if not any(isinstance(field.get("type"), str) for field in fields):
        return None

    migrated = copy.deepcopy(table)
    for field in migrated["fields"]:
        legacy = field.get("type")
        if isinstance(legacy, str):
            field["type"] = {"id": "_".join(legacy.split(" ")), "name": legacy}
    return migrated


def derive_relationship_cardinalities(relationship: Document) -> Optional[Document]:
    """Replace the legacy relationship `type` enum with per-side cardinalities."""
    if "sourceCardinality" in relationship and "targetCardinality" in relationship:
        return None

    migrated = copy.deepcopy(relationship)
    source, target = determine_cardinalities(migrated.pop("type", None))
    migrated["sourceCardinality"] = source
    migrated["targetCardinality"] = target
    return migrated


def coerce_field_nullable(table: Document) -> Optional[Document]:
    """`nullable` was sometimes stored as "true"/"false" strings."""
    fields = table.get("fields") or []
    if not any(isinstance(field.get("nullable"), str) for field in fields):
        return None

    migrated = copy.deepcopy(table)
    for field in migrated["fields"]:
        if isinstance(field.get("nullable"), str):
            field["nullable"] = field["nullable"].lower() == "true"
    return migrated

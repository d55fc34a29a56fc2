"""Relationship cardinality definitions.

Relationships used to carry a single `type` enum; they now carry one
cardinality per side. The legacy enum is still accepted on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Tuple


Cardinality = Literal["one", "many"]


class RelationshipType(str, Enum):
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


_CARDINALITIES = {
    RelationshipType.ONE_TO_ONE: ("one", "one"),
    RelationshipType.ONE_TO_MANY: ("one", "many"),
    RelationshipType.MANY_TO_ONE: ("many", "one"),
    RelationshipType.MANY_TO_MANY: ("many", "many"),
}


def determine_cardinalities(relationship_type: Optional[str]) -> Tuple[Cardinality, Cardinality]:
    """
    Map a legacy relationship type to (source, target) cardinalities.

    Unknown or missing types fall back to one-to-one.
    """
    try:
        key = RelationshipType(relationship_type or RelationshipType.ONE_TO_ONE.value)
    except ValueError:
        key = RelationshipType.ONE_TO_ONE
    return _CARDINALITIES[key]

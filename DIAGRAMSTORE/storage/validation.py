"""Turn caller input into validated models.

Callers may pass either a model instance or a plain mapping. Whatever goes
wrong, the caller gets the storage-layer `ValidationError`, never pydantic's.
Documents read back from a backend go through `load_document`, which
reports a malformed one as `StorageError` whichever backend produced it.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from DIAGRAMSTORE.models import EntityPatch, StorageModel
from DIAGRAMSTORE.utils.error_handling import StorageError, ValidationError

from .collections import EntityKind

ModelT = TypeVar("ModelT", bound=BaseModel)
PatchT = TypeVar("PatchT", bound=EntityPatch)


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


def coerce_entity(kind: EntityKind, value: Any) -> StorageModel:
    """Validate an entity for `add`/`put`, enforcing its required fields."""
    if isinstance(value, kind.model):
        entity = value
    elif isinstance(value, Mapping):
        try:
            entity = kind.model.model_validate(dict(value))
        except PydanticValidationError as exc:
            top_level_missing = any(
                error["type"] == "missing" and len(error["loc"]) == 1
                for error in exc.errors()
            )
            if top_level_missing:
                raise ValidationError(kind.missing_message) from exc
            raise ValidationError(f"Invalid {kind.body_key}: {_first_error(exc)}") from exc
    else:
        raise ValidationError(f"Invalid or missing {kind.body_key} object")

    document = entity.to_document()
    if any(document.get(name) in (None, "") for name in kind.required):
        raise ValidationError(kind.missing_message)
    return entity


def coerce_patch(patch_model: Type[PatchT], value: Any) -> PatchT:
    """Validate a partial update; unknown attribute names are rejected."""
    if isinstance(value, patch_model):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError("Invalid or missing attributes")
    try:
        return patch_model.model_validate(dict(value))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid attributes: {_first_error(exc)}") from exc


def coerce_model(model: Type[ModelT], value: Any, body_key: str) -> ModelT:
    """Validate a model that has no required identifying fields."""
    if isinstance(value, model):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError(f"Invalid or missing {body_key} object")
    try:
        return model.model_validate(dict(value))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {body_key}: {_first_error(exc)}") from exc


def load_document(model: Type[ModelT], document: Optional[Mapping[str, Any]]) -> Optional[ModelT]:
    """Model for a stored document, or None when there is no document."""
    if document is None:
        return None
    if not isinstance(document, Mapping):
        raise StorageError(f"Stored {model.__name__} document is not an object")
    try:
        return model.model_validate(dict(document))
    except PydanticValidationError as exc:
        raise StorageError(f"Stored {model.__name__} document is invalid: {_first_error(exc)}") from exc


def load_documents(model: Type[ModelT], documents: Optional[Iterable[Mapping[str, Any]]]) -> List[ModelT]:
    return [load_document(model, document) for document in documents or []]

"""The storage contract every persistence backend implements.

Application code depends on `StorageBackend` only. The public coroutines
below validate their input once, here, so every backend rejects malformed
input with the same `ValidationError`. Concrete backends implement the
abstract hooks, which always receive validated models or attribute dicts
keyed by serialized (camelCase) names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from DIAGRAMSTORE.models import (
    AppConfig,
    Area,
    ConfigPatch,
    DBCustomType,
    DBDependency,
    DBRelationship,
    DBTable,
    Diagram,
    DiagramFilter,
    DiagramIncludeOptions,
    StorageModel,
)

from .collections import (
    AREAS,
    CUSTOM_TYPES,
    DEPENDENCIES,
    DIAGRAMS,
    RELATIONSHIPS,
    TABLES,
    ChildCollection,
)
from .validation import coerce_entity, coerce_model, coerce_patch

Attributes = Dict[str, Any]
IncludeOptions = Union[DiagramIncludeOptions, Dict[str, bool], None]


def _options(options: IncludeOptions) -> DiagramIncludeOptions:
    return coerce_model(DiagramIncludeOptions, options or {}, "options")


class StorageBackend(ABC):
    """Backend-agnostic diagram storage."""

    name: str = "abstract"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> "StorageBackend":
        """Prepare the backend for use. Returns self."""
        return self

    async def close(self) -> None:
        """Release resources held by the backend."""

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _get_config(self) -> Optional[AppConfig]: ...

    @abstractmethod
    async def _create_config(self, config: AppConfig) -> None: ...

    @abstractmethod
    async def _update_config(self, attributes: Attributes) -> None: ...

    @abstractmethod
    async def _get_diagram_filter(self, diagram_id: str) -> Optional[DiagramFilter]: ...

    @abstractmethod
    async def _put_diagram_filter(self, diagram_filter: DiagramFilter) -> None: ...

    @abstractmethod
    async def _delete_diagram_filter(self, diagram_id: str) -> None: ...

    @abstractmethod
    async def _add_diagram(self, diagram: Diagram) -> None: ...

    @abstractmethod
    async def _list_diagrams(self, options: DiagramIncludeOptions) -> List[Diagram]: ...

    @abstractmethod
    async def _get_diagram(self, diagram_id: str, options: DiagramIncludeOptions) -> Optional[Diagram]: ...

    @abstractmethod
    async def _update_diagram(self, diagram_id: str, attributes: Attributes) -> None: ...

    @abstractmethod
    async def _delete_diagram(self, diagram_id: str) -> None: ...

    @abstractmethod
    async def _add_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None: ...

    @abstractmethod
    async def _put_child(self, collection: ChildCollection, diagram_id: str, entity: StorageModel) -> None: ...

    @abstractmethod
    async def _get_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> Optional[StorageModel]: ...

    @abstractmethod
    async def _update_child(self, collection: ChildCollection, entity_id: str, attributes: Attributes) -> None: ...

    @abstractmethod
    async def _delete_child(self, collection: ChildCollection, diagram_id: str, entity_id: str) -> None: ...

    @abstractmethod
    async def _list_children(self, collection: ChildCollection, diagram_id: str) -> List[StorageModel]: ...

    @abstractmethod
    async def _delete_children(self, collection: ChildCollection, diagram_id: str) -> None: ...

    # ------------------------------------------------------------------
    # Config
    # ------------------------------------------------------------------

    async def get_config(self) -> Optional[AppConfig]:
        return await self._get_config()

    async def create_config(self, config: Union[AppConfig, Attributes]) -> None:
        """Create the config singleton. Only bootstrap calls this."""
        await self._create_config(coerce_model(AppConfig, config, "config"))

    async def update_config(self, patch: Union[ConfigPatch, Attributes]) -> None:
        config_patch = coerce_patch(ConfigPatch, patch)
        if not config_patch.is_empty():
            await self._update_config(config_patch.to_attributes())

    # ------------------------------------------------------------------
    # Diagram filters
    # ------------------------------------------------------------------

    async def get_diagram_filter(self, diagram_id: str) -> Optional[DiagramFilter]:
        return await self._get_diagram_filter(diagram_id)

    async def update_diagram_filter(self, diagram_id: str, diagram_filter: Union[DiagramFilter, Attributes]) -> None:
        """Store (insert or replace) the filter of a diagram."""
        if isinstance(diagram_filter, DiagramFilter):
            payload = diagram_filter.to_document()
        else:
            payload = dict(diagram_filter or {})
        payload["diagramId"] = diagram_id
        await self._put_diagram_filter(coerce_model(DiagramFilter, payload, "filter"))

    async def delete_diagram_filter(self, diagram_id: str) -> None:
        await self._delete_diagram_filter(diagram_id)

    # ------------------------------------------------------------------
    # Diagrams
    # ------------------------------------------------------------------

    async def add_diagram(self, diagram: Union[Diagram, Attributes]) -> None:
        """Store a diagram together with any child lists attached to it."""
        await self._add_diagram(coerce_entity(DIAGRAMS, diagram))

    async def list_diagrams(self, options: IncludeOptions = None) -> List[Diagram]:
        return await self._list_diagrams(_options(options))

    async def get_diagram(self, diagram_id: str, options: IncludeOptions = None) -> Optional[Diagram]:
        return await self._get_diagram(diagram_id, _options(options))

    async def update_diagram(self, diagram_id: str, patch: Any) -> None:
        """Apply a partial update. A new `id` cascades to every child collection."""
        diagram_patch = coerce_patch(DIAGRAMS.patch_model, patch)
        if not diagram_patch.is_empty():
            await self._update_diagram(diagram_id, diagram_patch.to_attributes())

    async def delete_diagram(self, diagram_id: str) -> None:
        """Delete a diagram and everything it owns."""
        await self._delete_diagram(diagram_id)

    # ------------------------------------------------------------------
    # Shared child-collection plumbing
    # ------------------------------------------------------------------

    async def _add(self, collection: ChildCollection, diagram_id: str, entity: Any) -> None:
        await self._add_child(collection, diagram_id, coerce_entity(collection, entity))

    async def _update(self, collection: ChildCollection, entity_id: str, patch: Any) -> None:
        entity_patch = coerce_patch(collection.patch_model, patch)
        if not entity_patch.is_empty():
            await self._update_child(collection, entity_id, entity_patch.to_attributes())

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def add_table(self, diagram_id: str, table: Union[DBTable, Attributes]) -> None:
        await self._add(TABLES, diagram_id, table)

    async def get_table(self, diagram_id: str, table_id: str) -> Optional[DBTable]:
        return await self._get_child(TABLES, diagram_id, table_id)

    async def update_table(self, table_id: str, patch: Any) -> None:
        await self._update(TABLES, table_id, patch)

    async def put_table(self, diagram_id: str, table: Union[DBTable, Attributes]) -> None:
        """Insert or replace a table keyed by its id."""
        await self._put_child(TABLES, diagram_id, coerce_entity(TABLES, table))

    async def delete_table(self, diagram_id: str, table_id: str) -> None:
        await self._delete_child(TABLES, diagram_id, table_id)

    async def list_tables(self, diagram_id: str) -> List[DBTable]:
        return await self._list_children(TABLES, diagram_id)

    async def delete_diagram_tables(self, diagram_id: str) -> None:
        await self._delete_children(TABLES, diagram_id)

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    async def add_relationship(self, diagram_id: str, relationship: Union[DBRelationship, Attributes]) -> None:
        await self._add(RELATIONSHIPS, diagram_id, relationship)

    async def get_relationship(self, diagram_id: str, relationship_id: str) -> Optional[DBRelationship]:
        return await self._get_child(RELATIONSHIPS, diagram_id, relationship_id)

    async def update_relationship(self, relationship_id: str, patch: Any) -> None:
        await self._update(RELATIONSHIPS, relationship_id, patch)

    async def delete_relationship(self, diagram_id: str, relationship_id: str) -> None:
        await self._delete_child(RELATIONSHIPS, diagram_id, relationship_id)

    async def list_relationships(self, diagram_id: str) -> List[DBRelationship]:
        """Relationships of a diagram sorted by name."""
        return await self._list_children(RELATIONSHIPS, diagram_id)

    async def delete_diagram_relationships(self, diagram_id: str) -> None:
        await self._delete_children(RELATIONSHIPS, diagram_id)

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    async def add_dependency(self, diagram_id: str, dependency: Union[DBDependency, Attributes]) -> None:
        await self._add(DEPENDENCIES, diagram_id, dependency)

    async def get_dependency(self, diagram_id: str, dependency_id: str) -> Optional[DBDependency]:
        return await self._get_child(DEPENDENCIES, diagram_id, dependency_id)

    async def update_dependency(self, dependency_id: str, patch: Any) -> None:
        await self._update(DEPENDENCIES, dependency_id, patch)

    async def delete_dependency(self, diagram_id: str, dependency_id: str) -> None:
        await self._delete_child(DEPENDENCIES, diagram_id, dependency_id)

    async def list_dependencies(self, diagram_id: str) -> List[DBDependency]:
        return await self._list_children(DEPENDENCIES, diagram_id)

    async def delete_diagram_dependencies(self, diagram_id: str) -> None:
        await self._delete_children(DEPENDENCIES, diagram_id)

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    async def add_area(self, diagram_id: str, area: Union[Area, Attributes]) -> None:
        await self._add(AREAS, diagram_id, area)

    async def get_area(self, diagram_id: str, area_id: str) -> Optional[Area]:
        return await self._get_child(AREAS, diagram_id, area_id)

    async def update_area(self, area_id: str, patch: Any) -> None:
        await self._update(AREAS, area_id, patch)

    async def delete_area(self, diagram_id: str, area_id: str) -> None:
        await self._delete_child(AREAS, diagram_id, area_id)

    async def list_areas(self, diagram_id: str) -> List[Area]:
        return await self._list_children(AREAS, diagram_id)

    async def delete_diagram_areas(self, diagram_id: str) -> None:
        await self._delete_children(AREAS, diagram_id)

    # ------------------------------------------------------------------
    # Custom types
    # ------------------------------------------------------------------

    async def add_custom_type(self, diagram_id: str, custom_type: Union[DBCustomType, Attributes]) -> None:
        await self._add(CUSTOM_TYPES, diagram_id, custom_type)

    async def get_custom_type(self, diagram_id: str, custom_type_id: str) -> Optional[DBCustomType]:
        return await self._get_child(CUSTOM_TYPES, diagram_id, custom_type_id)

    async def update_custom_type(self, custom_type_id: str, patch: Any) -> None:
        await self._update(CUSTOM_TYPES, custom_type_id, patch)

    async def delete_custom_type(self, diagram_id: str, custom_type_id: str) -> None:
        await self._delete_child(CUSTOM_TYPES, diagram_id, custom_type_id)

    async def list_custom_types(self, diagram_id: str) -> List[DBCustomType]:
        """Custom types of a diagram sorted by type name."""
        return await self._list_children(CUSTOM_TYPES, diagram_id)

    async def delete_diagram_custom_types(self, diagram_id: str) -> None:
        await self._delete_children(CUSTOM_TYPES, diagram_id)

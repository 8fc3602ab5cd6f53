"""
In-memory metadata stores.

This module provides the keyed repositories backing the catalog:

- `AssetIndex` for assets,
- `PolicyDefinitionStore` for policy definitions,
- `ContractDefinitionStore` for contract definitions.

All three share the contract of `InMemoryStore`:

- `create` rejects a duplicate id and never inserts partially.
- `get` returns None for a missing id instead of raising.
- `update` is a full, atomic replace of an existing entity.
- `delete` removes an existing entity; a second delete raises again.
- `query` yields the entities satisfying every criterion, in insertion order.

Every operation runs under a per-store lock, so each call observes a single
consistent state. Entities are copied on the way in and out: callers can
never mutate stored state in place.
"""

import threading
from typing import Any, Dict, Generic, Iterator, List, Mapping, Optional, Sequence, TypeVar

from pydantic import BaseModel

from edc_catalog.core.errors import DuplicateIdError, IdMismatchError, NotFoundError
from edc_catalog.models.asset import Asset
from edc_catalog.models.contract import ContractDefinition
from edc_catalog.models.criterion import Criterion
from edc_catalog.models.policy import PolicyDefinition
from edc_catalog.services.criterion_evaluator import check_operator, matches_all


EntityT = TypeVar("EntityT", bound=BaseModel)


class InMemoryStore(Generic[EntityT]):
    """
    Thread-safe keyed repository of pydantic entities carrying an `id`.

    Example:
        >>> store = AssetIndex()
        >>> _ = store.create(asset)
        >>> store.get(asset.id) == asset
        True
    """

    entity_type = "Entity"

    def __init__(self):
        self._entities: Dict[str, EntityT] = {}
        self._lock = threading.RLock()

    # --------------------------------------------------------------------------
    # CRUD
    # --------------------------------------------------------------------------

    def create(self, entity: EntityT) -> EntityT:
        """
        Inserts a new entity.

        Raises:
            DuplicateIdError: If an entity with the same id is already stored.
        """

        stored = entity.model_copy(deep=True)
        with self._lock:
            if entity.id in self._entities:
                raise DuplicateIdError(self.entity_type, entity.id)
            self._entities[entity.id] = stored
        return entity

    def get(self, entity_id: str) -> Optional[EntityT]:
        """Returns a copy of the stored entity, or None."""

        with self._lock:
            entity = self._entities.get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def update(self, entity_id: str, entity: EntityT) -> EntityT:
        """
        Replaces a stored entity.

        Raises:
            NotFoundError: If no entity is stored under `entity_id`.
            IdMismatchError: If `entity.id` differs from `entity_id`.
        """

        stored = entity.model_copy(deep=True)
        with self._lock:
            if entity_id not in self._entities:
                raise NotFoundError(self.entity_type, entity_id)
            if entity.id != entity_id:
                raise IdMismatchError(self.entity_type, entity_id, entity.id)
            self._entities[entity_id] = stored
        return entity

    def delete(self, entity_id: str) -> EntityT:
        """
        Removes a stored entity and returns it.

        Raises:
            NotFoundError: If no entity is stored under `entity_id`.
        """

        with self._lock:
            try:
                return self._entities.pop(entity_id)
            except KeyError:
                raise NotFoundError(self.entity_type, entity_id) from None

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------

    def query(self, criteria: Sequence[Criterion] = ()) -> Iterator[EntityT]:
        """
        Lazily yields every entity that satisfies all criteria.

        The store is snapshotted when `query` is called; criteria are
        evaluated as the caller consumes the iterator, so a caller can stop
        early without the store scanning everything upfront.

        Raises:
            UnsupportedOperatorError: If a criterion uses an unknown operator.
                Raised here, before any entity is yielded.
        """

        criteria = list(criteria)
        for criterion in criteria:
            check_operator(criterion)
        with self._lock:
            snapshot = list(self._entities.values())
        return self._matching(snapshot, criteria)

    def _matching(self, snapshot: List[EntityT], criteria: List[Criterion]) -> Iterator[EntityT]:
        for entity in snapshot:
            if matches_all(criteria, self.attributes(entity)):
                yield entity.model_copy(deep=True)

    def attributes(self, entity: EntityT) -> Mapping[str, Any]:
        """Attributes of an entity that criteria resolve against."""
        return entity.attributes()

    def count(self) -> int:
        with self._lock:
            return len(self._entities)

    def __contains__(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._entities


class AssetIndex(InMemoryStore[Asset]):
    """Keyed repository of assets."""

    entity_type = "Asset"


class PolicyDefinitionStore(InMemoryStore[PolicyDefinition]):
    """Keyed repository of policy definitions."""

    entity_type = "PolicyDefinition"


class ContractDefinitionStore(InMemoryStore[ContractDefinition]):
    """
    Keyed repository of contract definitions.

    Policy ids are weak references: a definition may be stored before the
    policies it names exist, and deleting a policy leaves it in place.
    """

    entity_type = "ContractDefinition"

    def referencing(self, policy_id: str) -> Iterator[ContractDefinition]:
        """Yields the definitions naming `policy_id` as access or contract policy."""

        with self._lock:
            snapshot = list(self._entities.values())
        for definition in snapshot:
            if policy_id in (definition.accessPolicyId, definition.contractPolicyId):
                yield definition.model_copy(deep=True)

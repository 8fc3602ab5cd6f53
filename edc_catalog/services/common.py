"""
Shared service helpers.

Translation of catalog errors to HTTP errors, validation of request bodies,
and execution of `QuerySpec` queries against a store.
"""

from itertools import islice
from typing import Any, Iterable, Iterator, List, Optional, Type, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

from edc_catalog.core.errors import (
    CatalogError,
    DuplicateIdError,
    IdMismatchError,
    NotFoundError,
    UnsupportedOperatorError,
)
from edc_catalog.db.store import InMemoryStore
from edc_catalog.schemas.query import QuerySpec
from edc_catalog.services.criterion_evaluator import MISSING, as_string, resolve_operand
from edc_catalog.util.edc_helpers import EDC_NAMESPACE, EDC_PREFIX, compact_keys


ModelT = TypeVar("ModelT", bound=BaseModel)

_STATUS_CODES = {
    NotFoundError: 404,
    DuplicateIdError: 409,
    IdMismatchError: 400,
    UnsupportedOperatorError: 400,
}


def http_error(error: CatalogError) -> HTTPException:
    """
    Maps a catalog error to the HTTP error returned by the management API.

    Args:
        error (CatalogError): Error raised by a store or the evaluator.

    Returns:
        HTTPException: 404, 409, or 400 depending on the error type;
        500 for anything unexpected.
    """

    status_code = _STATUS_CODES.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=str(error))


def parse_model(model: Type[ModelT], data: Any, what: str) -> ModelT:
    """
    Validates a request body into a model.

    Raises:
        HTTPException: 400 with the validation messages if the body is invalid.
    """

    try:
        return model.model_validate(data)
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise HTTPException(status_code=400, detail=f"Invalid {what}: {messages}")


def parse_query_spec(payload: Optional[dict]) -> QuerySpec:
    """Reads a QuerySpec from a (possibly empty or namespaced) request body."""

    if not payload:
        return QuerySpec()
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid query: body must be a JSON object")
    return parse_model(QuerySpec, compact_keys(payload, (EDC_NAMESPACE, EDC_PREFIX)), "query")


def _sort_key(value: Any):
    # numbers before strings, numbers compared numerically
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, as_string(value))


def select(store: InMemoryStore, spec: QuerySpec) -> Iterator[Any]:
    """
    Filters and sorts a store's entities by a QuerySpec, without paging.

    The store filters lazily; sorting (when requested) is layered on top.
    Entities lacking the sort attribute come last.

    Raises:
        HTTPException: 400 if the filter uses an unsupported operator.
    """

    try:
        results = store.query(spec.filterExpression)
    except CatalogError as e:
        raise http_error(e)

    if not spec.sortField:
        return results

    keyed = [(resolve_operand(spec.sortField, store.attributes(entity)), entity) for entity in results]
    present = [item for item in keyed if item[0] is not MISSING]
    missing = [entity for value, entity in keyed if value is MISSING]
    present.sort(key=lambda item: _sort_key(item[0]), reverse=spec.sortOrder == "DESC")
    return iter([entity for _, entity in present] + missing)


def page(results: Iterable[Any], spec: QuerySpec) -> List[Any]:
    """Applies the offset and limit of a QuerySpec."""
    return list(islice(results, spec.offset, spec.offset + spec.limit))


def run_query(store: InMemoryStore, spec: QuerySpec) -> List[Any]:
    """
    Executes a QuerySpec against a store: filter, sort, then page.

    Raises:
        HTTPException: 400 if the filter uses an unsupported operator.
    """

    return page(select(store, spec), spec)


def replace_entity(store: InMemoryStore, entity_id: str, entity: Any) -> None:
    """
    Replaces a stored entity, keeping its original creation timestamp.

    Raises:
        HTTPException: 404 if absent, 400 if the ids differ.
    """

    current = store.get(entity_id)
    if current is not None:
        entity.createdAt = current.createdAt
    try:
        store.update(entity_id, entity)
    except CatalogError as e:
        raise http_error(e)

"""
Criterion evaluator.

Evaluates selection criteria against the attributes of a candidate entity.

Attribute resolution:
    - The entity id is addressed as `id`, `@id`, `edc:id`, or the
      well-known constant `https://w3id.org/edc/v0.0.1/ns/id`.
    - Any other left operand is looked up by exact key; when absent, the
      EDC-namespaced spelling of the same key is tried.
    - An unresolvable left operand never matches. It is not an error.

Supported operators: `=`, `!=`, `in`, `like`, `ilike`, `contains`.
An unknown operator raises `UnsupportedOperatorError`: it is a
configuration defect, not a data condition.
"""

import re
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, Mapping

from edc_catalog.core.errors import UnsupportedOperatorError
from edc_catalog.models.criterion import Criterion
from edc_catalog.util.edc_helpers import ENTITY_ID_KEY, ID_OPERANDS, namespace_variants


MISSING = object()


def as_string(value: Any) -> str:
    """Normalizes a scalar to the string form used for comparisons."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_operand(operand_left: str, attributes: Mapping[str, Any]) -> Any:
    """
    Resolves a left operand against a candidate's attributes.

    Args:
        operand_left (str): Attribute path of the criterion.
        attributes (Mapping[str, Any]): Candidate attributes; the entity id
            is stored under `@id`.

    Returns:
        Any: The resolved value, or `MISSING` when nothing matches.
    """

    if operand_left in ID_OPERANDS:
        return attributes.get(ENTITY_ID_KEY, MISSING)
    if operand_left in attributes:
        return attributes[operand_left]
    for variant in namespace_variants(operand_left):
        if variant in attributes:
            return attributes[variant]
    return MISSING


@lru_cache(maxsize=256)
def _like_pattern(pattern: str, ignore_case: bool) -> "re.Pattern[str]":
    regex = ".*".join(re.escape(part) for part in pattern.split("%"))
    flags = re.DOTALL | (re.IGNORECASE if ignore_case else 0)
    return re.compile(regex, flags)


def _right_values(operand_right: Any) -> Iterable[Any]:
    if isinstance(operand_right, (list, tuple, set, frozenset)):
        return operand_right
    return [operand_right]


def _equals(value: Any, operand_right: Any) -> bool:
    return as_string(value) == as_string(operand_right)


def _not_equals(value: Any, operand_right: Any) -> bool:
    return not _equals(value, operand_right)


def _in(value: Any, operand_right: Any) -> bool:
    normalized = as_string(value)
    return any(normalized == as_string(item) for item in _right_values(operand_right))


def _like(value: Any, operand_right: Any) -> bool:
    return _like_pattern(as_string(operand_right), False).fullmatch(as_string(value)) is not None


def _ilike(value: Any, operand_right: Any) -> bool:
    return _like_pattern(as_string(operand_right), True).fullmatch(as_string(value)) is not None


def _contains(value: Any, operand_right: Any) -> bool:
    if isinstance(value, (list, tuple, set, frozenset)):
        return _in(operand_right, value)
    return as_string(operand_right) in as_string(value)


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "=": _equals,
    "!=": _not_equals,
    "in": _in,
    "like": _like,
    "ilike": _ilike,
    "contains": _contains,
}


def check_operator(criterion: Criterion) -> None:
    """Raises `UnsupportedOperatorError` if the criterion's operator is unknown."""

    if criterion.operator not in OPERATORS:
        raise UnsupportedOperatorError(criterion.operator)


def evaluate(criterion: Criterion, attributes: Mapping[str, Any]) -> bool:
    """
    Evaluates one criterion against a candidate's attributes.

    Args:
        criterion (Criterion): Predicate to evaluate.
        attributes (Mapping[str, Any]): Candidate attributes.

    Returns:
        bool: True if the candidate satisfies the criterion.

    Raises:
        UnsupportedOperatorError: If the operator is unknown, whether or not
            the left operand resolves.
    """

    check_operator(criterion)
    value = resolve_operand(criterion.operandLeft, attributes)
    if value is MISSING:
        return False
    return OPERATORS[criterion.operator](value, criterion.operandRight)


def matches_all(criteria: Iterable[Criterion], attributes: Mapping[str, Any]) -> bool:
    """AND over a sequence of criteria; an empty sequence matches everything."""

    return all(evaluate(criterion, attributes) for criterion in criteria)

"""
Catalog error taxonomy.

Every failure raised by the metadata stores and the criterion evaluator
derives from `CatalogError`. The service layer translates these errors to
HTTP responses; the core never depends on the web framework.

`DanglingPolicyReference` is the one member of the taxonomy that is never
raised: the catalog matcher reports it through the monitor and keeps going.
"""


class CatalogError(Exception):
    """Base class for all catalog engine errors."""


class NotFoundError(CatalogError):
    """An entity with the given id does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateIdError(CatalogError):
    """An entity with the given id already exists."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' already exists")


class IdMismatchError(CatalogError):
    """The id embedded in a replacement entity differs from the target id."""

    def __init__(self, entity_type: str, expected_id: str, actual_id: str):
        self.entity_type = entity_type
        self.expected_id = expected_id
        self.actual_id = actual_id
        super().__init__(
            f"{entity_type} id '{actual_id}' does not match the target id '{expected_id}'"
        )


class UnsupportedOperatorError(CatalogError):
    """A criterion uses an operator the evaluator does not know."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unsupported criterion operator '{operator}'")


class DanglingPolicyReference(CatalogError):
    """A contract definition references a policy definition that does not exist."""

    def __init__(self, contract_definition_id: str, policy_id: str, role: str):
        self.contract_definition_id = contract_definition_id
        self.policy_id = policy_id
        self.role = role
        super().__init__(
            f"Contract definition '{contract_definition_id}' references missing "
            f"{role} policy '{policy_id}'"
        )

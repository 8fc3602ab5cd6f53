"""
EDC helpers.

Constants and small utilities shared by the catalog engine, the JSON-LD
conversion layer, and the management API client.

Responsibilities:
    - Define the EDC and ODRL vocabulary namespaces.
    - Compact namespaced JSON-LD keys into their short form.
    - Compose management API URLs and authentication headers.
"""

from typing import Any, Dict, Iterable, List, Optional


# ------------------------------------------------------------------------------
# Vocabulary
# ------------------------------------------------------------------------------

EDC_NAMESPACE = "https://w3id.org/edc/v0.0.1/ns/"
EDC_PREFIX = "edc:"

ODRL_NAMESPACE = "http://www.w3.org/ns/odrl/2/"
ODRL_PREFIX = "odrl:"
ODRL_CONTEXT = "http://www.w3.org/ns/odrl.jsonld"

EDC_CONTEXT = {"@vocab": EDC_NAMESPACE, "edc": EDC_NAMESPACE, "odrl": ODRL_NAMESPACE}

# Well-known left operand meaning "the identifier of the entity".
EDC_ID = f"{EDC_NAMESPACE}id"

# Key under which an entity's id appears in its criterion attributes.
ENTITY_ID_KEY = "@id"

ID_OPERANDS = frozenset({"id", ENTITY_ID_KEY, EDC_ID, f"{EDC_PREFIX}id"})


# ------------------------------------------------------------------------------
# JSON-LD key handling
# ------------------------------------------------------------------------------

def compact_key(key: str, prefixes: Iterable[str] = (EDC_NAMESPACE, EDC_PREFIX)) -> str:
    """
    Strips the first matching namespace prefix from a JSON-LD key.

    Args:
        key (str): Possibly expanded key (e.g. "https://w3id.org/edc/v0.0.1/ns/name").
        prefixes (Iterable[str]): Namespaces or prefixes to strip.

    Returns:
        str: The compact key ("name"), or the key unchanged.
    """

    for prefix in prefixes:
        if key.startswith(prefix) and len(key) > len(prefix):
            return key[len(prefix):]
    return key


def namespace_variants(key: str) -> List[str]:
    """
    Returns the alternative spellings of a key in the EDC vocabulary.

    A compact key yields its expanded and prefixed forms; an expanded or
    prefixed key yields its compact form.
    """

    compact = compact_key(key)
    if compact != key:
        return [compact]
    return [f"{EDC_NAMESPACE}{key}", f"{EDC_PREFIX}{key}"]


def compact_keys(value: Any, prefixes: Iterable[str]) -> Any:
    """
    Recursively compacts every dictionary key in a JSON-LD value.

    JSON-LD keywords (keys starting with "@") are left untouched.
    """

    prefixes = tuple(prefixes)
    if isinstance(value, dict):
        return {
            (key if key.startswith("@") else compact_key(key, prefixes)): compact_keys(item, prefixes)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [compact_keys(item, prefixes) for item in value]
    return value


def normalize_list(value: Any) -> list:
    """
    Ensures that a JSON-LD property is always returned as a list.

    Args:
        value (Any): Raw property (dict, list, scalar, or None).

    Returns:
        list: A normalized list of elements or an empty list.
    """

    if isinstance(value, list):
        return value
    if value is None:
        return []
    return [value]


def unwrap_id(value: Any) -> Any:
    """Returns the "@id" of a JSON-LD node reference, or the value itself."""

    if isinstance(value, dict) and ENTITY_ID_KEY in value:
        return value[ENTITY_ID_KEY]
    return value


# ------------------------------------------------------------------------------
# Management API access
# ------------------------------------------------------------------------------

def get_base_url(management_url: str, path: str) -> str:
    """
    Builds a Management API URL by appending a path to the base URL.

    Args:
        management_url (str): Base URL of the management API
            (e.g. "http://localhost:8181/api/management").
        path (str): Path to append (e.g. "/v3/assets").

    Returns:
        str: Fully qualified URL.
    """

    return f"{management_url.rstrip('/')}/{path.lstrip('/')}"


def get_api_headers(api_key: Optional[str]) -> Dict[str, str]:
    """
    Returns the request headers carrying the connector API key.

    Args:
        api_key (Optional[str]): API key, or None when the connector is open.

    Returns:
        Dict[str, str]: Headers to send with every management request.
    """

    if not api_key:
        return {}
    return {"x-api-key": api_key}

"""
Store initialization and access utilities.

This module composes the three metadata stores and the catalog matcher
into a single `CatalogStores` bundle. The bundle is built once at
application startup (see `edc_catalog.main.create_app`), attached to
`app.state`, and handed to the route handlers through the `get_stores`
dependency. Nothing is looked up from a process-wide registry.

Usage example:
    >>> stores = init_stores()
    >>> stores.assets.count()
    0
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from edc_catalog.db.store import AssetIndex, ContractDefinitionStore, PolicyDefinitionStore
from edc_catalog.services.catalog_matcher import CatalogMatcher
from edc_catalog.util.monitor import Monitor


@dataclass
class CatalogStores:
    """The metadata stores and the matcher composed over them."""

    assets: AssetIndex
    policies: PolicyDefinitionStore
    contracts: ContractDefinitionStore
    matcher: CatalogMatcher
    monitor: Monitor


# ------------------------------------------------------------------------------
# Initialization
# ------------------------------------------------------------------------------

def init_stores(monitor: Optional[Monitor] = None) -> CatalogStores:
    """
    Builds empty stores and the catalog matcher.

    Args:
        monitor (Optional[Monitor]): Sink for engine messages. A default
            monitor on the `edc_catalog` logger is used when omitted.

    Returns:
        CatalogStores: The composed stores.
    """

    monitor = monitor or Monitor()
    assets = AssetIndex()
    policies = PolicyDefinitionStore()
    contracts = ContractDefinitionStore()
    matcher = CatalogMatcher(contracts, policies, monitor=monitor)

    return CatalogStores(
        assets=assets,
        policies=policies,
        contracts=contracts,
        matcher=matcher,
        monitor=monitor,
    )


# ------------------------------------------------------------------------------
# Access
# ------------------------------------------------------------------------------

def get_stores(request: Request) -> CatalogStores:
    """
    FastAPI dependency returning the stores of the running application.

    Raises:
        RuntimeError: If the application was built without stores.
    """

    stores = getattr(request.app.state, "stores", None)
    if stores is None:
        raise RuntimeError("Catalog stores were not initialized. Build the app with create_app().")
    return stores

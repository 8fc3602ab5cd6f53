"""
Catalog matcher.

Answers the question "which contract definitions, and therefore which
policies, govern this asset?".

For a given asset the matcher:

1. scans every stored contract definition,
2. keeps the definitions whose asset selector the asset satisfies,
3. resolves the access and contract policy ids of each kept definition.

A definition naming a policy that does not exist is skipped and reported
as a `DanglingPolicyReference` through the monitor and the optional
listener; one bad reference never aborts the scan. An unknown selector
operator, on the other hand, is a configuration defect and propagates.

The matcher holds no cross-store lock. Each store read is consistent on
its own, but policies may change between the definition scan and the
policy lookups.
"""

from typing import Callable, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from edc_catalog.core.errors import DanglingPolicyReference
from edc_catalog.db.store import ContractDefinitionStore, PolicyDefinitionStore
from edc_catalog.models.asset import Asset
from edc_catalog.models.contract import ContractDefinition
from edc_catalog.models.policy import PolicyDefinition
from edc_catalog.services.criterion_evaluator import matches_all
from edc_catalog.util.monitor import Monitor


DanglingReferenceListener = Callable[[DanglingPolicyReference], None]


class ContractOffer(NamedTuple):
    """A contract definition matching an asset, with both policies resolved."""

    definition: ContractDefinition
    access_policy: PolicyDefinition
    contract_policy: PolicyDefinition


class CatalogMatcher:
    """
    Resolves the contract definitions and policies that apply to assets.

    Example:
        >>> matcher = CatalogMatcher(contract_store, policy_store)
        >>> [offer.definition.id for offer in matcher.definitions_for(asset)]
        ['weather-contract-def']
    """

    def __init__(
        self,
        contract_store: ContractDefinitionStore,
        policy_store: PolicyDefinitionStore,
        monitor: Optional[Monitor] = None,
        listener: Optional[DanglingReferenceListener] = None,
    ):
        self.contract_store = contract_store
        self.policy_store = policy_store
        self.monitor = monitor or Monitor("edc_catalog.catalog")
        self.listener = listener

    def matches(self, definition: ContractDefinition, asset: Asset) -> bool:
        """True if the asset satisfies every criterion of the definition's selector."""
        return matches_all(definition.assetsSelector, asset.attributes())

    def definitions_for(self, asset: Asset, sort_by_id: bool = False) -> List[ContractOffer]:
        """
        Returns the offers that govern access to an asset.

        Args:
            asset (Asset): The asset to resolve.
            sort_by_id (bool): Order the result by contract definition id.
                Otherwise the order follows the definition store.

        Returns:
            List[ContractOffer]: One entry per matching definition whose
            policies both resolve.

        Raises:
            UnsupportedOperatorError: If a selector uses an unknown operator.
        """

        offers = []
        for definition in self.contract_store.query():
            if not self.matches(definition, asset):
                continue
            offer = self._resolve(definition)
            if offer is not None:
                offers.append(offer)

        if sort_by_id:
            offers.sort(key=lambda offer: offer.definition.id)
        return offers

    def catalog(self, assets: Iterable[Asset]) -> Iterator[Tuple[Asset, List[ContractOffer]]]:
        """Yields each asset that has at least one offer, with its offers."""

        for asset in assets:
            offers = self.definitions_for(asset, sort_by_id=True)
            if offers:
                yield asset, offers

    def _resolve(self, definition: ContractDefinition) -> Optional[ContractOffer]:
        access_policy = self._lookup(definition, definition.accessPolicyId, "access")
        if access_policy is None:
            return None
        contract_policy = self._lookup(definition, definition.contractPolicyId, "contract")
        if contract_policy is None:
            return None
        return ContractOffer(definition, access_policy, contract_policy)

    def _lookup(self, definition: ContractDefinition, policy_id: str, role: str) -> Optional[PolicyDefinition]:
        policy = self.policy_store.get(policy_id)
        if policy is None:
            self._report(DanglingPolicyReference(definition.id, policy_id, role))
        return policy

    def _report(self, reference: DanglingPolicyReference) -> None:
        self.monitor.warning(f"Skipping contract definition: {reference}", reference)
        if self.listener is not None:
            self.listener(reference)

"""Tests for the management API endpoints."""

import pytest

from edc_catalog.models.policy import PolicyDefinition
from edc_catalog.util.edc_helpers import EDC_ID, EDC_NAMESPACE

from conftest import make_asset, make_definition


BASE = "/api/management/v3"


def asset_payload(asset_id, **properties):
    return {
        "@context": {"@vocab": EDC_NAMESPACE},
        "@id": asset_id,
        "properties": {"name": asset_id, "contenttype": "application/json", **properties},
        "dataAddress": {"type": "HttpData", "baseUrl": f"https://data.example.com/{asset_id}"},
    }


def policy_payload(policy_id, permission=None):
    return {
        "@context": {"@vocab": EDC_NAMESPACE},
        "@id": policy_id,
        "policy": {
            "@context": "http://www.w3.org/ns/odrl.jsonld",
            "@type": "Set",
            "permission": permission or [],
        },
    }


def contract_payload(contract_id, policy_id="allow-all-policy", selector=None):
    return {
        "@context": {"@vocab": EDC_NAMESPACE},
        "@id": contract_id,
        "accessPolicyId": policy_id,
        "contractPolicyId": policy_id,
        "assetsSelector": selector if selector is not None else [],
    }


# ------------------------------------------------------------------------------
# Sample data
# ------------------------------------------------------------------------------

class TestSampleData:
    def test_sample_asset(self, seeded_client):
        response = seeded_client.get(f"{BASE}/assets/market-data-2025-q1")

        assert response.status_code == 200
        body = response.json()
        assert body["@id"] == "market-data-2025-q1"
        assert body["@type"] == "Asset"
        assert body["properties"]["name"] == "Market Data 2025 Q1"
        assert body["dataAddress"]["type"] == "HttpData"

    def test_sample_policy(self, seeded_client):
        response = seeded_client.get(f"{BASE}/policydefinitions/financial-research-policy")

        assert response.status_code == 200
        body = response.json()
        assert "PolicyDefinition" in body["@type"]
        assert "policy" in body

    def test_sample_contract_definition(self, seeded_client):
        response = seeded_client.get(f"{BASE}/contractdefinitions/market-data-contract-def")

        assert response.status_code == 200
        body = response.json()
        assert body["accessPolicyId"] == "financial-research-policy"
        assert body["assetsSelector"][0]["operandRight"] == "market-data-2025-q1"

    def test_sample_offers(self, seeded_client):
        response = seeded_client.get(f"{BASE}/assets/weather-api-asset/offers")

        assert response.status_code == 200
        offers = response.json()
        assert [offer["@id"] for offer in offers] == ["weather-contract-def:weather-api-asset"]
        assert offers[0]["contractPolicyId"] == "allow-all-policy"

    def test_disabled_by_settings(self, client):
        assert client.get(f"{BASE}/assets/weather-api-asset").status_code == 404


# ------------------------------------------------------------------------------
# Assets
# ------------------------------------------------------------------------------

class TestAssets:
    def test_create_then_get(self, client):
        response = client.post(f"{BASE}/assets", json=asset_payload("asset-001", category="weather"))

        assert response.status_code == 201
        created = response.json()
        assert created["@id"] == "asset-001"
        assert created["@type"] == "IdResponse"
        assert isinstance(created["createdAt"], int)

        body = client.get(f"{BASE}/assets/asset-001").json()
        assert body["properties"]["category"] == "weather"
        assert body["dataAddress"]["baseUrl"] == "https://data.example.com/asset-001"
        assert body["createdAt"] == created["createdAt"]

    def test_expanded_property_keys_are_compacted(self, client):
        payload = {
            "@id": "asset-002",
            "properties": {f"{EDC_NAMESPACE}name": "Expanded", "edc:contenttype": "text/csv"},
            "dataAddress": {f"{EDC_NAMESPACE}type": "HttpData"},
        }
        assert client.post(f"{BASE}/assets", json=payload).status_code == 201

        body = client.get(f"{BASE}/assets/asset-002").json()
        assert body["properties"] == {"name": "Expanded", "contenttype": "text/csv"}

    def test_get_missing(self, client):
        assert client.get(f"{BASE}/assets/nonexistent").status_code == 404

    def test_duplicate(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("asset-001", version="1"))
        response = client.post(f"{BASE}/assets", json=asset_payload("asset-001", version="2"))

        assert response.status_code == 409
        assert client.get(f"{BASE}/assets/asset-001").json()["properties"]["version"] == "1"

    def test_update(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("asset-001", version="1"))

        response = client.put(f"{BASE}/assets/asset-001", json=asset_payload("asset-001", version="2"))

        assert response.status_code == 204
        assert client.get(f"{BASE}/assets/asset-001").json()["properties"]["version"] == "2"

    def test_update_id_mismatch(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("asset-001"))
        response = client.put(f"{BASE}/assets/asset-001", json=asset_payload("asset-002"))
        assert response.status_code == 400

    def test_update_missing(self, client):
        response = client.put(f"{BASE}/assets/asset-001", json=asset_payload("asset-001"))
        assert response.status_code == 404

    def test_update_keeps_creation_time(self, client, stores):
        original = make_asset("asset-001", version="1")
        original.createdAt = 1000
        stores.assets.create(original)

        assert client.put(f"{BASE}/assets/asset-001", json=asset_payload("asset-001", version="2")).status_code == 204

        body = client.get(f"{BASE}/assets/asset-001").json()
        assert body["properties"]["version"] == "2"
        assert body["createdAt"] == 1000

    def test_delete(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("asset-001"))

        assert client.delete(f"{BASE}/assets/asset-001").status_code == 204
        assert client.get(f"{BASE}/assets/asset-001").status_code == 404
        assert client.delete(f"{BASE}/assets/asset-001").status_code == 404

    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "an", "object"],
            {"@id": "no-address", "properties": {}},
            {"properties": {}, "dataAddress": {"type": "HttpData"}},
            {"@id": "  ", "dataAddress": {"type": "HttpData"}},
        ],
    )
    def test_invalid_payload(self, client, payload):
        assert client.post(f"{BASE}/assets", json=payload).status_code == 400

    def test_malformed_json(self, client):
        response = client.post(
            f"{BASE}/assets", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400


class TestAssetQueries:
    @pytest.fixture(autouse=True)
    def populate(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("b-weather", category="weather", rank=2))
        client.post(f"{BASE}/assets", json=asset_payload("a-finance", category="finance", rank=10))
        client.post(f"{BASE}/assets", json=asset_payload("c-weather", category="weather", rank=1))

    def test_empty_body_returns_all_in_insertion_order(self, client):
        response = client.post(f"{BASE}/assets/request")

        assert response.status_code == 200
        assert [a["@id"] for a in response.json()] == ["b-weather", "a-finance", "c-weather"]

    def test_filter_expression(self, client):
        spec = {
            "@type": "QuerySpec",
            "filterExpression": [{"operandLeft": f"{EDC_NAMESPACE}category", "operator": "=", "operandRight": "weather"}],
        }
        response = client.post(f"{BASE}/assets/request", json=spec)
        assert [a["@id"] for a in response.json()] == ["b-weather", "c-weather"]

    def test_filter_by_id(self, client):
        spec = {"filterExpression": [{"operandLeft": EDC_ID, "operator": "=", "operandRight": "a-finance"}]}
        response = client.post(f"{BASE}/assets/request", json=spec)
        assert [a["@id"] for a in response.json()] == ["a-finance"]

    def test_sort_and_page(self, client):
        spec = {"sortField": "rank", "sortOrder": "DESC", "offset": 1, "limit": 1}
        response = client.post(f"{BASE}/assets/request", json=spec)
        assert [a["@id"] for a in response.json()] == ["b-weather"]

    def test_numeric_sort(self, client):
        response = client.post(f"{BASE}/assets/request", json={"sortField": "rank"})
        assert [a["@id"] for a in response.json()] == ["c-weather", "b-weather", "a-finance"]

    def test_unsupported_operator(self, client):
        spec = {"filterExpression": [{"operandLeft": "category", "operator": "regex", "operandRight": ".*"}]}
        assert client.post(f"{BASE}/assets/request", json=spec).status_code == 400

    def test_invalid_limit(self, client):
        assert client.post(f"{BASE}/assets/request", json={"limit": 0}).status_code == 400


# ------------------------------------------------------------------------------
# Policy definitions
# ------------------------------------------------------------------------------

class TestPolicyDefinitions:
    def test_create_then_get_keeps_body(self, client):
        permission = [
            {
                "action": "odrl:use",
                "constraint": [{"leftOperand": "purpose", "operator": {"@id": "odrl:eq"}, "rightOperand": "research"}],
            }
        ]
        response = client.post(f"{BASE}/policydefinitions", json=policy_payload("research-only", permission))
        assert response.status_code == 201

        body = client.get(f"{BASE}/policydefinitions/research-only").json()
        policy = body["policy"]
        assert policy["@type"] == "Set"
        assert policy["permission"][0]["action"] == "use"
        assert policy["permission"][0]["constraint"][0]["operator"] == "eq"
        assert policy["permission"][0]["constraint"][0]["rightOperand"] == "research"

    @pytest.mark.parametrize("logical_operator", ["and", "or", "xone"])
    def test_logical_constraint_and_context_are_kept(self, client, logical_operator):
        context = ["http://www.w3.org/ns/odrl.jsonld", {"edc": EDC_NAMESPACE}]
        regions = {
            logical_operator: [
                {"leftOperand": "region", "operator": "eq", "rightOperand": "EU"},
                {"leftOperand": "region", "operator": "eq", "rightOperand": "US"},
            ]
        }
        payload = {
            "@id": "regional",
            "policy": {
                "@context": context,
                "@id": "urn:policy:regional",
                "@type": "odrl:Set",
                "permission": [{"action": "use", "constraint": [regions]}],
            },
        }

        assert client.post(f"{BASE}/policydefinitions", json=payload).status_code == 201

        policy = client.get(f"{BASE}/policydefinitions/regional").json()["policy"]
        assert policy["@context"] == context
        assert policy["@id"] == "urn:policy:regional"
        assert policy["@type"] == "Set"
        assert policy["permission"][0]["constraint"] == [regions]

    def test_nested_logical_operators_are_compacted(self, client):
        nested = {
            "and": [
                {"leftOperand": "odrl:purpose", "operator": {"@id": "odrl:eq"}, "rightOperand": "research"},
                {"or": [{"leftOperand": "region", "operator": "odrl:eq", "rightOperand": "EU"}]},
            ]
        }
        payload = policy_payload("nested", [{"action": "use", "constraint": nested}])
        assert client.post(f"{BASE}/policydefinitions", json=payload).status_code == 201

        constraint = client.get(f"{BASE}/policydefinitions/nested").json()["policy"]["permission"][0]["constraint"]
        assert constraint == [
            {
                "and": [
                    {"leftOperand": "purpose", "operator": "eq", "rightOperand": "research"},
                    {"or": [{"leftOperand": "region", "operator": "eq", "rightOperand": "EU"}]},
                ]
            }
        ]

    def test_update_keeps_creation_time(self, client, stores):
        stores.policies.create(PolicyDefinition(id="p1", createdAt=1000))

        assert client.put(f"{BASE}/policydefinitions/p1", json=policy_payload("p1", [{"action": "use"}])).status_code == 204

        assert client.get(f"{BASE}/policydefinitions/p1").json()["createdAt"] == 1000

    def test_duplicate(self, client):
        client.post(f"{BASE}/policydefinitions", json=policy_payload("p1"))
        assert client.post(f"{BASE}/policydefinitions", json=policy_payload("p1")).status_code == 409

    def test_update_and_delete(self, client):
        client.post(f"{BASE}/policydefinitions", json=policy_payload("p1"))

        updated = policy_payload("p1", [{"action": "use"}])
        assert client.put(f"{BASE}/policydefinitions/p1", json=updated).status_code == 204
        assert client.get(f"{BASE}/policydefinitions/p1").json()["policy"]["permission"][0]["action"] == "use"

        assert client.delete(f"{BASE}/policydefinitions/p1").status_code == 204
        assert client.get(f"{BASE}/policydefinitions/p1").status_code == 404

    def test_delete_referenced_policy_warns(self, client, monitor):
        client.post(f"{BASE}/policydefinitions", json=policy_payload("p1"))
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1", policy_id="p1"))

        assert client.delete(f"{BASE}/policydefinitions/p1").status_code == 204

        assert any("def-1" in message for message in monitor.warnings())
        assert client.get(f"{BASE}/contractdefinitions/def-1").status_code == 200

    def test_query(self, client):
        client.post(f"{BASE}/policydefinitions", json=policy_payload("p1"))
        client.post(f"{BASE}/policydefinitions", json=policy_payload("p2"))

        spec = {"filterExpression": [{"operandLeft": "id", "operator": "=", "operandRight": "p2"}]}
        response = client.post(f"{BASE}/policydefinitions/request", json=spec)
        assert [p["@id"] for p in response.json()] == ["p2"]


# ------------------------------------------------------------------------------
# Contract definitions
# ------------------------------------------------------------------------------

class TestContractDefinitions:
    def test_create_before_policy_exists(self, client):
        response = client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1", policy_id="later"))

        assert response.status_code == 201
        body = client.get(f"{BASE}/contractdefinitions/def-1").json()
        assert body["accessPolicyId"] == "later"
        assert body["assetsSelector"] == []

    def test_single_criterion_selector(self, client):
        selector = {"operandLeft": EDC_ID, "operator": "=", "operandRight": "asset-001"}
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1", selector=selector))

        body = client.get(f"{BASE}/contractdefinitions/def-1").json()
        assert body["assetsSelector"] == [
            {"@type": "Criterion", "operandLeft": EDC_ID, "operator": "=", "operandRight": "asset-001"}
        ]

    def test_unsupported_operator_rejected(self, client):
        selector = [{"operandLeft": "category", "operator": "between", "operandRight": ["a", "b"]}]
        response = client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1", selector=selector))

        assert response.status_code == 400
        assert client.get(f"{BASE}/contractdefinitions/def-1").status_code == 404

    def test_missing_policy_id(self, client):
        payload = contract_payload("def-1")
        del payload["contractPolicyId"]
        assert client.post(f"{BASE}/contractdefinitions", json=payload).status_code == 400

    def test_update_mismatch_and_delete(self, client):
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1"))

        assert client.put(f"{BASE}/contractdefinitions/def-1", json=contract_payload("def-2")).status_code == 400
        assert client.put(f"{BASE}/contractdefinitions/def-1", json=contract_payload("def-1", "p2")).status_code == 204
        assert client.get(f"{BASE}/contractdefinitions/def-1").json()["accessPolicyId"] == "p2"

        assert client.delete(f"{BASE}/contractdefinitions/def-1").status_code == 204
        assert client.delete(f"{BASE}/contractdefinitions/def-1").status_code == 404

    def test_update_keeps_creation_time(self, client, stores):
        definition = make_definition("def-1")
        definition.createdAt = 1000
        stores.contracts.create(definition)

        assert client.put(f"{BASE}/contractdefinitions/def-1", json=contract_payload("def-1", "p2")).status_code == 204

        body = client.get(f"{BASE}/contractdefinitions/def-1").json()
        assert body["accessPolicyId"] == "p2"
        assert body["createdAt"] == 1000


# ------------------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------------------

class TestCatalog:
    def test_seeded_catalog(self, seeded_client):
        response = seeded_client.post(f"{BASE}/catalog/request", json={"@type": "CatalogRequest"})

        assert response.status_code == 200
        catalog = response.json()
        assert catalog["@type"] == "dcat:Catalog"
        assert catalog["participantId"] == "provider"
        datasets = {dataset["@id"]: dataset for dataset in catalog["dcat:dataset"]}
        assert set(datasets) == {"weather-api-asset", "market-data-2025-q1"}
        offer = datasets["market-data-2025-q1"]["odrl:hasPolicy"][0]
        assert offer["@id"] == "market-data-contract-def:market-data-2025-q1"
        assert offer["policy"]["@type"] == "Set"

    def test_assets_without_offers_are_omitted(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("weather-api-asset"))
        client.post(f"{BASE}/assets", json=asset_payload("other-asset"))
        client.post(f"{BASE}/policydefinitions", json=policy_payload("allow-all-policy"))
        selector = [{"operandLeft": EDC_ID, "operator": "=", "operandRight": "weather-api-asset"}]
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("weather-contract-def", selector=selector))

        catalog = client.post(f"{BASE}/catalog/request").json()

        assert [dataset["@id"] for dataset in catalog["dcat:dataset"]] == ["weather-api-asset"]
        assert client.get(f"{BASE}/assets/other-asset/offers").json() == []

    def test_query_spec_filters_assets(self, seeded_client):
        request = {
            "querySpec": {"filterExpression": [{"operandLeft": "category", "operator": "=", "operandRight": "weather"}]}
        }
        catalog = seeded_client.post(f"{BASE}/catalog/request", json=request).json()
        assert [dataset["@id"] for dataset in catalog["dcat:dataset"]] == ["weather-api-asset"]

    def test_paging_counts_offered_datasets_only(self, client):
        client.post(f"{BASE}/assets", json=asset_payload("no-offer", category="finance"))
        for asset_id in ("w1", "w2", "w3"):
            client.post(f"{BASE}/assets", json=asset_payload(asset_id, category="weather"))
        client.post(f"{BASE}/policydefinitions", json=policy_payload("allow-all-policy"))
        selector = [{"operandLeft": "category", "operator": "=", "operandRight": "weather"}]
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("weather-def", selector=selector))

        first = client.post(f"{BASE}/catalog/request", json={"querySpec": {"limit": 2}}).json()
        rest = client.post(f"{BASE}/catalog/request", json={"querySpec": {"offset": 2, "limit": 2}}).json()

        assert [dataset["@id"] for dataset in first["dcat:dataset"]] == ["w1", "w2"]
        assert [dataset["@id"] for dataset in rest["dcat:dataset"]] == ["w3"]

    def test_dangling_reference_is_skipped(self, client, monitor):
        client.post(f"{BASE}/assets", json=asset_payload("a1"))
        client.post(f"{BASE}/contractdefinitions", json=contract_payload("def-1", policy_id="missing"))

        catalog = client.post(f"{BASE}/catalog/request").json()

        assert catalog["dcat:dataset"] == []
        assert any("def-1" in message for message in monitor.warnings())

    def test_offers_for_missing_asset(self, client):
        assert client.get(f"{BASE}/assets/nonexistent/offers").status_code == 404

"""Integration tests for the Deal API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from logistics.api import deal_router, parcel_router, register_logistics_exception_handlers
from logistics.deal.deal import Deal
from protean import current_domain

TRANSPORTER = {"X-User-Id": "trn-api-001"}
SHIPPER = {"X-User-Id": "cli-api-001"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(deal_router)
    app.include_router(parcel_router)
    register_logistics_exception_handlers(app)
    return TestClient(app)


def _deal_payload(**overrides):
    payload = {
        "address_from": "Moscow",
        "address_to": "Tver",
        "origin": {"latitude": 55.75, "longitude": 37.61},
        "destination": {"latitude": 56.86, "longitude": 35.92},
        "baggage_types": ["Documents"],
        "transport": "Car",
        "departure_at": "2030-05-01T08:00:00+00:00",
        "arrival_at": "2030-05-01T12:00:00+00:00",
    }
    payload.update(overrides)
    return payload


def _create_deal(client, headers=TRANSPORTER, **overrides):
    response = client.post("/deals", json=_deal_payload(**overrides), headers=headers)
    assert response.status_code == 201
    return response.json()["deal_id"]


def _register_parcel(client, headers=SHIPPER):
    response = client.post(
        "/parcels",
        json={
            "origin": {"latitude": 55.76, "longitude": 37.60},
            "baggage_types": ["Documents"],
            "departure_at": "2030-04-30T08:00:00+00:00",
            "declared_value": 40.0,
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["parcel_id"]


class TestCreateDealAPI:
    def test_create_returns_201(self, client):
        deal_id = _create_deal(client)
        deal = current_domain.repository_for(Deal).get(deal_id)
        assert deal.transporter_id == "trn-api-001"

    def test_overlapping_deal_returns_409(self, client):
        _create_deal(client)
        response = client.post("/deals", json=_deal_payload(), headers=TRANSPORTER)
        assert response.status_code == 409

    def test_invalid_transport_returns_400(self, client):
        response = client.post("/deals", json=_deal_payload(transport="Horse"), headers=TRANSPORTER)
        assert response.status_code == 400

    def test_out_of_range_latitude_returns_422(self, client):
        response = client.post(
            "/deals",
            json=_deal_payload(origin={"latitude": 95.0, "longitude": 0.0}),
            headers=TRANSPORTER,
        )
        assert response.status_code == 422

    def test_missing_user_header_returns_422(self, client):
        response = client.post("/deals", json=_deal_payload())
        assert response.status_code == 422


class TestReadDealAPI:
    def test_get_deal(self, client):
        deal_id = _create_deal(client)
        response = client.get(f"/deals/{deal_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "BeingFormed"
        assert body["baggage_types"] == ["Documents"]
        assert body["origin"] == {"latitude": 55.75, "longitude": 37.61}
        assert body["offers"] == []

    def test_unknown_deal_returns_404(self, client):
        response = client.get("/deals/does-not-exist")
        assert response.status_code == 404

    def test_list_by_transporter_and_actuality(self, client):
        deal_id = _create_deal(client)
        response = client.get("/deals", params={"transporter_id": "trn-api-001", "actuality": "Current"})
        assert [d["deal_id"] for d in response.json()] == [deal_id]
        response = client.get("/deals", params={"transporter_id": "trn-api-001", "actuality": "Archive"})
        assert response.json() == []

    def test_search(self, client):
        deal_id = _create_deal(client)
        response = client.post(
            "/deals/search",
            json={
                "baggage_types": ["Documents"],
                "origin": {"latitude": 55.76, "longitude": 37.60},
                "radius_km": 10,
                "not_before": "2030-04-30T00:00:00+00:00",
            },
        )
        assert response.status_code == 200
        assert [m["deal"]["deal_id"] for m in response.json()] == [deal_id]

    def test_parcel_draft(self, client):
        deal_id = _create_deal(client)
        response = client.get(f"/deals/{deal_id}/parcel-draft")
        assert response.status_code == 200
        assert response.json()["address_to"] == "Tver"


class TestDealActionsAPI:
    def test_patch_deal(self, client):
        deal_id = _create_deal(client)
        response = client.patch(f"/deals/{deal_id}", json={"description": "Roof box available"})
        assert response.status_code == 200
        assert response.json()["description"] == "Roof box available"

    def test_whole_deal_action(self, client):
        deal_id = _create_deal(client)
        response = client.put(f"/deals/{deal_id}/actions/TransporterCancelsDeal")
        assert response.status_code == 200
        assert response.json() == {"status": "DealIsCancel"}

    def test_unknown_action_returns_400(self, client):
        deal_id = _create_deal(client)
        response = client.put(f"/deals/{deal_id}/actions/Teleport")
        assert response.status_code == 400

    def test_offer_action_touches_one_offer(self, client):
        deal_id = _create_deal(client)
        first = client.post(
            f"/deals/{deal_id}/offers",
            json={"client_id": "cli-1", "status": "AgreeClient", "created_by": "ClientInitiated"},
        ).json()["offer_id"]
        client.post(
            f"/deals/{deal_id}/offers",
            json={"client_id": "cli-2", "status": "AgreeClient", "created_by": "ClientInitiated"},
        )

        response = client.put(f"/deals/{deal_id}/offers/{first}/actions/TransporterRejectsOffer")

        assert response.status_code == 200
        assert response.json() == {"offer_ids": [first]}
        offers = {o["offer_id"]: o["status"] for o in client.get(f"/deals/{deal_id}").json()["offers"]}
        assert offers[first] == "DisagreeShifter"
        assert sorted(offers.values()) == ["AgreeClient", "DisagreeShifter"]

    def test_unknown_offer_returns_404(self, client):
        deal_id = _create_deal(client)
        response = client.put(f"/deals/{deal_id}/offers/missing/actions/ShipperDisagrees")
        assert response.status_code == 404

    def test_bulk_statuses(self, client):
        deal_id = _create_deal(client)
        response = client.put(
            f"/deals/{deal_id}/statuses",
            json={"deal_status": "OnTheWay", "offer_status": "AgreeAll"},
        )
        assert response.status_code == 200
        assert client.get(f"/deals/{deal_id}").json()["status"] == "OnTheWay"


class TestSubscriptionAPI:
    def test_client_subscription_success(self, client):
        deal_id = _create_deal(client)
        parcel_id = _register_parcel(client)

        response = client.post(
            f"/deals/{deal_id}/subscriptions/client",
            json={"parcel_ids": [parcel_id]},
            headers=SHIPPER,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["outcomes"][0]["outcome"] == "subscribed"

    def test_partial_subscription_returns_207(self, client):
        deal_id = _create_deal(client)
        parcel_id = _register_parcel(client)

        response = client.post(
            f"/deals/{deal_id}/subscriptions/client",
            json={"parcel_ids": [parcel_id, "prc-missing"]},
            headers=SHIPPER,
        )

        assert response.status_code == 207
        outcomes = {o["parcel_id"]: o["outcome"] for o in response.json()["outcomes"]}
        assert outcomes == {parcel_id: "subscribed", "prc-missing": "not_found"}

    def test_failed_subscription_returns_409(self, client):
        deal_id = _create_deal(client)
        response = client.post(
            f"/deals/{deal_id}/subscriptions/client",
            json={"parcel_ids": ["prc-missing"]},
            headers=SHIPPER,
        )
        assert response.status_code == 409

    def test_empty_batch_returns_422(self, client):
        deal_id = _create_deal(client)
        response = client.post(f"/deals/{deal_id}/subscriptions/client", json={"parcel_ids": []}, headers=SHIPPER)
        assert response.status_code == 422

    def test_transporter_proposal_then_accept(self, client):
        deal_id = _create_deal(client)
        parcel_id = _register_parcel(client)
        proposal = client.post(
            f"/deals/{deal_id}/subscriptions/transporter",
            json={"parcel_ids": [parcel_id]},
            headers=TRANSPORTER,
        ).json()
        offer_id = proposal["outcomes"][0]["offer_id"]

        response = client.put(f"/deals/{deal_id}/offers/{offer_id}/accept")

        assert response.status_code == 200
        assert response.json()["parcel_linked"] is True
        assert client.get(f"/parcels/{parcel_id}").json()["offer_id"] == offer_id
        assert [p["parcel_id"] for p in client.get(f"/deals/{deal_id}/parcels").json()] == [parcel_id]

    def test_foreign_transporter_proposal_returns_400(self, client):
        deal_id = _create_deal(client)
        parcel_id = _register_parcel(client)
        response = client.post(
            f"/deals/{deal_id}/subscriptions/transporter",
            json={"parcel_ids": [parcel_id]},
            headers={"X-User-Id": "trn-other"},
        )
        assert response.status_code == 400

    def test_cancel_subscription(self, client):
        deal_id = _create_deal(client)
        parcel_id = _register_parcel(client)
        subscription = client.post(
            f"/deals/{deal_id}/subscriptions/client",
            json={"parcel_ids": [parcel_id]},
            headers=SHIPPER,
        ).json()
        offer_id = subscription["outcomes"][0]["offer_id"]

        response = client.delete(f"/deals/{deal_id}/subscriptions/{parcel_id}")

        assert response.status_code == 200
        assert response.json() == {"offer_ids": [offer_id]}
        assert client.get(f"/parcels/{parcel_id}").json()["offer_id"] is None

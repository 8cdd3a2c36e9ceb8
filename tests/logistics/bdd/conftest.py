"""Shared BDD fixtures and step definitions for the logistics domain."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from logistics.deal.creation import CreateDeal
from logistics.deal.deal import Deal
from logistics.parcel.parcel import Parcel
from logistics.parcel.registration import RegisterParcel
from logistics.parcel.subscription import subscribe_parcels_as_client
from protean import current_domain
from pytest_bdd import given, parsers, then, when

DEPARTURE = datetime(2030, 5, 1, 8, 0, tzinfo=UTC)


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def parcels():
    """Parcel ids registered in the scenario, in order."""
    return []


@pytest.fixture()
def offer():
    """The offer created by the scenario."""
    return {"id": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a deal published by transporter "{transporter_id}"'), target_fixture="deal_id")
def published_deal(transporter_id):
    return current_domain.process(
        CreateDeal(
            transporter_id=transporter_id,
            origin_latitude=55.75,
            origin_longitude=37.61,
            baggage_types=json.dumps(["Documents"]),
            transport="Car",
            departure_at=DEPARTURE,
            arrival_at=DEPARTURE + timedelta(hours=4),
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('a parcel registered by shipper "{client_id}"'))
def registered_parcel(client_id, parcels):
    parcels.append(
        current_domain.process(
            RegisterParcel(
                owner_client_id=client_id,
                origin_latitude=55.76,
                origin_longitude=37.60,
                baggage_types=json.dumps(["Documents"]),
                departure_at=DEPARTURE - timedelta(days=1),
                declared_value=25.0,
            ),
            asynchronous=False,
        )
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shipper subscribes the parcel to the deal")
def shipper_subscribes(deal_id, parcels, offer):
    result = subscribe_parcels_as_client(deal_id, parcels[:1], "cli-bdd")
    offer["id"] = result.outcomes[0].offer_id


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the deal status is "{status}"'))
def deal_status_is(deal_id, status):
    assert current_domain.repository_for(Deal).get(deal_id).status == status


@then(parsers.cfparse('the offer status is "{status}"'))
def offer_status_is(deal_id, offer, status):
    deal = current_domain.repository_for(Deal).get(deal_id)
    assert deal.offer(offer["id"]).status == status


@then("the parcel is linked to the offer")
def parcel_is_linked(parcels, offer):
    parcel = current_domain.repository_for(Parcel).get(parcels[0])
    assert parcel.offer_id == offer["id"]


@then("the parcel is not linked")
def parcel_is_not_linked(parcels):
    parcel = current_domain.repository_for(Parcel).get(parcels[0])
    assert parcel.offer_id is None

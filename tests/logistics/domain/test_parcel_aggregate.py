"""Tests for the Parcel aggregate and its link to an Offer."""

from datetime import UTC, datetime

import pytest
from logistics.errors import ConflictError, ParcelAlreadyLinked
from logistics.parcel.events import ParcelLinked, ParcelRegistered, ParcelUnlinked
from logistics.parcel.parcel import Parcel
from logistics.shared.geo_point import GeoPoint
from protean.exceptions import ValidationError


def _make_parcel(**overrides):
    defaults = {
        "owner_client_id": "cli-001",
        "origin": GeoPoint(latitude=55.75, longitude=37.61),
        "baggage_types": ["Documents"],
        "departure_at": datetime(2030, 5, 1, tzinfo=UTC),
        "declared_value": 250.0,
    }
    defaults.update(overrides)
    return Parcel.register(**defaults)


class TestRegistration:
    def test_new_parcel_is_unlinked(self):
        parcel = _make_parcel()
        assert not parcel.is_linked
        assert parcel.deal_id is None

    def test_raises_registered_event(self):
        parcel = _make_parcel()
        assert any(isinstance(e, ParcelRegistered) for e in parcel._events)

    def test_declared_value_defaults_to_zero(self):
        parcel = _make_parcel(declared_value=None)
        assert parcel.declared_value == 0.0

    def test_negative_declared_value_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_parcel(declared_value=-1.0)

    def test_owned_by(self):
        parcel = _make_parcel()
        assert parcel.owned_by("cli-001")
        assert not parcel.owned_by("cli-002")


class TestLink:
    def test_link_sets_back_reference(self):
        parcel = _make_parcel()
        assert parcel.link("deal-1", "offer-1") is True
        assert parcel.deal_id == "deal-1"
        assert parcel.offer_id == "offer-1"
        assert any(isinstance(e, ParcelLinked) for e in parcel._events)

    def test_relinking_the_same_offer_is_a_no_op(self):
        parcel = _make_parcel()
        parcel.link("deal-1", "offer-1")
        assert parcel.link("deal-1", "offer-1") is False

    def test_linking_to_another_offer_is_a_conflict(self):
        parcel = _make_parcel()
        parcel.link("deal-1", "offer-1")
        with pytest.raises(ParcelAlreadyLinked) as exc:
            parcel.link("deal-2", "offer-2")
        assert isinstance(exc.value, ConflictError)
        assert parcel.offer_id == "offer-1"


class TestUnlink:
    def test_unlink_clears_reference(self):
        parcel = _make_parcel()
        parcel.link("deal-1", "offer-1")
        assert parcel.unlink("offer-1") is True
        assert parcel.offer_id is None
        assert parcel.deal_id is None
        assert any(isinstance(e, ParcelUnlinked) for e in parcel._events)

    def test_unlink_of_a_different_offer_is_ignored(self):
        parcel = _make_parcel()
        parcel.link("deal-1", "offer-1")
        assert parcel.unlink("offer-9") is False
        assert parcel.offer_id == "offer-1"

    def test_unlink_requires_offer_id(self):
        parcel = _make_parcel()
        with pytest.raises(ValidationError):
            parcel.unlink("")


class TestUpdateShipment:
    def test_update_keeps_owner_and_link(self):
        parcel = _make_parcel()
        parcel.link("deal-1", "offer-1")
        parcel.update_shipment(description="Fragile", baggage_types=["Documents", "Pet"])
        assert parcel.description == "Fragile"
        assert parcel.baggage == ["Documents", "Pet"]
        assert parcel.owner_client_id == "cli-001"
        assert parcel.offer_id == "offer-1"

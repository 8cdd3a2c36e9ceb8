"""Integration tests for the DealOrigin projection and its provisioning."""

import json
from datetime import UTC, datetime

from logistics.deal.creation import CreateDeal
from logistics.deal.deal import Deal
from logistics.deal.modification import PatchDeal
from logistics.matching.origin_index import DealOrigin, provision_origin_index
from logistics.shared.geo_point import GeoPoint
from protean import current_domain

DEPARTURE = datetime(2030, 5, 1, 8, 0, tzinfo=UTC)


def _create_deal():
    return current_domain.process(
        CreateDeal(
            transporter_id="trn-001",
            origin_latitude=55.75,
            origin_longitude=37.61,
            baggage_types=json.dumps(["Documents"]),
            transport="Train",
            departure_at=DEPARTURE,
        ),
        asynchronous=False,
    )


class TestDealOriginProjection:
    def test_row_created_with_deal(self):
        deal_id = _create_deal()
        row = current_domain.repository_for(DealOrigin).get(deal_id)
        assert row.latitude == 55.75
        assert row.longitude == 37.61
        assert json.loads(row.baggage_types) == ["Documents"]

    def test_row_follows_route_edits(self):
        deal_id = _create_deal()
        current_domain.process(
            PatchDeal(
                deal_id=deal_id,
                origin_latitude=59.93,
                origin_longitude=30.31,
                baggage_types=json.dumps(["Pet"]),
            ),
            asynchronous=False,
        )
        row = current_domain.repository_for(DealOrigin).get(deal_id)
        assert row.latitude == 59.93
        assert json.loads(row.baggage_types) == ["Pet"]


class TestProvisionOriginIndex:
    def test_backfills_deals_without_rows(self):
        deal = Deal(
            transporter_id="trn-legacy",
            origin=GeoPoint(latitude=10.0, longitude=20.0),
            baggage_types=json.dumps(["Documents"]),
            transport="Truck",
            departure_at=DEPARTURE,
        )
        # Built without the factory, so no DealCreated event reaches the projector
        current_domain.repository_for(Deal).add(deal)

        assert provision_origin_index() == 1
        row = current_domain.repository_for(DealOrigin).get(str(deal.id))
        assert row.latitude == 10.0

    def test_is_idempotent(self):
        _create_deal()
        assert provision_origin_index() == 0
        assert provision_origin_index() == 0
        assert len(current_domain.repository_for(DealOrigin)._dao.query.all().items) == 1

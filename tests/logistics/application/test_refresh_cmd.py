"""Application tests for the periodic deal status refresh."""

import json
from datetime import UTC, datetime, timedelta

from logistics.deal.actions import ApplyDealAction, ApplyOfferAction
from logistics.deal.creation import CreateDeal
from logistics.deal.deal import Deal
from logistics.deal.offers import InsertOffer
from logistics.deal.refresh import RefreshDealStatuses
from logistics.deal.status import DealStatus, OfferStatus
from protean import current_domain

DEPARTURE = datetime(2030, 5, 1, 8, 0, tzinfo=UTC)


def _create_deal(transporter_id, departure_at=DEPARTURE):
    return current_domain.process(
        CreateDeal(
            transporter_id=transporter_id,
            origin_latitude=55.75,
            origin_longitude=37.61,
            baggage_types=json.dumps(["Documents"]),
            transport="Bus",
            departure_at=departure_at,
        ),
        asynchronous=False,
    )


def _agreed_offer(deal_id):
    offer_id = current_domain.process(
        InsertOffer(
            deal_id=deal_id,
            client_id="cli-001",
            status=OfferStatus.AGREE_SHIFTER.value,
            created_by="TransporterInitiated",
        ),
        asynchronous=False,
    )
    current_domain.process(
        ApplyOfferAction(deal_id=deal_id, action="SecondSideAgrees", offer_id=offer_id),
        asynchronous=False,
    )
    return offer_id


def _refresh(as_of):
    return current_domain.process(RefreshDealStatuses(as_of=as_of), asynchronous=False)


def _status(deal_id):
    return current_domain.repository_for(Deal).get(deal_id).status


class TestRefreshDealStatuses:
    def test_agreed_deal_goes_on_the_way(self):
        deal_id = _create_deal("trn-001")
        _agreed_offer(deal_id)

        assert _refresh(DEPARTURE + timedelta(minutes=5)) == 1
        assert _status(deal_id) == DealStatus.ON_THE_WAY.value

    def test_deal_without_agreement_expires(self):
        deal_id = _create_deal("trn-001")
        assert _refresh(DEPARTURE + timedelta(minutes=5)) == 1
        assert _status(deal_id) == DealStatus.TIME_IS_UP.value

    def test_future_deals_are_untouched(self):
        deal_id = _create_deal("trn-001", departure_at=DEPARTURE + timedelta(days=3))
        assert _refresh(DEPARTURE) == 0
        assert _status(deal_id) == DealStatus.BEING_FORMED.value

    def test_archived_deals_are_untouched(self):
        deal_id = _create_deal("trn-001")
        current_domain.process(ApplyDealAction(deal_id=deal_id, action="FinishDeal"), asynchronous=False)
        before = current_domain.repository_for(Deal).get(deal_id).to_dict()
        assert _refresh(DEPARTURE + timedelta(days=1)) == 0
        assert current_domain.repository_for(Deal).get(deal_id).to_dict() == before
        assert _status(deal_id) == DealStatus.DEAL_IS_OVER.value

    def test_second_run_is_a_no_op(self):
        agreed = _create_deal("trn-001")
        _agreed_offer(agreed)
        _create_deal("trn-002")

        assert _refresh(DEPARTURE + timedelta(hours=1)) == 2
        assert _refresh(DEPARTURE + timedelta(hours=2)) == 0
        assert _status(agreed) == DealStatus.ON_THE_WAY.value

    def test_defaults_to_now(self):
        past = datetime.now(UTC) - timedelta(days=1)
        deal_id = _create_deal("trn-001", departure_at=past)
        assert current_domain.process(RefreshDealStatuses(), asynchronous=False) == 1
        assert _status(deal_id) == DealStatus.TIME_IS_UP.value


class TestRefreshOnLargeStore:
    def test_due_deals_past_the_first_hundred_are_advanced(self):
        for i in range(110):
            _create_deal(f"trn-future-{i:03d}", departure_at=DEPARTURE + timedelta(days=10))
        due = [_create_deal(f"trn-due-{i:03d}") for i in range(10)]

        assert _refresh(DEPARTURE) == 10
        assert {_status(deal_id) for deal_id in due} == {DealStatus.TIME_IS_UP.value}

"""Read-side helpers over the Deal store.

Listing views used by the API: a transporter's deals, deals containing a
parcel's offers, a client's deals by status, a parcel's offers split by
actuality, and offer lookup by id.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal, Offer
from logistics.deal.status import Actuality, DealStatus, statuses_for


@dataclass(frozen=True)
class OfferInDeal:
    deal: Deal
    offer: Offer


def get_deal(deal_id: str) -> Deal:
    return current_domain.repository_for(Deal).get(deal_id)


def deals_for_transporter(transporter_id: str, actuality: Actuality | str | None = None) -> list[Deal]:
    deals = current_domain.repository_for(Deal).find_by_transporter(transporter_id)
    if actuality is None:
        return deals
    wanted = {s.value for s in statuses_for(actuality)}
    return [d for d in deals if d.status in wanted]


def deals_for_parcel(parcel_id: str) -> list[Deal]:
    return current_domain.repository_for(Deal).find_by_parcel(parcel_id)


def deals_for_client(client_id: str, statuses) -> list[Deal]:
    """Deals in one of ``statuses`` where ``client_id`` holds at least one offer."""
    deals = current_domain.repository_for(Deal).find_by_statuses([DealStatus(s) for s in statuses])
    return [d for d in deals if any(str(o.client_id) == str(client_id) for o in (d.offers or []))]


def offers_for_parcel(parcel_id: str, actuality: Actuality | str) -> list[OfferInDeal]:
    wanted = statuses_for(actuality)
    deals = current_domain.repository_for(Deal).find_by_statuses(wanted)
    return [OfferInDeal(deal=d, offer=o) for d in deals for o in d.offers_for_parcel(parcel_id)]


def find_offer(offer_id: str) -> OfferInDeal:
    deal = current_domain.repository_for(Deal).find_by_offer(offer_id)
    if deal is None:
        raise ObjectNotFoundError(f"Offer {offer_id} does not exist")
    return OfferInDeal(deal=deal, offer=deal.offer(offer_id))

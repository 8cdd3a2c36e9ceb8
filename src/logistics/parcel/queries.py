"""Read-side helpers over the Parcel store."""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from logistics.deal.deal import Deal, Offer
from logistics.parcel.parcel import Parcel


@dataclass
class ParcelWithOffers:
    parcel: Parcel
    offers: list[Offer] = field(default_factory=list)


def get_parcel(parcel_id: str) -> Parcel:
    return current_domain.repository_for(Parcel).get(parcel_id)


def parcels_for_deal(deal_id: str) -> list[Parcel]:
    """Parcels whose back-reference points at one of the Deal's Offers."""
    deal = current_domain.repository_for(Deal).get(deal_id)
    offer_ids = [str(o.id) for o in (deal.offers or [])]
    return current_domain.repository_for(Parcel).find_by_offer_ids(offer_ids)


def parcels_for_owner(owner_client_id: str) -> list[ParcelWithOffers]:
    """The shipper's parcels, each with every Offer made for it on any Deal."""
    parcels = current_domain.repository_for(Parcel).find_by_owner(owner_client_id)
    if not parcels:
        return []

    by_parcel = {str(p.id): ParcelWithOffers(parcel=p) for p in parcels}
    for deal in current_domain.repository_for(Deal).find_all():
        for offer in deal.offers or []:
            entry = by_parcel.get(str(offer.parcel_id)) if offer.parcel_id else None
            if entry is not None:
                entry.offers.append(offer)
    return list(by_parcel.values())

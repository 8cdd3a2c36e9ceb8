"""Form drafts across aggregates.

A shipper browsing a Deal can start a Parcel pre-filled from the route, and
a transporter looking at a Parcel can start a Deal pre-filled from the
shipment. Drafts are plain dicts shaped like the matching commands; nothing
is persisted.
"""

from logistics.deal.deal import Deal
from logistics.parcel.parcel import Parcel


def _point(point, prefix: str) -> dict:
    if point is None:
        return {f"{prefix}_latitude": None, f"{prefix}_longitude": None}
    return {f"{prefix}_latitude": point.latitude, f"{prefix}_longitude": point.longitude}


def deal_draft_from_parcel(parcel: Parcel) -> dict:
    return {
        "address_from": parcel.address_from,
        "address_to": parcel.address_to,
        **_point(parcel.origin, "origin"),
        **_point(parcel.destination, "destination"),
        "baggage_types": parcel.baggage,
        "departure_at": parcel.departure_at,
        "arrival_at": None,
        "transport": None,
        "description": parcel.description,
    }


def parcel_draft_from_deal(deal: Deal) -> dict:
    return {
        "address_from": deal.address_from,
        "address_to": deal.address_to,
        **_point(deal.origin, "origin"),
        **_point(deal.destination, "destination"),
        "baggage_types": deal.baggage,
        "departure_at": deal.departure_at,
        "declared_value": None,
        "description": None,
    }

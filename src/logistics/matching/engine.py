"""Matching engine: which Deals can carry a Parcel.

A Deal matches when its baggage set intersects the requested one, its
origin lies within the radius of the requested point and it departs
strictly after ``not_before``. The DealOrigin query narrows candidates to a
latitude band and to later departures; the exact spherical distance is
computed here.
"""

import os
from dataclasses import dataclass
from datetime import datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.matching.geo import haversine_km, latitude_band
from logistics.matching.origin_index import DealOrigin
from logistics.parcel.parcel import Parcel
from logistics.shared.baggage import intersects, parse_baggage_types
from logistics.shared.clock import as_utc

logger = structlog.get_logger(__name__)


def default_radius_km() -> float:
    return float(os.environ.get("DEFAULT_SEARCH_RADIUS_KM", "50"))


@dataclass(frozen=True)
class DealMatch:
    deal: Deal
    distance_km: float


def find_compatible_deals(
    baggage_types,
    latitude: float,
    longitude: float,
    radius_km: float,
    not_before: datetime,
) -> list[DealMatch]:
    """Deals able to carry the described shipment, nearest first."""
    if radius_km is None or radius_km < 0:
        raise ValidationError({"radius_km": ["Radius must be zero or positive"]})
    wanted = set(parse_baggage_types(baggage_types))
    if not wanted:
        return []

    south, north = latitude_band(latitude, radius_km)
    candidates = (
        current_domain.repository_for(DealOrigin)
        ._dao.query.filter(
            latitude__gte=south,
            latitude__lte=north,
            departure_at__gt=as_utc(not_before),
        )
        .limit(None)
        .all()
        .items
    )

    deal_repo = current_domain.repository_for(Deal)
    matches = []
    for row in candidates:
        if not intersects(wanted, row.baggage_types):
            continue
        distance = haversine_km(latitude, longitude, row.latitude, row.longitude)
        if distance > radius_km:
            continue
        try:
            deal = deal_repo.get(row.deal_id)
        except ObjectNotFoundError:
            logger.warning("Index row without deal", deal_id=str(row.deal_id))
            continue
        matches.append(DealMatch(deal=deal, distance_km=distance))

    matches.sort(key=lambda m: (m.distance_km, as_utc(m.deal.departure_at)))
    logger.debug("Compatible deals found", count=len(matches), radius_km=radius_km)
    return matches


def find_deals_for_parcel(parcel_id: str, radius_km: float | None = None) -> list[DealMatch]:
    """Compatible Deals for a stored Parcel, departing after the parcel's requested time."""
    parcel = current_domain.repository_for(Parcel).get(parcel_id)
    return find_compatible_deals(
        baggage_types=parcel.baggage_types,
        latitude=parcel.origin.latitude,
        longitude=parcel.origin.longitude,
        radius_km=default_radius_km() if radius_km is None else radius_km,
        not_before=parcel.departure_at,
    )

"""Pydantic API schemas for the logistics domain.

These are the external API contracts, separate from domain commands. The
routes translate between these schemas and commands or query results.
"""

import json
from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class PointRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class CreateDealRequest(BaseModel):
    address_from: str | None = None
    address_to: str | None = None
    origin: PointRequest
    destination: PointRequest | None = None
    baggage_types: list[str]
    transport: str
    departure_at: datetime
    arrival_at: datetime | None = None
    description: str | None = None


class PatchDealRequest(BaseModel):
    address_from: str | None = None
    address_to: str | None = None
    origin: PointRequest | None = None
    destination: PointRequest | None = None
    baggage_types: list[str] | None = None
    transport: str | None = None
    departure_at: datetime | None = None
    arrival_at: datetime | None = None
    description: str | None = None


class BulkStatusRequest(BaseModel):
    deal_status: str
    offer_status: str


class InsertOfferRequest(BaseModel):
    client_id: str
    parcel_id: str | None = None
    status: str
    created_by: str
    amount: float | None = Field(default=None, ge=0)
    description: str | None = None


class SubscribeParcelsRequest(BaseModel):
    parcel_ids: list[str] = Field(min_length=1)


class SearchDealsRequest(BaseModel):
    baggage_types: list[str]
    origin: PointRequest
    radius_km: float = Field(ge=0)
    not_before: datetime


class ParcelRequest(BaseModel):
    address_from: str | None = None
    address_to: str | None = None
    origin: PointRequest
    destination: PointRequest | None = None
    baggage_types: list[str]
    departure_at: datetime
    declared_value: float = Field(default=0.0, ge=0)
    description: str | None = None


class UpdateParcelRequest(BaseModel):
    address_from: str | None = None
    address_to: str | None = None
    origin: PointRequest | None = None
    destination: PointRequest | None = None
    baggage_types: list[str] | None = None
    departure_at: datetime | None = None
    declared_value: float | None = Field(default=None, ge=0)
    description: str | None = None


class MaintenanceRequest(BaseModel):
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str


class DealIdResponse(BaseModel):
    deal_id: str


class OfferIdResponse(BaseModel):
    offer_id: str


class ParcelIdResponse(BaseModel):
    parcel_id: str


class PointResponse(BaseModel):
    latitude: float
    longitude: float

    @classmethod
    def from_vo(cls, point) -> "PointResponse | None":
        if point is None:
            return None
        return cls(latitude=point.latitude, longitude=point.longitude)


class OfferResponse(BaseModel):
    offer_id: str
    client_id: str
    parcel_id: str | None = None
    status: str
    created_by: str
    amount: float | None = None
    description: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_entity(cls, offer) -> "OfferResponse":
        return cls(
            offer_id=str(offer.id),
            client_id=str(offer.client_id),
            parcel_id=str(offer.parcel_id) if offer.parcel_id else None,
            status=offer.status,
            created_by=offer.created_by,
            amount=offer.amount,
            description=offer.description,
            last_modified=offer.last_modified,
        )


class DealResponse(BaseModel):
    deal_id: str
    transporter_id: str
    status: str
    description: str | None = None
    address_from: str | None = None
    address_to: str | None = None
    origin: PointResponse
    destination: PointResponse | None = None
    baggage_types: list[str]
    transport: str
    departure_at: datetime
    arrival_at: datetime | None = None
    offers: list[OfferResponse]
    total_amount: float
    last_modified: datetime | None = None

    @classmethod
    def from_aggregate(cls, deal) -> "DealResponse":
        return cls(
            deal_id=str(deal.id),
            transporter_id=str(deal.transporter_id),
            status=deal.status,
            description=deal.description,
            address_from=deal.address_from,
            address_to=deal.address_to,
            origin=PointResponse.from_vo(deal.origin),
            destination=PointResponse.from_vo(deal.destination),
            baggage_types=deal.baggage,
            transport=deal.transport,
            departure_at=deal.departure_at,
            arrival_at=deal.arrival_at,
            offers=[OfferResponse.from_entity(o) for o in (deal.offers or [])],
            total_amount=deal.total_amount(),
            last_modified=deal.last_modified,
        )


class DealMatchResponse(BaseModel):
    deal: DealResponse
    distance_km: float


class OfferInDealResponse(BaseModel):
    deal_id: str
    deal_status: str
    offer: OfferResponse


class ParcelResponse(BaseModel):
    parcel_id: str
    owner_client_id: str
    address_from: str | None = None
    address_to: str | None = None
    origin: PointResponse
    destination: PointResponse | None = None
    baggage_types: list[str]
    departure_at: datetime
    declared_value: float
    description: str | None = None
    deal_id: str | None = None
    offer_id: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_aggregate(cls, parcel) -> "ParcelResponse":
        return cls(
            parcel_id=str(parcel.id),
            owner_client_id=str(parcel.owner_client_id),
            address_from=parcel.address_from,
            address_to=parcel.address_to,
            origin=PointResponse.from_vo(parcel.origin),
            destination=PointResponse.from_vo(parcel.destination),
            baggage_types=parcel.baggage,
            departure_at=parcel.departure_at,
            declared_value=parcel.declared_value or 0.0,
            description=parcel.description,
            deal_id=str(parcel.deal_id) if parcel.deal_id else None,
            offer_id=str(parcel.offer_id) if parcel.offer_id else None,
            last_modified=parcel.last_modified,
        )


class ParcelWithOffersResponse(BaseModel):
    parcel: ParcelResponse
    offers: list[OfferResponse]


class ParcelOutcomeResponse(BaseModel):
    parcel_id: str
    outcome: str
    offer_id: str | None = None
    error: str | None = None


class SubscriptionResponse(BaseModel):
    deal_id: str
    status: str
    outcomes: list[ParcelOutcomeResponse]

    @classmethod
    def from_result(cls, result) -> "SubscriptionResponse":
        return cls(
            deal_id=result.deal_id,
            status=result.status,
            outcomes=[
                ParcelOutcomeResponse(
                    parcel_id=o.parcel_id,
                    outcome=o.outcome.value,
                    offer_id=o.offer_id,
                    error=o.error,
                )
                for o in result.outcomes
            ],
        )


class LinkResponse(BaseModel):
    deal_id: str
    offer_id: str
    parcel_id: str | None = None
    parcel_linked: bool
    error: str | None = None


class OfferIdsResponse(BaseModel):
    offer_ids: list[str]


class RefreshResponse(BaseModel):
    advanced: int


class ReconcileResponse(BaseModel):
    linked: int
    unlinked: int
    conflicts: int


def baggage_json(baggage_types: list[str] | None) -> str | None:
    return json.dumps(baggage_types) if baggage_types is not None else None

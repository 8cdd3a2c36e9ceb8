"""FastAPI routes for the logistics domain."""

from datetime import datetime

from fastapi import APIRouter, Header, Query, Response
from protean.utils.globals import current_domain

from logistics.api.schemas import (
    BulkStatusRequest,
    CreateDealRequest,
    DealIdResponse,
    DealMatchResponse,
    DealResponse,
    InsertOfferRequest,
    LinkResponse,
    MaintenanceRequest,
    OfferIdResponse,
    OfferIdsResponse,
    OfferInDealResponse,
    OfferResponse,
    ParcelIdResponse,
    ParcelRequest,
    ParcelResponse,
    ParcelWithOffersResponse,
    PatchDealRequest,
    ReconcileResponse,
    RefreshResponse,
    SearchDealsRequest,
    StatusResponse,
    SubscribeParcelsRequest,
    SubscriptionResponse,
    UpdateParcelRequest,
    baggage_json,
)
from logistics.deal import queries as deal_queries
from logistics.deal.actions import ApplyDealAction, ApplyOfferAction, BulkSetOfferStatus
from logistics.deal.creation import CreateDeal
from logistics.deal.modification import PatchDeal
from logistics.deal.offers import InsertOffer
from logistics.deal.refresh import RefreshDealStatuses
from logistics.deal.status import Actuality
from logistics.matching.engine import find_compatible_deals, find_deals_for_parcel
from logistics.parcel import queries as parcel_queries
from logistics.parcel.drafts import deal_draft_from_parcel, parcel_draft_from_deal
from logistics.parcel.reconciliation import ReconcileParcelLinks
from logistics.parcel.registration import RegisterParcel, UpdateParcel
from logistics.parcel.subscription import (
    cancel_parcel_subscription,
    link_accepted_offer,
    subscribe_parcels_as_client,
    subscribe_parcels_as_shifter,
)


def _point_fields(point, prefix: str) -> dict:
    if point is None:
        return {}
    return {f"{prefix}_latitude": point.latitude, f"{prefix}_longitude": point.longitude}


def _subscription_response(result, response: Response) -> SubscriptionResponse:
    if result.status == "partial":
        response.status_code = 207
    elif result.status == "failed":
        response.status_code = 409
    return SubscriptionResponse.from_result(result)


# ---------------------------------------------------------------------------
# Deal Router
# ---------------------------------------------------------------------------
deal_router = APIRouter(prefix="/deals", tags=["deals"])


@deal_router.post("", status_code=201, response_model=DealIdResponse)
async def create_deal(body: CreateDealRequest, x_user_id: str = Header()) -> DealIdResponse:
    """Publish a route for the calling transporter."""
    command = CreateDeal(
        transporter_id=x_user_id,
        address_from=body.address_from,
        address_to=body.address_to,
        **_point_fields(body.origin, "origin"),
        **_point_fields(body.destination, "destination"),
        baggage_types=baggage_json(body.baggage_types),
        transport=body.transport,
        departure_at=body.departure_at,
        arrival_at=body.arrival_at,
        description=body.description,
    )
    result = current_domain.process(command, asynchronous=False)
    return DealIdResponse(deal_id=result)


@deal_router.get("", response_model=list[DealResponse])
async def list_deals(
    transporter_id: str | None = None,
    client_id: str | None = None,
    actuality: Actuality | None = None,
    statuses: list[str] | None = Query(default=None),
) -> list[DealResponse]:
    """Deals of a transporter (optionally by actuality) or of a client by statuses."""
    if client_id:
        deals = deal_queries.deals_for_client(client_id, statuses or [])
    elif transporter_id:
        deals = deal_queries.deals_for_transporter(transporter_id, actuality)
    else:
        deals = []
    return [DealResponse.from_aggregate(d) for d in deals]


@deal_router.post("/search", response_model=list[DealMatchResponse])
async def search_deals(body: SearchDealsRequest) -> list[DealMatchResponse]:
    """Find Deals able to carry a shipment from around a point."""
    matches = find_compatible_deals(
        baggage_types=body.baggage_types,
        latitude=body.origin.latitude,
        longitude=body.origin.longitude,
        radius_km=body.radius_km,
        not_before=body.not_before,
    )
    return [DealMatchResponse(deal=DealResponse.from_aggregate(m.deal), distance_km=m.distance_km) for m in matches]


@deal_router.get("/offers/{offer_id}", response_model=OfferInDealResponse)
async def get_offer(offer_id: str) -> OfferInDealResponse:
    found = deal_queries.find_offer(offer_id)
    return OfferInDealResponse(
        deal_id=str(found.deal.id),
        deal_status=found.deal.status,
        offer=OfferResponse.from_entity(found.offer),
    )


@deal_router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(deal_id: str) -> DealResponse:
    return DealResponse.from_aggregate(deal_queries.get_deal(deal_id))


@deal_router.patch("/{deal_id}", response_model=DealResponse)
async def patch_deal(deal_id: str, body: PatchDealRequest) -> DealResponse:
    """Edit a Deal's route. The Deal goes back to BeingFormed."""
    command = PatchDeal(
        deal_id=deal_id,
        address_from=body.address_from,
        address_to=body.address_to,
        **_point_fields(body.origin, "origin"),
        **_point_fields(body.destination, "destination"),
        baggage_types=baggage_json(body.baggage_types),
        transport=body.transport,
        departure_at=body.departure_at,
        arrival_at=body.arrival_at,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return DealResponse.from_aggregate(deal_queries.get_deal(deal_id))


@deal_router.get("/{deal_id}/parcel-draft")
async def get_parcel_draft(deal_id: str) -> dict:
    return parcel_draft_from_deal(deal_queries.get_deal(deal_id))


@deal_router.get("/{deal_id}/parcels", response_model=list[ParcelResponse])
async def list_deal_parcels(deal_id: str) -> list[ParcelResponse]:
    return [ParcelResponse.from_aggregate(p) for p in parcel_queries.parcels_for_deal(deal_id)]


@deal_router.put("/{deal_id}/statuses", response_model=StatusResponse)
async def bulk_set_statuses(deal_id: str, body: BulkStatusRequest) -> StatusResponse:
    command = BulkSetOfferStatus(
        deal_id=deal_id,
        deal_status=body.deal_status,
        offer_status=body.offer_status,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.deal_status)


@deal_router.put("/{deal_id}/actions/{action}", response_model=StatusResponse)
async def apply_deal_action(deal_id: str, action: str) -> StatusResponse:
    """Apply a whole-deal action such as FinishDeal or TransporterCancelsDeal."""
    status = current_domain.process(ApplyDealAction(deal_id=deal_id, action=action), asynchronous=False)
    return StatusResponse(status=status)


@deal_router.put("/{deal_id}/offers/{offer_id}/actions/{action}", response_model=OfferIdsResponse)
async def apply_offer_action(deal_id: str, offer_id: str, action: str) -> OfferIdsResponse:
    """Apply a single-offer action to one Offer."""
    offer_ids = current_domain.process(
        ApplyOfferAction(deal_id=deal_id, action=action, offer_id=offer_id),
        asynchronous=False,
    )
    return OfferIdsResponse(offer_ids=offer_ids)


@deal_router.put("/{deal_id}/parcels/{parcel_id}/actions/{action}", response_model=OfferIdsResponse)
async def apply_parcel_action(deal_id: str, parcel_id: str, action: str) -> OfferIdsResponse:
    """Apply a single-offer action to the Offer(s) made for a parcel."""
    offer_ids = current_domain.process(
        ApplyOfferAction(deal_id=deal_id, action=action, parcel_id=parcel_id),
        asynchronous=False,
    )
    return OfferIdsResponse(offer_ids=offer_ids)


@deal_router.post("/{deal_id}/offers", status_code=201, response_model=OfferIdResponse)
async def insert_offer(deal_id: str, body: InsertOfferRequest) -> OfferIdResponse:
    command = InsertOffer(
        deal_id=deal_id,
        client_id=body.client_id,
        parcel_id=body.parcel_id,
        status=body.status,
        created_by=body.created_by,
        amount=body.amount,
        description=body.description,
    )
    offer_id = current_domain.process(command, asynchronous=False)
    return OfferIdResponse(offer_id=offer_id)


@deal_router.put("/{deal_id}/offers/{offer_id}/accept", response_model=LinkResponse)
async def accept_offer(deal_id: str, offer_id: str) -> LinkResponse:
    """Second side agrees: accept the Offer and link its Parcel."""
    result = link_accepted_offer(deal_id, offer_id)
    return LinkResponse(
        deal_id=result.deal_id,
        offer_id=result.offer_id,
        parcel_id=str(result.parcel_id) if result.parcel_id else None,
        parcel_linked=result.parcel_linked,
        error=result.error,
    )


@deal_router.post("/{deal_id}/subscriptions/client", response_model=SubscriptionResponse)
async def subscribe_as_client(
    deal_id: str,
    body: SubscribeParcelsRequest,
    response: Response,
    x_user_id: str = Header(),
) -> SubscriptionResponse:
    """Subscribe the caller's parcels to a Deal."""
    result = subscribe_parcels_as_client(deal_id, body.parcel_ids, x_user_id)
    return _subscription_response(result, response)


@deal_router.post("/{deal_id}/subscriptions/transporter", response_model=SubscriptionResponse)
async def subscribe_as_transporter(
    deal_id: str,
    body: SubscribeParcelsRequest,
    response: Response,
    x_user_id: str = Header(),
) -> SubscriptionResponse:
    """Offer the caller's Deal to shippers' parcels."""
    result = subscribe_parcels_as_shifter(deal_id, body.parcel_ids, x_user_id)
    return _subscription_response(result, response)


@deal_router.delete("/{deal_id}/subscriptions/{parcel_id}", response_model=OfferIdsResponse)
async def cancel_subscription(deal_id: str, parcel_id: str, by_transporter: bool = False) -> OfferIdsResponse:
    offer_ids = cancel_parcel_subscription(deal_id, parcel_id, by_transporter=by_transporter)
    return OfferIdsResponse(offer_ids=offer_ids)


# ---------------------------------------------------------------------------
# Parcel Router
# ---------------------------------------------------------------------------
parcel_router = APIRouter(prefix="/parcels", tags=["parcels"])


@parcel_router.post("", status_code=201, response_model=ParcelIdResponse)
async def register_parcel(body: ParcelRequest, x_user_id: str = Header()) -> ParcelIdResponse:
    command = RegisterParcel(
        owner_client_id=x_user_id,
        address_from=body.address_from,
        address_to=body.address_to,
        **_point_fields(body.origin, "origin"),
        **_point_fields(body.destination, "destination"),
        baggage_types=baggage_json(body.baggage_types),
        departure_at=body.departure_at,
        declared_value=body.declared_value,
        description=body.description,
    )
    result = current_domain.process(command, asynchronous=False)
    return ParcelIdResponse(parcel_id=result)


@parcel_router.get("", response_model=list[ParcelWithOffersResponse])
async def list_my_parcels(x_user_id: str = Header()) -> list[ParcelWithOffersResponse]:
    """The caller's parcels with the offers made for each of them."""
    return [
        ParcelWithOffersResponse(
            parcel=ParcelResponse.from_aggregate(entry.parcel),
            offers=[OfferResponse.from_entity(o) for o in entry.offers],
        )
        for entry in parcel_queries.parcels_for_owner(x_user_id)
    ]


@parcel_router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(parcel_id: str) -> ParcelResponse:
    return ParcelResponse.from_aggregate(parcel_queries.get_parcel(parcel_id))


@parcel_router.put("/{parcel_id}", response_model=ParcelResponse)
async def update_parcel(parcel_id: str, body: UpdateParcelRequest) -> ParcelResponse:
    command = UpdateParcel(
        parcel_id=parcel_id,
        address_from=body.address_from,
        address_to=body.address_to,
        **_point_fields(body.origin, "origin"),
        **_point_fields(body.destination, "destination"),
        baggage_types=baggage_json(body.baggage_types),
        departure_at=body.departure_at,
        declared_value=body.declared_value,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return ParcelResponse.from_aggregate(parcel_queries.get_parcel(parcel_id))


@parcel_router.get("/{parcel_id}/deals", response_model=list[DealResponse])
async def list_parcel_deals(parcel_id: str) -> list[DealResponse]:
    """Deals holding an offer for this parcel."""
    return [DealResponse.from_aggregate(d) for d in deal_queries.deals_for_parcel(parcel_id)]


@parcel_router.get("/{parcel_id}/offers", response_model=list[OfferInDealResponse])
async def list_parcel_offers(parcel_id: str, actuality: Actuality = Actuality.CURRENT) -> list[OfferInDealResponse]:
    return [
        OfferInDealResponse(
            deal_id=str(item.deal.id),
            deal_status=item.deal.status,
            offer=OfferResponse.from_entity(item.offer),
        )
        for item in deal_queries.offers_for_parcel(parcel_id, actuality)
    ]


@parcel_router.get("/{parcel_id}/matches", response_model=list[DealMatchResponse])
async def match_parcel(parcel_id: str, radius_km: float | None = Query(default=None, ge=0)) -> list[DealMatchResponse]:
    """Deals that can carry this parcel."""
    matches = find_deals_for_parcel(parcel_id, radius_km)
    return [DealMatchResponse(deal=DealResponse.from_aggregate(m.deal), distance_km=m.distance_km) for m in matches]


@parcel_router.get("/{parcel_id}/deal-draft")
async def get_deal_draft(parcel_id: str) -> dict:
    return deal_draft_from_parcel(parcel_queries.get_parcel(parcel_id))


# ---------------------------------------------------------------------------
# Maintenance: periodic background job endpoints
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/refresh-deals", response_model=RefreshResponse)
async def refresh_deals(body: MaintenanceRequest | None = None) -> RefreshResponse:
    """Advance departed Deals.

    Designed to be called periodically by an external scheduler. Idempotent:
    Deals that were already advanced are skipped.
    """
    as_of: datetime | None = body.as_of if body else None
    advanced = current_domain.process(RefreshDealStatuses(as_of=as_of), asynchronous=False)
    return RefreshResponse(advanced=advanced or 0)


@maintenance_router.post("/reconcile-links", response_model=ReconcileResponse)
async def reconcile_links() -> ReconcileResponse:
    """Repair one-sided Parcel/Offer links."""
    report = current_domain.process(ReconcileParcelLinks(), asynchronous=False)
    return ReconcileResponse(**report)

"""Deal aggregate (CQRS): a transporter's route and its embedded Offers.

A Deal owns an ordered collection of Offers. Status changes go through the
action table in ``logistics.deal.status``: whole-deal actions stamp every
Offer, single-offer actions touch only the Offers selected by a match
predicate and leave their siblings exactly as they were.

Lifecycle:
    BeingFormed → OnTheWay | TimeIsUp          (periodic refresher)
    any → DealIsOver | DealIsCancel | DealIsCrash (manual actions)
    any → BeingFormed                          (edit, agree, disagree, cancel parcel)
"""

import json
from datetime import datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text, ValueObject

from logistics.deal.events import DealActionApplied, DealCreated, DealRouteUpdated, OfferAdded
from logistics.deal.status import (
    ARCHIVE_DEAL_STATUSES,
    DealAction,
    DealStatus,
    OfferOrigin,
    OfferStatus,
    Scope,
    TransportMode,
    resulting_deal_status,
    transition_for,
)
from logistics.domain import logistics
from logistics.shared.baggage import dump_baggage_types, parse_baggage_types
from logistics.shared.clock import as_utc, utcnow
from logistics.shared.geo_point import GeoPoint

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


@logistics.entity(part_of="Deal")
class Offer:
    """A negotiation proposal between one shipper and the Deal's transporter."""

    client_id = Identifier(required=True)
    parcel_id = Identifier()
    status = String(required=True, max_length=50, choices=OfferStatus)
    created_by = String(required=True, max_length=50, choices=OfferOrigin)
    amount = Float(min_value=0.0)
    description = String(max_length=1000)
    created_at = DateTime()
    last_modified = DateTime()


@logistics.aggregate
class Deal:
    transporter_id = Identifier(required=True)
    status = String(
        max_length=50,
        choices=DealStatus,
        default=DealStatus.BEING_FORMED.value,
    )
    description = String(max_length=1000)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin = ValueObject(GeoPoint, required=True)
    destination = ValueObject(GeoPoint)
    baggage_types = Text(required=True)  # JSON list of baggage type names
    transport = String(required=True, max_length=50, choices=TransportMode)
    departure_at = DateTime(required=True)
    arrival_at = DateTime()
    offers = HasMany(Offer)
    created_at = DateTime()
    last_modified = DateTime()

    @invariant.post
    def arrival_cannot_precede_departure(self):
        if self.arrival_at and self.departure_at and as_utc(self.arrival_at) < as_utc(self.departure_at):
            raise ValidationError({"arrival_at": ["Arrival cannot be earlier than departure"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        transporter_id: str,
        origin: GeoPoint,
        baggage_types,
        transport: str,
        departure_at: datetime,
        arrival_at: datetime | None = None,
        destination: GeoPoint | None = None,
        address_from: str | None = None,
        address_to: str | None = None,
        description: str | None = None,
    ):
        """Publish a new route. The Deal starts BeingFormed with no Offers."""
        now = utcnow()
        deal = cls(
            transporter_id=transporter_id,
            status=DealStatus.BEING_FORMED.value,
            description=description,
            address_from=address_from,
            address_to=address_to,
            origin=origin,
            destination=destination,
            baggage_types=dump_baggage_types(baggage_types),
            transport=transport,
            departure_at=as_utc(departure_at),
            arrival_at=as_utc(arrival_at),
            created_at=now,
            last_modified=now,
        )
        deal.raise_(
            DealCreated(
                deal_id=str(deal.id),
                transporter_id=transporter_id,
                status=deal.status,
                address_from=address_from,
                address_to=address_to,
                origin_latitude=origin.latitude,
                origin_longitude=origin.longitude,
                baggage_types=deal.baggage_types,
                transport=deal.transport,
                departure_at=deal.departure_at,
                arrival_at=deal.arrival_at,
                created_at=now,
            )
        )
        return deal

    # -------------------------------------------------------------------
    # Queries over the aggregate
    # -------------------------------------------------------------------
    @property
    def baggage(self) -> list[str]:
        return parse_baggage_types(self.baggage_types)

    @property
    def is_archived(self) -> bool:
        return DealStatus(self.status) in ARCHIVE_DEAL_STATUSES

    @property
    def window(self) -> tuple[datetime, datetime]:
        start = as_utc(self.departure_at)
        return start, as_utc(self.arrival_at) or start

    def overlaps(self, departure_at: datetime, arrival_at: datetime | None = None) -> bool:
        """True when [departure_at, arrival_at] intersects this Deal's window."""
        start, end = self.window
        other_start = as_utc(departure_at)
        other_end = as_utc(arrival_at) or other_start
        return start <= other_end and other_start <= end

    def offer(self, offer_id: str) -> Offer:
        offer = next((o for o in (self.offers or []) if str(o.id) == str(offer_id)), None)
        if offer is None:
            raise ObjectNotFoundError(f"Offer {offer_id} does not exist in deal {self.id}")
        return offer

    def offers_for_parcel(self, parcel_id: str) -> list[Offer]:
        return [o for o in (self.offers or []) if o.parcel_id and str(o.parcel_id) == str(parcel_id)]

    def total_amount(self) -> float:
        return sum(o.amount or 0.0 for o in (self.offers or []))

    # -------------------------------------------------------------------
    # Route editing
    # -------------------------------------------------------------------
    def update_route(
        self,
        description=_UNSET,
        address_from=_UNSET,
        address_to=_UNSET,
        origin=_UNSET,
        destination=_UNSET,
        baggage_types=_UNSET,
        transport=_UNSET,
        departure_at=_UNSET,
        arrival_at=_UNSET,
    ) -> None:
        """Edit route fields. Re-opens negotiation; Offers are left as they are."""
        now = utcnow()
        with atomic_change(self):
            if description is not _UNSET:
                self.description = description
            if address_from is not _UNSET:
                self.address_from = address_from
            if address_to is not _UNSET:
                self.address_to = address_to
            if origin is not _UNSET:
                self.origin = origin
            if destination is not _UNSET:
                self.destination = destination
            if baggage_types is not _UNSET:
                self.baggage_types = dump_baggage_types(baggage_types)
            if transport is not _UNSET:
                self.transport = transport
            if departure_at is not _UNSET:
                self.departure_at = as_utc(departure_at)
            if arrival_at is not _UNSET:
                self.arrival_at = as_utc(arrival_at)
            self.status = DealStatus.BEING_FORMED.value
            self.last_modified = now

        self.raise_(
            DealRouteUpdated(
                deal_id=str(self.id),
                transporter_id=str(self.transporter_id),
                status=self.status,
                origin_latitude=self.origin.latitude,
                origin_longitude=self.origin.longitude,
                baggage_types=self.baggage_types,
                transport=self.transport,
                departure_at=self.departure_at,
                arrival_at=self.arrival_at,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Offers
    # -------------------------------------------------------------------
    def add_offer(
        self,
        client_id: str,
        status: str,
        created_by: str,
        amount: float | None = None,
        parcel_id: str | None = None,
        description: str | None = None,
    ) -> Offer:
        """Append a new Offer with a fresh id."""
        now = utcnow()
        offer = Offer(
            client_id=client_id,
            parcel_id=parcel_id,
            status=OfferStatus(status).value,
            created_by=OfferOrigin(created_by).value,
            amount=amount,
            description=description,
            created_at=now,
            last_modified=now,
        )
        self.add_offers(offer)
        self.last_modified = now
        self.raise_(
            OfferAdded(
                deal_id=str(self.id),
                transporter_id=str(self.transporter_id),
                offer_id=str(offer.id),
                client_id=client_id,
                parcel_id=parcel_id,
                status=offer.status,
                created_by=offer.created_by,
                amount=amount,
                added_at=now,
            )
        )
        return offer

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _select_offers(self, offer_id=None, parcel_id=None, client_id=None) -> list[Offer]:
        if not (offer_id or parcel_id or client_id):
            raise ValidationError({"offer": ["An offer id, parcel id or client id is required to select an offer"]})

        selected = []
        for offer in self.offers or []:
            if offer_id and str(offer.id) != str(offer_id):
                continue
            if parcel_id and str(offer.parcel_id) != str(parcel_id):
                continue
            if client_id and str(offer.client_id) != str(client_id):
                continue
            selected.append(offer)

        if not selected:
            selector = offer_id or parcel_id or client_id
            raise ObjectNotFoundError(f"No offer matching {selector} exists in deal {self.id}")
        return selected

    def apply(
        self,
        action: DealAction | str,
        offer_id: str | None = None,
        parcel_id: str | None = None,
        client_id: str | None = None,
    ) -> list[Offer]:
        """Apply a transition from the action table and return the touched Offers.

        Single-offer actions need at least one selector; the remaining
        actions ignore selectors. No action is rejected because of the
        current status.
        """
        action = DealAction(action)
        transition = transition_for(action)

        if transition.scope == Scope.ONE:
            targets = self._select_offers(offer_id, parcel_id, client_id)
        elif transition.scope == Scope.ALL:
            targets = list(self.offers or [])
        else:
            targets = []

        now = utcnow()
        previous_status = self.status
        if transition.offer_status is not None:
            for offer in targets:
                offer.status = transition.offer_status.value
                offer.last_modified = now
        self.status = resulting_deal_status(previous_status, action).value
        self.last_modified = now

        self.raise_(
            DealActionApplied(
                deal_id=str(self.id),
                transporter_id=str(self.transporter_id),
                action=action.value,
                previous_status=previous_status,
                deal_status=self.status,
                offer_status=transition.offer_status.value if transition.offer_status else None,
                offer_ids=json.dumps([str(o.id) for o in targets]),
                client_ids=json.dumps(sorted({str(o.client_id) for o in targets})),
                applied_at=now,
            )
        )
        return targets

    def set_statuses(self, deal_status: str, offer_status: str) -> None:
        """Set the Deal status and stamp every Offer with ``offer_status``."""
        now = utcnow()
        previous_status = self.status
        offer_status = OfferStatus(offer_status).value
        for offer in self.offers or []:
            offer.status = offer_status
            offer.last_modified = now
        self.status = DealStatus(deal_status).value
        self.last_modified = now

        self.raise_(
            DealActionApplied(
                deal_id=str(self.id),
                transporter_id=str(self.transporter_id),
                action="BulkSet",
                previous_status=previous_status,
                deal_status=self.status,
                offer_status=offer_status,
                offer_ids=json.dumps([str(o.id) for o in (self.offers or [])]),
                client_ids=json.dumps(sorted({str(o.client_id) for o in (self.offers or [])})),
                applied_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Time-based advancement
    # -------------------------------------------------------------------
    def refresh(self, as_of: datetime) -> DealAction | None:
        """Advance a BeingFormed Deal whose departure has elapsed.

        Returns the action applied, or None when nothing changed. Deals
        already on the way or archived are left alone.
        """
        if DealStatus(self.status) != DealStatus.BEING_FORMED:
            return None
        if as_utc(self.departure_at) > as_utc(as_of):
            return None

        agreed = any(o.status == OfferStatus.AGREE_ALL.value for o in (self.offers or []))
        action = DealAction.DEPART if agreed else DealAction.EXPIRE
        self.apply(action)
        return action

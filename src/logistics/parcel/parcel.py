"""Parcel aggregate: a shipper's shipment request.

A Parcel is stored independently of any Deal. Once subscribed it carries a
weak back-reference (``deal_id``, ``offer_id``) to the Offer it belongs to;
the Offer carries ``parcel_id`` in the other direction. The two sides are
written separately, so the link can be momentarily one-sided.
"""

from datetime import datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text, ValueObject

from logistics.domain import logistics
from logistics.errors import ParcelAlreadyLinked
from logistics.parcel.events import ParcelLinked, ParcelRegistered, ParcelUnlinked, ParcelUpdated
from logistics.shared.baggage import dump_baggage_types, parse_baggage_types
from logistics.shared.clock import as_utc, utcnow
from logistics.shared.geo_point import GeoPoint

_UNSET = object()


@logistics.aggregate
class Parcel:
    owner_client_id = Identifier(required=True)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin = ValueObject(GeoPoint, required=True)
    destination = ValueObject(GeoPoint)
    baggage_types = Text(required=True)  # JSON list of baggage type names
    departure_at = DateTime(required=True)
    declared_value = Float(min_value=0.0, default=0.0)
    description = String(max_length=1000)
    deal_id = Identifier()
    offer_id = Identifier()
    created_at = DateTime()
    last_modified = DateTime()

    @classmethod
    def register(
        cls,
        owner_client_id: str,
        origin: GeoPoint,
        baggage_types,
        departure_at: datetime,
        declared_value: float = 0.0,
        destination: GeoPoint | None = None,
        address_from: str | None = None,
        address_to: str | None = None,
        description: str | None = None,
    ):
        now = utcnow()
        parcel = cls(
            owner_client_id=owner_client_id,
            address_from=address_from,
            address_to=address_to,
            origin=origin,
            destination=destination,
            baggage_types=dump_baggage_types(baggage_types),
            departure_at=as_utc(departure_at),
            declared_value=declared_value if declared_value is not None else 0.0,
            description=description,
            created_at=now,
            last_modified=now,
        )
        parcel.raise_(
            ParcelRegistered(
                parcel_id=str(parcel.id),
                owner_client_id=owner_client_id,
                baggage_types=parcel.baggage_types,
                declared_value=parcel.declared_value,
                departure_at=parcel.departure_at,
                registered_at=now,
            )
        )
        return parcel

    @property
    def baggage(self) -> list[str]:
        return parse_baggage_types(self.baggage_types)

    @property
    def is_linked(self) -> bool:
        return bool(self.offer_id)

    def owned_by(self, client_id: str) -> bool:
        return str(self.owner_client_id) == str(client_id)

    def update_shipment(
        self,
        address_from=_UNSET,
        address_to=_UNSET,
        origin=_UNSET,
        destination=_UNSET,
        baggage_types=_UNSET,
        departure_at=_UNSET,
        declared_value=_UNSET,
        description=_UNSET,
    ) -> None:
        """Edit the shipment description. Owner and link are kept."""
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
        if departure_at is not _UNSET:
            self.departure_at = as_utc(departure_at)
        if declared_value is not _UNSET:
            self.declared_value = declared_value
        if description is not _UNSET:
            self.description = description

        now = utcnow()
        self.last_modified = now
        self.raise_(
            ParcelUpdated(
                parcel_id=str(self.id),
                owner_client_id=str(self.owner_client_id),
                updated_at=now,
            )
        )

    def link(self, deal_id: str, offer_id: str) -> bool:
        """Point the Parcel at an Offer. Returns False if it already did."""
        if self.offer_id and str(self.offer_id) == str(offer_id):
            return False
        if self.offer_id:
            raise ParcelAlreadyLinked({"parcel": [f"Parcel {self.id} is already linked to offer {self.offer_id}"]})

        now = utcnow()
        self.deal_id = deal_id
        self.offer_id = offer_id
        self.last_modified = now
        self.raise_(
            ParcelLinked(
                parcel_id=str(self.id),
                owner_client_id=str(self.owner_client_id),
                deal_id=deal_id,
                offer_id=offer_id,
                linked_at=now,
            )
        )
        return True

    def unlink(self, offer_id: str) -> bool:
        """Drop the link if it still points at ``offer_id``."""
        if not offer_id:
            raise ValidationError({"offer_id": ["Offer id is required to unlink a parcel"]})
        if not self.offer_id or str(self.offer_id) != str(offer_id):
            return False

        now = utcnow()
        deal_id = self.deal_id
        self.deal_id = None
        self.offer_id = None
        self.last_modified = now
        self.raise_(
            ParcelUnlinked(
                parcel_id=str(self.id),
                owner_client_id=str(self.owner_client_id),
                deal_id=str(deal_id) if deal_id else None,
                offer_id=offer_id,
                unlinked_at=now,
            )
        )
        return True

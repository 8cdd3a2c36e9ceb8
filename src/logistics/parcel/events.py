"""Parcel domain events."""

from protean.fields import DateTime, Float, Identifier, Text

from logistics.domain import logistics


@logistics.event(part_of="Parcel")
class ParcelRegistered:
    """A shipper registered a shipment request."""

    __version__ = 1

    parcel_id = Identifier(required=True)
    owner_client_id = Identifier(required=True)
    baggage_types = Text(required=True)  # JSON list
    declared_value = Float()
    departure_at = DateTime(required=True)
    registered_at = DateTime(required=True)


@logistics.event(part_of="Parcel")
class ParcelUpdated:
    __version__ = 1

    parcel_id = Identifier(required=True)
    owner_client_id = Identifier(required=True)
    updated_at = DateTime(required=True)


@logistics.event(part_of="Parcel")
class ParcelLinked:
    """The Parcel now points at an Offer inside a Deal."""

    __version__ = 1

    parcel_id = Identifier(required=True)
    owner_client_id = Identifier(required=True)
    deal_id = Identifier(required=True)
    offer_id = Identifier(required=True)
    linked_at = DateTime(required=True)


@logistics.event(part_of="Parcel")
class ParcelUnlinked:
    __version__ = 1

    parcel_id = Identifier(required=True)
    owner_client_id = Identifier(required=True)
    deal_id = Identifier()
    offer_id = Identifier(required=True)
    unlinked_at = DateTime(required=True)

"""Deal domain events: immutable facts about Deal and Offer changes.

Route events carry the full route so the DealOrigin projector can rebuild
its row without reading the aggregate.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from logistics.domain import logistics


@logistics.event(part_of="Deal")
class DealCreated:
    """A transporter published a new route."""

    __version__ = 1

    deal_id = Identifier(required=True)
    transporter_id = Identifier(required=True)
    status = String(required=True)
    address_from = String()
    address_to = String()
    origin_latitude = Float(required=True)
    origin_longitude = Float(required=True)
    baggage_types = Text(required=True)  # JSON list
    transport = String(required=True)
    departure_at = DateTime(required=True)
    arrival_at = DateTime()
    created_at = DateTime(required=True)


@logistics.event(part_of="Deal")
class DealRouteUpdated:
    """A Deal's route was edited, which re-opens negotiation."""

    __version__ = 1

    deal_id = Identifier(required=True)
    transporter_id = Identifier(required=True)
    status = String(required=True)
    origin_latitude = Float(required=True)
    origin_longitude = Float(required=True)
    baggage_types = Text(required=True)  # JSON list
    transport = String(required=True)
    departure_at = DateTime(required=True)
    arrival_at = DateTime()
    updated_at = DateTime(required=True)


@logistics.event(part_of="Deal")
class OfferAdded:
    """An Offer was appended to a Deal."""

    __version__ = 1

    deal_id = Identifier(required=True)
    transporter_id = Identifier(required=True)
    offer_id = Identifier(required=True)
    client_id = Identifier(required=True)
    parcel_id = Identifier()
    status = String(required=True)
    created_by = String(required=True)
    amount = Float()
    added_at = DateTime(required=True)


@logistics.event(part_of="Deal")
class DealActionApplied:
    """A transition from the Deal/Offer table was applied."""

    __version__ = 1

    deal_id = Identifier(required=True)
    transporter_id = Identifier(required=True)
    action = String(required=True)
    previous_status = String(required=True)
    deal_status = String(required=True)
    offer_status = String()
    offer_ids = Text()  # JSON list of touched Offer ids
    client_ids = Text()  # JSON list of clients owning the touched Offers
    applied_at = DateTime(required=True)

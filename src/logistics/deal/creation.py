"""Deal creation: command and handler.

A transporter cannot be on two routes at once: creation is rejected when
one of the transporter's non-archived Deals has an intersecting departure
window (identical windows included).
"""

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.domain import logistics
from logistics.errors import DealConflict
from logistics.shared.geo_point import GeoPoint

logger = structlog.get_logger(__name__)


@logistics.command(part_of="Deal")
class CreateDeal:
    """Publish a new route for a transporter."""

    transporter_id = Identifier(required=True)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin_latitude = Float(required=True)
    origin_longitude = Float(required=True)
    destination_latitude = Float()
    destination_longitude = Float()
    baggage_types = Text(required=True)  # JSON list
    transport = String(required=True, max_length=50)
    departure_at = DateTime(required=True)
    arrival_at = DateTime()
    description = String(max_length=1000)


def _point(latitude, longitude) -> GeoPoint | None:
    if latitude is None and longitude is None:
        return None
    return GeoPoint(latitude=latitude, longitude=longitude)


@logistics.command_handler(part_of=Deal)
class CreateDealHandler:
    @handle(CreateDeal)
    def create_deal(self, command):
        repo = current_domain.repository_for(Deal)

        clashing = [
            d
            for d in repo.find_open_for_transporter(command.transporter_id)
            if d.overlaps(command.departure_at, command.arrival_at)
        ]
        if clashing:
            logger.info(
                "Rejected overlapping deal",
                transporter_id=str(command.transporter_id),
                clashing_deal_id=str(clashing[0].id),
            )
            raise DealConflict({"deal": [f"Transporter already has deal {clashing[0].id} in this time window"]})

        deal = Deal.create(
            transporter_id=command.transporter_id,
            origin=_point(command.origin_latitude, command.origin_longitude),
            destination=_point(command.destination_latitude, command.destination_longitude),
            baggage_types=command.baggage_types,
            transport=command.transport,
            departure_at=command.departure_at,
            arrival_at=command.arrival_at,
            address_from=command.address_from,
            address_to=command.address_to,
            description=command.description,
        )
        repo.add(deal)
        logger.info("Deal created", deal_id=str(deal.id), transporter_id=str(deal.transporter_id))
        return str(deal.id)

"""DealOrigin: the geospatial index behind the matching query.

One row per Deal with its origin point, baggage set and departure time.
Rows are maintained by a projector on route events; ``provision_origin_index``
backfills rows for Deals stored before the index existed and is run once at
startup, never on the query path.
"""

import structlog
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Text
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.deal.events import DealCreated, DealRouteUpdated
from logistics.domain import logistics
from logistics.shared.clock import utcnow

logger = structlog.get_logger(__name__)


@logistics.projection
class DealOrigin:
    deal_id = Identifier(identifier=True, required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    baggage_types = Text(required=True)  # JSON list
    departure_at = DateTime(required=True)
    indexed_at = DateTime()


@logistics.projector(projector_for=DealOrigin, aggregates=[Deal])
class DealOriginProjector:
    @on(DealCreated)
    def on_deal_created(self, event):
        current_domain.repository_for(DealOrigin).add(
            DealOrigin(
                deal_id=event.deal_id,
                latitude=event.origin_latitude,
                longitude=event.origin_longitude,
                baggage_types=event.baggage_types,
                departure_at=event.departure_at,
                indexed_at=event.created_at,
            )
        )

    @on(DealRouteUpdated)
    def on_deal_route_updated(self, event):
        repo = current_domain.repository_for(DealOrigin)
        try:
            row = repo.get(event.deal_id)
        except ObjectNotFoundError:
            row = DealOrigin(
                deal_id=event.deal_id,
                latitude=event.origin_latitude,
                longitude=event.origin_longitude,
                baggage_types=event.baggage_types,
                departure_at=event.departure_at,
            )
        row.latitude = event.origin_latitude
        row.longitude = event.origin_longitude
        row.baggage_types = event.baggage_types
        row.departure_at = event.departure_at
        row.indexed_at = event.updated_at
        repo.add(row)


def provision_origin_index() -> int:
    """Add index rows for Deals that have none. Safe to run repeatedly."""
    index_repo = current_domain.repository_for(DealOrigin)
    indexed = {str(row.deal_id) for row in index_repo._dao.query.limit(None).all().items}

    added = 0
    for deal in current_domain.repository_for(Deal).find_all():
        if str(deal.id) in indexed:
            continue
        index_repo.add(
            DealOrigin(
                deal_id=str(deal.id),
                latitude=deal.origin.latitude,
                longitude=deal.origin.longitude,
                baggage_types=deal.baggage_types,
                departure_at=deal.departure_at,
                indexed_at=utcnow(),
            )
        )
        added += 1

    logger.info("Deal origin index provisioned", added=added, total=len(indexed) + added)
    return added

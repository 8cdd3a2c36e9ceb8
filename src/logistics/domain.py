"""Logistics bounded context: Deals, Offers and Parcels.

Transporters publish Deals (a route with a departure window), shippers and
transporters negotiate Offers embedded in those Deals, and shippers' Parcels
are linked to accepted Offers. Uses CQRS: aggregates are persisted through
repositories and every mutation is a command.
"""

import structlog
from protean.domain import Domain

logistics = Domain(name="logistics")

logger = structlog.get_logger(__name__)

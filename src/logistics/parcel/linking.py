"""Parcel link writes: the Parcel side of the Parcel↔Offer reference.

Each command is a single write to one Parcel. The matching Offer write
happens through the Deal commands; orchestration lives in
``logistics.parcel.subscription``.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.parcel.parcel import Parcel

logger = structlog.get_logger(__name__)


@logistics.command(part_of="Parcel")
class LinkParcel:
    parcel_id = Identifier(required=True)
    deal_id = Identifier(required=True)
    offer_id = Identifier(required=True)


@logistics.command(part_of="Parcel")
class UnlinkParcel:
    parcel_id = Identifier(required=True)
    offer_id = Identifier(required=True)


@logistics.command_handler(part_of=Parcel)
class ParcelLinkHandler:
    @handle(LinkParcel)
    def link_parcel(self, command):
        repo = current_domain.repository_for(Parcel)
        parcel = repo.get(command.parcel_id)
        changed = parcel.link(str(command.deal_id), str(command.offer_id))
        if changed:
            repo.add(parcel)
            logger.info(
                "Parcel linked",
                parcel_id=str(parcel.id),
                deal_id=str(command.deal_id),
                offer_id=str(command.offer_id),
            )
        return changed

    @handle(UnlinkParcel)
    def unlink_parcel(self, command):
        repo = current_domain.repository_for(Parcel)
        parcel = repo.get(command.parcel_id)
        changed = parcel.unlink(str(command.offer_id))
        if changed:
            repo.add(parcel)
            logger.info("Parcel unlinked", parcel_id=str(parcel.id), offer_id=str(command.offer_id))
        return changed

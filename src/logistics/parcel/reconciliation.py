"""Parcel link reconciliation: consistency sweep over Offer.parcel_id ↔ Parcel.offer_id.

The Offer and Parcel sides of a link are written independently. This sweep,
triggered periodically by an external scheduler, repairs the two ways they
can drift apart:

* an Offer that expects its Parcel to point at it (AgreeAll, or a
  client-initiated AgreeClient) while the Parcel has no link → link it;
* a Parcel pointing at an Offer that no longer exists or was cancelled →
  unlink it.

Parcels linked to some other live Offer are reported and left alone.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal, Offer
from logistics.deal.status import CANCELLED_OFFER_STATUSES, OfferOrigin, OfferStatus
from logistics.domain import logistics
from logistics.parcel.linking import LinkParcel, UnlinkParcel
from logistics.parcel.parcel import Parcel

logger = structlog.get_logger(__name__)


def expects_parcel_link(offer: Offer) -> bool:
    if not offer.parcel_id:
        return False
    if offer.status == OfferStatus.AGREE_ALL.value:
        return True
    return offer.status == OfferStatus.AGREE_CLIENT.value and offer.created_by == OfferOrigin.CLIENT_INITIATED.value


@logistics.command(part_of="Parcel")
class ReconcileParcelLinks:
    """Repair one-sided Parcel/Offer links."""

    dry_run = Boolean(default=False)


@logistics.command_handler(part_of=Parcel)
class ReconcileParcelLinksHandler:
    @handle(ReconcileParcelLinks)
    def reconcile_parcel_links(self, command):
        deals = current_domain.repository_for(Deal).find_all()
        parcel_repo = current_domain.repository_for(Parcel)
        report = {"linked": 0, "unlinked": 0, "conflicts": 0}

        handled = set()
        live_offers = {}
        for deal in deals:
            for offer in deal.offers or []:
                if OfferStatus(offer.status) not in CANCELLED_OFFER_STATUSES:
                    live_offers[str(offer.id)] = deal

        # Offer side present, Parcel side missing
        for deal in deals:
            for offer in deal.offers or []:
                if not expects_parcel_link(offer):
                    continue
                try:
                    parcel = parcel_repo.get(str(offer.parcel_id))
                except ObjectNotFoundError:
                    logger.warning("Offer references a missing parcel", offer_id=str(offer.id))
                    continue

                if str(parcel.offer_id or "") == str(offer.id):
                    continue
                if parcel.offer_id and str(parcel.offer_id) in live_offers:
                    report["conflicts"] += 1
                    logger.warning(
                        "Parcel linked to a different live offer",
                        parcel_id=str(parcel.id),
                        offer_id=str(offer.id),
                        linked_offer_id=str(parcel.offer_id),
                    )
                    continue
                handled.add(str(parcel.id))
                if parcel.offer_id:
                    # Stale link to a cancelled or vanished offer; replaced below.
                    self._unlink(parcel, command.dry_run)
                    report["unlinked"] += 1
                if not command.dry_run:
                    try:
                        current_domain.process(
                            LinkParcel(parcel_id=str(parcel.id), deal_id=str(deal.id), offer_id=str(offer.id)),
                            asynchronous=False,
                        )
                    except ValidationError as exc:
                        logger.warning("Failed to repair parcel link", parcel_id=str(parcel.id), error=str(exc))
                        continue
                report["linked"] += 1
                logger.info("Repaired parcel link", parcel_id=str(parcel.id), offer_id=str(offer.id))

        # Parcel side present, Offer gone or cancelled
        for parcel in parcel_repo.find_linked():
            if str(parcel.id) in handled or str(parcel.offer_id) in live_offers:
                continue
            self._unlink(parcel, command.dry_run)
            report["unlinked"] += 1
            logger.info("Released parcel from dead offer", parcel_id=str(parcel.id), offer_id=str(parcel.offer_id))

        logger.info("Parcel link reconciliation complete", **report)
        return report

    def _unlink(self, parcel: Parcel, dry_run: bool) -> None:
        if dry_run:
            return
        current_domain.process(
            UnlinkParcel(parcel_id=str(parcel.id), offer_id=str(parcel.offer_id)),
            asynchronous=False,
        )

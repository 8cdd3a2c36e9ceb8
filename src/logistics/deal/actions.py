"""Deal and Offer transitions: commands and handler.

``ApplyDealAction`` covers actions that stamp every Offer (or only the
Deal), ``ApplyOfferAction`` the single-offer actions that select Offers by
offer, parcel or client id. ``BulkSetOfferStatus`` sets an explicit pair of
statuses outside the action table.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.deal.status import DealAction, DealStatus, OfferStatus, Scope, transition_for
from logistics.domain import logistics

logger = structlog.get_logger(__name__)


@logistics.command(part_of="Deal")
class ApplyDealAction:
    """Apply a whole-deal action."""

    deal_id = Identifier(required=True)
    action = String(required=True, max_length=50, choices=DealAction)


@logistics.command(part_of="Deal")
class ApplyOfferAction:
    """Apply a single-offer action to the Offer(s) matching the selectors."""

    deal_id = Identifier(required=True)
    action = String(required=True, max_length=50, choices=DealAction)
    offer_id = Identifier()
    parcel_id = Identifier()
    client_id = Identifier()


@logistics.command(part_of="Deal")
class BulkSetOfferStatus:
    deal_id = Identifier(required=True)
    deal_status = String(required=True, max_length=50, choices=DealStatus)
    offer_status = String(required=True, max_length=50, choices=OfferStatus)


def _require_scope(action: str, single: bool) -> None:
    scope = transition_for(action).scope
    if single and scope != Scope.ONE:
        raise ValidationError({"action": [f"{action} applies to the whole deal, not to a single offer"]})
    if not single and scope == Scope.ONE:
        raise ValidationError({"action": [f"{action} applies to a single offer"]})


@logistics.command_handler(part_of=Deal)
class DealActionHandler:
    @handle(ApplyDealAction)
    def apply_deal_action(self, command):
        _require_scope(command.action, single=False)

        repo = current_domain.repository_for(Deal)
        deal = repo.get(command.deal_id)
        touched = deal.apply(command.action)
        repo.add(deal)

        logger.info(
            "Deal action applied",
            deal_id=str(deal.id),
            action=command.action,
            status=deal.status,
            offers=len(touched),
        )
        return deal.status

    @handle(ApplyOfferAction)
    def apply_offer_action(self, command):
        _require_scope(command.action, single=True)

        repo = current_domain.repository_for(Deal)
        deal = repo.get(command.deal_id)
        touched = deal.apply(
            command.action,
            offer_id=command.offer_id,
            parcel_id=command.parcel_id,
            client_id=command.client_id,
        )
        repo.add(deal)

        offer_ids = [str(o.id) for o in touched]
        logger.info(
            "Offer action applied",
            deal_id=str(deal.id),
            action=command.action,
            status=deal.status,
            offer_ids=json.dumps(offer_ids),
        )
        return offer_ids

    @handle(BulkSetOfferStatus)
    def bulk_set_offer_status(self, command):
        repo = current_domain.repository_for(Deal)
        deal = repo.get(command.deal_id)
        deal.set_statuses(command.deal_status, command.offer_status)
        repo.add(deal)

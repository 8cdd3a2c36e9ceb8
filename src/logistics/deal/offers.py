"""Offer insertion: append a new Offer to a Deal."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.deal.status import OfferOrigin, OfferStatus
from logistics.domain import logistics


@logistics.command(part_of="Deal")
class InsertOffer:
    deal_id = Identifier(required=True)
    client_id = Identifier(required=True)
    parcel_id = Identifier()
    status = String(required=True, max_length=50, choices=OfferStatus)
    created_by = String(required=True, max_length=50, choices=OfferOrigin)
    amount = Float(min_value=0.0)
    description = String(max_length=1000)


@logistics.command_handler(part_of=Deal)
class InsertOfferHandler:
    @handle(InsertOffer)
    def insert_offer(self, command):
        repo = current_domain.repository_for(Deal)
        deal = repo.get(command.deal_id)
        offer = deal.add_offer(
            client_id=command.client_id,
            status=command.status,
            created_by=command.created_by,
            amount=command.amount,
            parcel_id=command.parcel_id,
            description=command.description,
        )
        repo.add(deal)
        return str(offer.id)

"""Deal notifications: tell the other party when a Deal or Offer changes.

Messages go through the chat adapter. Delivery is best effort: a failed
send is logged and never affects the write that raised the event.
"""

import json

import structlog
from protean.utils.mixins import handle

from logistics.chat import get_chat
from logistics.deal.deal import Deal
from logistics.deal.events import DealActionApplied, OfferAdded
from logistics.deal.status import OfferOrigin
from logistics.domain import logistics

logger = structlog.get_logger(__name__)

_ACTION_MESSAGES = {
    "TransporterAgrees": "The transporter agreed to carry your parcel on deal {deal_id}.",
    "ShipperSubscribes": "A shipper subscribed to deal {deal_id}.",
    "BothAgree": "Both sides agreed on deal {deal_id}.",
    "SecondSideAgrees": "Your offer on deal {deal_id} was accepted.",
    "ShipperDisagrees": "A shipper declined an offer on deal {deal_id}.",
    "TransporterDisagrees": "The transporter declined the offers on deal {deal_id}.",
    "TransporterCancelsParcel": "The transporter cancelled your parcel on deal {deal_id}.",
    "ShipperCancelsParcel": "A shipper cancelled a parcel on deal {deal_id}.",
    "TransporterCrashesDeal": "Deal {deal_id} was called off by the transporter.",
    "TransporterCancelsDeal": "Deal {deal_id} was cancelled by the transporter.",
    "ShipperDidNotReceive": "A shipper reported a parcel on deal {deal_id} as not received.",
    "FinishDeal": "Deal {deal_id} is finished. Delivery confirmed.",
    "ShipperResubscribes": "A shipper subscribed again to deal {deal_id}.",
    "TransporterRejectsOffer": "The transporter rejected your offer on deal {deal_id}.",
    "TransporterWithdraws": "The transporter withdrew from deal {deal_id}.",
    "Depart": "Deal {deal_id} is on the way.",
    "Expire": "Deal {deal_id} departed without agreed parcels.",
}


def _send(recipient_id: str, message: str, **context) -> None:
    result = get_chat().send(recipient_id, message)
    if result.get("status") != "sent":
        logger.warning(
            "Chat notification failed",
            recipient_id=recipient_id,
            error=result.get("error"),
            **context,
        )


@logistics.event_handler(part_of=Deal)
class DealNotificationHandler:
    """Sends chat messages to the parties affected by Deal events."""

    @handle(OfferAdded)
    def on_offer_added(self, event: OfferAdded) -> None:
        if event.created_by == OfferOrigin.CLIENT_INITIATED.value:
            recipient = str(event.transporter_id)
            message = f"New parcel subscription on deal {event.deal_id}."
        else:
            recipient = str(event.client_id)
            message = f"A transporter offers to carry your parcel on deal {event.deal_id}."
        _send(recipient, message, deal_id=str(event.deal_id), offer_id=str(event.offer_id))

    @handle(DealActionApplied)
    def on_deal_action_applied(self, event: DealActionApplied) -> None:
        template = _ACTION_MESSAGES.get(event.action)
        if template is None:
            return

        message = template.format(deal_id=event.deal_id)
        recipients = json.loads(event.client_ids) if event.client_ids else []
        if event.action.startswith("Shipper"):
            recipients = [str(event.transporter_id)]
        elif event.action in ("Depart", "Expire", "FinishDeal"):
            recipients = [str(event.transporter_id), *recipients]

        for recipient in recipients:
            _send(recipient, message, deal_id=str(event.deal_id), action=event.action)

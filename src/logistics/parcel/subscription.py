"""Parcel subscription: the Parcel↔Offer↔Deal linkage protocol.

Every flow here writes two documents: the Deal (through its embedded Offer)
and the Parcel. Each write is its own command and commits on its own; there
is no rollback of the first write when the second fails. Callers get a
result object describing exactly what was applied:

* batch subscriptions report one ``ParcelOutcome`` per parcel and never
  abort the batch because of a single parcel;
* ``link_accepted_offer`` reports ``parcel_linked=False`` when the Offer was
  accepted but the Parcel could not be updated. ``ReconcileParcelLinks``
  repairs such links later.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from logistics.deal.actions import ApplyOfferAction
from logistics.deal.deal import Deal
from logistics.deal.offers import InsertOffer
from logistics.deal.status import DealAction, OfferOrigin, OfferStatus
from logistics.errors import ParcelAlreadyLinked
from logistics.parcel.linking import LinkParcel, UnlinkParcel
from logistics.parcel.parcel import Parcel

logger = structlog.get_logger(__name__)


class Outcome(Enum):
    SUBSCRIBED = "subscribed"
    LINK_PENDING = "link_pending"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID = "invalid"


_SUCCESSFUL = {Outcome.SUBSCRIBED, Outcome.LINK_PENDING}


@dataclass
class ParcelOutcome:
    parcel_id: str
    outcome: Outcome
    offer_id: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in _SUCCESSFUL


@dataclass
class SubscriptionResult:
    deal_id: str
    outcomes: list[ParcelOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ParcelOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[ParcelOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def status(self) -> str:
        if not self.failed:
            return "success"
        if not self.succeeded:
            return "failed"
        return "partial"


@dataclass
class LinkResult:
    deal_id: str
    offer_id: str
    parcel_id: str | None = None
    parcel_linked: bool = False
    error: str | None = None


def _load_parcel(parcel_id: str) -> Parcel:
    return current_domain.repository_for(Parcel).get(parcel_id)


def _link(parcel_id: str, deal_id: str, offer_id: str) -> str | None:
    """Write the Parcel side of a link. Returns an error message on domain failure.

    ``ParcelAlreadyLinked`` propagates: the Parcel was taken by another
    Offer after it was checked, which callers report as a conflict.
    """
    try:
        current_domain.process(
            LinkParcel(parcel_id=parcel_id, deal_id=deal_id, offer_id=offer_id),
            asynchronous=False,
        )
    except ParcelAlreadyLinked:
        logger.warning("Parcel linked to another offer meanwhile", parcel_id=parcel_id, offer_id=offer_id)
        raise
    except (ValidationError, ObjectNotFoundError) as exc:
        logger.error(
            "Parcel link not written; offer and parcel are out of sync",
            parcel_id=parcel_id,
            deal_id=deal_id,
            offer_id=offer_id,
            error=str(exc),
        )
        return str(exc)
    except Exception:
        logger.exception("Store failure while linking parcel", parcel_id=parcel_id, offer_id=offer_id)
        raise
    return None


def subscribe_parcels_as_client(deal_id: str, parcel_ids: list[str], client_id: str) -> SubscriptionResult:
    """Subscribe a shipper's parcels to a Deal, one independent Offer per parcel."""
    deal_id = str(current_domain.repository_for(Deal).get(deal_id).id)
    result = SubscriptionResult(deal_id=deal_id)

    for parcel_id in parcel_ids:
        try:
            parcel = _load_parcel(parcel_id)
        except ObjectNotFoundError as exc:
            result.outcomes.append(ParcelOutcome(parcel_id, Outcome.NOT_FOUND, error=str(exc)))
            continue

        if not parcel.owned_by(client_id):
            result.outcomes.append(
                ParcelOutcome(parcel_id, Outcome.FORBIDDEN, error="Parcel belongs to another client")
            )
            continue
        if parcel.is_linked:
            result.outcomes.append(
                ParcelOutcome(parcel_id, Outcome.CONFLICT, error=f"Parcel is already linked to offer {parcel.offer_id}")
            )
            continue

        try:
            offer_id = current_domain.process(
                InsertOffer(
                    deal_id=deal_id,
                    client_id=client_id,
                    parcel_id=parcel_id,
                    status=OfferStatus.AGREE_CLIENT.value,
                    created_by=OfferOrigin.CLIENT_INITIATED.value,
                    amount=parcel.declared_value,
                    description=parcel.description,
                ),
                asynchronous=False,
            )
        except ValidationError as exc:
            result.outcomes.append(ParcelOutcome(parcel_id, Outcome.INVALID, error=str(exc)))
            continue

        try:
            error = _link(parcel_id, deal_id, offer_id)
        except ParcelAlreadyLinked as exc:
            result.outcomes.append(ParcelOutcome(parcel_id, Outcome.CONFLICT, offer_id=offer_id, error=str(exc)))
            continue
        outcome = Outcome.LINK_PENDING if error else Outcome.SUBSCRIBED
        result.outcomes.append(ParcelOutcome(parcel_id, outcome, offer_id=offer_id, error=error))

    logger.info(
        "Client subscription processed",
        deal_id=deal_id,
        client_id=client_id,
        status=result.status,
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )
    return result


def subscribe_parcels_as_shifter(deal_id: str, parcel_ids: list[str], transporter_id: str) -> SubscriptionResult:
    """Propose the transporter's Deal to shippers' parcels.

    Creates an AgreeShifter Offer per parcel priced at the parcel's declared
    value. Parcels are linked only once the shipper accepts.
    """
    deal = current_domain.repository_for(Deal).get(deal_id)
    if str(deal.transporter_id) != str(transporter_id):
        raise ValidationError({"deal": ["Only the deal's transporter can propose it to parcels"]})

    result = SubscriptionResult(deal_id=str(deal.id))
    proposed = {str(o.parcel_id) for o in (deal.offers or []) if o.parcel_id}

    for parcel_id in parcel_ids:
        try:
            parcel = _load_parcel(parcel_id)
        except ObjectNotFoundError as exc:
            logger.warning("Parcel not found for transporter offer", deal_id=str(deal.id), parcel_id=parcel_id)
            result.outcomes.append(ParcelOutcome(parcel_id, Outcome.NOT_FOUND, error=str(exc)))
            continue

        if parcel.is_linked or str(parcel.id) in proposed:
            logger.warning("Parcel already taken", deal_id=str(deal.id), parcel_id=parcel_id)
            result.outcomes.append(
                ParcelOutcome(parcel_id, Outcome.CONFLICT, error="Parcel already has an offer on this or another deal")
            )
            continue

        try:
            offer_id = current_domain.process(
                InsertOffer(
                    deal_id=str(deal.id),
                    client_id=str(parcel.owner_client_id),
                    parcel_id=parcel_id,
                    status=OfferStatus.AGREE_SHIFTER.value,
                    created_by=OfferOrigin.TRANSPORTER_INITIATED.value,
                    amount=parcel.declared_value,
                ),
                asynchronous=False,
            )
        except ValidationError as exc:
            logger.warning("Transporter offer rejected", deal_id=str(deal.id), parcel_id=parcel_id, error=str(exc))
            result.outcomes.append(ParcelOutcome(parcel_id, Outcome.INVALID, error=str(exc)))
            continue

        proposed.add(str(parcel.id))
        result.outcomes.append(ParcelOutcome(parcel_id, Outcome.SUBSCRIBED, offer_id=offer_id))

    logger.info(
        "Transporter subscription processed",
        deal_id=str(deal.id),
        transporter_id=transporter_id,
        status=result.status,
    )
    return result


def link_accepted_offer(deal_id: str, offer_id: str) -> LinkResult:
    """Second side agrees: accept the Offer, then point its Parcel at it."""
    current_domain.process(
        ApplyOfferAction(deal_id=deal_id, action=DealAction.SECOND_SIDE_AGREES.value, offer_id=offer_id),
        asynchronous=False,
    )

    offer = current_domain.repository_for(Deal).get(deal_id).offer(offer_id)
    result = LinkResult(deal_id=str(deal_id), offer_id=str(offer_id), parcel_id=offer.parcel_id)
    if not offer.parcel_id:
        return result

    try:
        result.error = _link(str(offer.parcel_id), str(deal_id), str(offer_id))
    except ParcelAlreadyLinked as exc:
        result.error = str(exc)
    result.parcel_linked = result.error is None
    return result


def cancel_parcel_subscription(deal_id: str, parcel_id: str, by_transporter: bool = False) -> list[str]:
    """Cancel the parcel's Offer(s) in a Deal, then release the Parcel.

    Returns the ids of the cancelled Offers.
    """
    action = DealAction.TRANSPORTER_CANCELS_PARCEL if by_transporter else DealAction.SHIPPER_CANCELS_PARCEL
    offer_ids = current_domain.process(
        ApplyOfferAction(deal_id=deal_id, action=action.value, parcel_id=parcel_id),
        asynchronous=False,
    )

    parcel = _load_parcel(parcel_id)
    if parcel.offer_id and str(parcel.offer_id) in offer_ids:
        try:
            current_domain.process(
                UnlinkParcel(parcel_id=parcel_id, offer_id=str(parcel.offer_id)),
                asynchronous=False,
            )
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.error(
                "Parcel still points at a cancelled offer",
                parcel_id=parcel_id,
                offer_id=str(parcel.offer_id),
                error=str(exc),
            )
    return offer_ids

"""Status vocabulary and the Deal/Offer transition table.

Every "button press" on a Deal is a named ``DealAction``. The table below
maps each action to the Deal status it produces, the Offer status it stamps
and the scope it applies to:

    ALL        every embedded Offer
    ONE        only the Offer(s) selected by a match predicate
    DEAL_ONLY  the Deal itself, Offers untouched

The table is permissive: an action is never rejected because of the
current status. ``resulting_deal_status`` only resolves rows that leave the
Deal status unchanged.
"""

from dataclasses import dataclass
from enum import Enum


class DealStatus(Enum):
    BEING_FORMED = "BeingFormed"
    ON_THE_WAY = "OnTheWay"
    TIME_IS_UP = "TimeIsUp"
    DEAL_IS_OVER = "DealIsOver"
    DEAL_IS_CANCEL = "DealIsCancel"
    DEAL_IS_CRASH = "DealIsCrash"


class OfferStatus(Enum):
    AGREE_SHIFTER = "AgreeShifter"
    AGREE_CLIENT = "AgreeClient"
    AGREE_ALL = "AgreeAll"
    DISAGREE_SHIFTER = "DisagreeShifter"
    DISAGREE_CLIENT = "DisagreeClient"
    CANCEL_SHIFTER = "CancelShifter"
    CANCEL_CLIENT = "CancelClient"
    CONFIRMED_DELIVERY_SHIFTER = "ConfirmedDeliveryShifter"


class OfferOrigin(Enum):
    TRANSPORTER_INITIATED = "TransporterInitiated"
    CLIENT_INITIATED = "ClientInitiated"


class TransportMode(Enum):
    CAR = "Car"
    MINIBUS = "Minibus"
    BUS = "Bus"
    TRUCK = "Truck"
    TRAIN = "Train"
    PLANE = "Plane"


class Actuality(Enum):
    CURRENT = "Current"
    ARCHIVE = "Archive"


class Scope(Enum):
    ALL = "All"
    ONE = "One"
    DEAL_ONLY = "DealOnly"


class DealAction(Enum):
    TRANSPORTER_AGREES = "TransporterAgrees"
    SHIPPER_SUBSCRIBES = "ShipperSubscribes"
    BOTH_AGREE = "BothAgree"
    SECOND_SIDE_AGREES = "SecondSideAgrees"
    SHIPPER_DISAGREES = "ShipperDisagrees"
    TRANSPORTER_DISAGREES = "TransporterDisagrees"
    TRANSPORTER_CANCELS_PARCEL = "TransporterCancelsParcel"
    SHIPPER_CANCELS_PARCEL = "ShipperCancelsParcel"
    TRANSPORTER_CRASHES_DEAL = "TransporterCrashesDeal"
    TRANSPORTER_CANCELS_DEAL = "TransporterCancelsDeal"
    SHIPPER_DID_NOT_RECEIVE = "ShipperDidNotReceive"
    FINISH_DEAL = "FinishDeal"
    SHIPPER_RESUBSCRIBES = "ShipperResubscribes"
    TRANSPORTER_REJECTS_OFFER = "TransporterRejectsOffer"
    TRANSPORTER_WITHDRAWS = "TransporterWithdraws"
    DEPART = "Depart"
    EXPIRE = "Expire"


ACTIVE_DEAL_STATUSES = frozenset({DealStatus.BEING_FORMED, DealStatus.ON_THE_WAY})

ARCHIVE_DEAL_STATUSES = frozenset(
    {
        DealStatus.TIME_IS_UP,
        DealStatus.DEAL_IS_OVER,
        DealStatus.DEAL_IS_CANCEL,
        DealStatus.DEAL_IS_CRASH,
    }
)

CANCELLED_OFFER_STATUSES = frozenset({OfferStatus.CANCEL_SHIFTER, OfferStatus.CANCEL_CLIENT})


@dataclass(frozen=True)
class Transition:
    deal_status: DealStatus | None  # None: keep the current Deal status
    offer_status: OfferStatus | None  # None: Offers untouched
    scope: Scope


TRANSITIONS: dict[DealAction, Transition] = {
    DealAction.TRANSPORTER_AGREES: Transition(DealStatus.BEING_FORMED, OfferStatus.AGREE_SHIFTER, Scope.ALL),
    # Observed behaviour of the marketplace: a shipper subscribing to an
    # existing offer marks the whole Deal as crashed.
    DealAction.SHIPPER_SUBSCRIBES: Transition(DealStatus.DEAL_IS_CRASH, OfferStatus.AGREE_CLIENT, Scope.ONE),
    DealAction.BOTH_AGREE: Transition(DealStatus.BEING_FORMED, OfferStatus.AGREE_ALL, Scope.ALL),
    DealAction.SECOND_SIDE_AGREES: Transition(DealStatus.BEING_FORMED, OfferStatus.AGREE_ALL, Scope.ONE),
    DealAction.SHIPPER_DISAGREES: Transition(DealStatus.BEING_FORMED, OfferStatus.DISAGREE_CLIENT, Scope.ONE),
    DealAction.TRANSPORTER_DISAGREES: Transition(DealStatus.BEING_FORMED, OfferStatus.DISAGREE_SHIFTER, Scope.ALL),
    DealAction.TRANSPORTER_CANCELS_PARCEL: Transition(DealStatus.BEING_FORMED, OfferStatus.CANCEL_SHIFTER, Scope.ONE),
    DealAction.SHIPPER_CANCELS_PARCEL: Transition(DealStatus.BEING_FORMED, OfferStatus.CANCEL_CLIENT, Scope.ONE),
    DealAction.TRANSPORTER_CRASHES_DEAL: Transition(DealStatus.DEAL_IS_CRASH, OfferStatus.CANCEL_SHIFTER, Scope.ALL),
    DealAction.TRANSPORTER_CANCELS_DEAL: Transition(DealStatus.DEAL_IS_CANCEL, OfferStatus.CANCEL_SHIFTER, Scope.ALL),
    DealAction.SHIPPER_DID_NOT_RECEIVE: Transition(DealStatus.DEAL_IS_OVER, OfferStatus.DISAGREE_CLIENT, Scope.ONE),
    DealAction.FINISH_DEAL: Transition(DealStatus.DEAL_IS_OVER, OfferStatus.CONFIRMED_DELIVERY_SHIFTER, Scope.ALL),
    DealAction.SHIPPER_RESUBSCRIBES: Transition(None, OfferStatus.AGREE_CLIENT, Scope.ONE),
    DealAction.TRANSPORTER_REJECTS_OFFER: Transition(None, OfferStatus.DISAGREE_SHIFTER, Scope.ONE),
    DealAction.TRANSPORTER_WITHDRAWS: Transition(None, OfferStatus.CANCEL_SHIFTER, Scope.ALL),
    DealAction.DEPART: Transition(DealStatus.ON_THE_WAY, None, Scope.DEAL_ONLY),
    DealAction.EXPIRE: Transition(DealStatus.TIME_IS_UP, None, Scope.DEAL_ONLY),
}


def transition_for(action: DealAction | str) -> Transition:
    return TRANSITIONS[DealAction(action)]


def resulting_deal_status(current: DealStatus | str, action: DealAction | str) -> DealStatus:
    """Deal status after applying ``action`` to a Deal in ``current`` status."""
    transition = transition_for(action)
    if transition.deal_status is None:
        return DealStatus(current)
    return transition.deal_status


def statuses_for(actuality: Actuality | str) -> frozenset[DealStatus]:
    if Actuality(actuality) == Actuality.CURRENT:
        return ACTIVE_DEAL_STATUSES
    return ARCHIVE_DEAL_STATUSES

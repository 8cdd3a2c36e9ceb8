"""Repository for the Deal aggregate."""

from datetime import datetime

from logistics.deal.deal import Deal
from logistics.deal.status import ACTIVE_DEAL_STATUSES, DealStatus
from logistics.domain import logistics


@logistics.repository(part_of=Deal)
class DealRepository:
    """Deal lookups beyond get/add.

    Offers live inside their Deal, so offer-level lookups load Deals and
    filter the embedded collection in memory. Every scan lifts the default
    page limit; a truncated page would silently drop Deals.
    """

    def find_all(self) -> list[Deal]:
        return self._dao.query.limit(None).all().items

    def find_by_transporter(self, transporter_id: str) -> list[Deal]:
        return self._dao.query.filter(transporter_id=str(transporter_id)).limit(None).all().items

    def find_by_statuses(self, statuses) -> list[Deal]:
        values = [DealStatus(s).value for s in statuses]
        if not values:
            return []
        return self._dao.query.filter(status__in=values).limit(None).all().items

    def find_active(self) -> list[Deal]:
        return self.find_by_statuses(ACTIVE_DEAL_STATUSES)

    def find_departed(self, as_of: datetime) -> list[Deal]:
        """Active Deals whose departure is at or before ``as_of``."""
        return (
            self._dao.query.filter(
                status__in=[s.value for s in ACTIVE_DEAL_STATUSES],
                departure_at__lte=as_of,
            )
            .limit(None)
            .all()
            .items
        )

    def find_open_for_transporter(self, transporter_id: str) -> list[Deal]:
        """Deals of the transporter that are not archived yet."""
        return [d for d in self.find_by_transporter(transporter_id) if not d.is_archived]

    def find_by_parcel(self, parcel_id: str) -> list[Deal]:
        return [d for d in self.find_all() if d.offers_for_parcel(parcel_id)]

    def find_by_offer(self, offer_id: str) -> Deal | None:
        return next(
            (d for d in self.find_all() if any(str(o.id) == str(offer_id) for o in (d.offers or []))),
            None,
        )

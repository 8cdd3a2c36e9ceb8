"""Deal status refresh: command and handler for time-based transitions.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob) via the maintenance API endpoint or ``manage.py refresh-deals``.
Active Deals whose departure has elapsed are advanced: BeingFormed Deals
with an agreed Offer go OnTheWay, the rest expire to TimeIsUp. Re-running
is a no-op for Deals that were already advanced.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.domain import logistics
from logistics.shared.clock import as_utc, utcnow

logger = structlog.get_logger(__name__)


@logistics.command(part_of="Deal")
class RefreshDealStatuses:
    """Advance Deals whose departure time has elapsed."""

    as_of = DateTime()  # Optional: defaults to now


@logistics.command_handler(part_of=Deal)
class RefreshDealStatusesHandler:
    @handle(RefreshDealStatuses)
    def refresh_deal_statuses(self, command):
        as_of = as_utc(command.as_of) or utcnow()
        repo = current_domain.repository_for(Deal)

        due = repo.find_departed(as_of)
        if not due:
            logger.info("No departed deals to refresh", as_of=as_of.isoformat())
            return 0

        advanced = 0
        for deal in due:
            try:
                action = deal.refresh(as_of)
                if action is None:
                    continue
                repo.add(deal)
                advanced += 1
                logger.info(
                    "Deal advanced",
                    deal_id=str(deal.id),
                    action=action.value,
                    status=deal.status,
                )
            except ValidationError as exc:
                logger.warning(
                    "Failed to refresh deal",
                    deal_id=str(deal.id),
                    error=str(exc),
                )

        logger.info("Deal refresh complete", advanced=advanced)
        return advanced

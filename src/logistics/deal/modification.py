"""Deal editing: PatchDeal command and handler.

Only the fields present on the command are changed. Editing always puts
the Deal back to BeingFormed and never touches its Offers.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.deal.deal import Deal
from logistics.domain import logistics
from logistics.shared.geo_point import GeoPoint

_PLAIN_FIELDS = (
    "description",
    "address_from",
    "address_to",
    "baggage_types",
    "transport",
    "departure_at",
    "arrival_at",
)


@logistics.command(part_of="Deal")
class PatchDeal:
    deal_id = Identifier(required=True)
    description = String(max_length=1000)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin_latitude = Float()
    origin_longitude = Float()
    destination_latitude = Float()
    destination_longitude = Float()
    baggage_types = Text()  # JSON list
    transport = String(max_length=50)
    departure_at = DateTime()
    arrival_at = DateTime()


def _changes(command) -> dict:
    changes = {name: getattr(command, name) for name in _PLAIN_FIELDS if getattr(command, name) is not None}

    for prefix in ("origin", "destination"):
        latitude = getattr(command, f"{prefix}_latitude")
        longitude = getattr(command, f"{prefix}_longitude")
        if latitude is None and longitude is None:
            continue
        if latitude is None or longitude is None:
            raise ValidationError({prefix: ["Both latitude and longitude are required"]})
        changes[prefix] = GeoPoint(latitude=latitude, longitude=longitude)

    return changes


@logistics.command_handler(part_of=Deal)
class PatchDealHandler:
    @handle(PatchDeal)
    def patch_deal(self, command):
        repo = current_domain.repository_for(Deal)
        deal = repo.get(command.deal_id)
        deal.update_route(**_changes(command))
        repo.add(deal)

"""Parcel registration and editing: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.parcel.parcel import Parcel
from logistics.shared.geo_point import GeoPoint


@logistics.command(part_of="Parcel")
class RegisterParcel:
    """Register a new shipment request for a shipper."""

    owner_client_id = Identifier(required=True)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin_latitude = Float(required=True)
    origin_longitude = Float(required=True)
    destination_latitude = Float()
    destination_longitude = Float()
    baggage_types = Text(required=True)  # JSON list
    departure_at = DateTime(required=True)
    declared_value = Float(min_value=0.0)
    description = String(max_length=1000)


@logistics.command(part_of="Parcel")
class UpdateParcel:
    parcel_id = Identifier(required=True)
    address_from = String(max_length=255)
    address_to = String(max_length=255)
    origin_latitude = Float()
    origin_longitude = Float()
    destination_latitude = Float()
    destination_longitude = Float()
    baggage_types = Text()  # JSON list
    departure_at = DateTime()
    declared_value = Float(min_value=0.0)
    description = String(max_length=1000)


def _point(command, prefix: str) -> GeoPoint | None:
    latitude = getattr(command, f"{prefix}_latitude")
    longitude = getattr(command, f"{prefix}_longitude")
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        raise ValidationError({prefix: ["Both latitude and longitude are required"]})
    return GeoPoint(latitude=latitude, longitude=longitude)


@logistics.command_handler(part_of=Parcel)
class ParcelRegistrationHandler:
    @handle(RegisterParcel)
    def register_parcel(self, command):
        parcel = Parcel.register(
            owner_client_id=command.owner_client_id,
            origin=_point(command, "origin"),
            destination=_point(command, "destination"),
            baggage_types=command.baggage_types,
            departure_at=command.departure_at,
            declared_value=command.declared_value,
            address_from=command.address_from,
            address_to=command.address_to,
            description=command.description,
        )
        current_domain.repository_for(Parcel).add(parcel)
        return str(parcel.id)

    @handle(UpdateParcel)
    def update_parcel(self, command):
        repo = current_domain.repository_for(Parcel)
        parcel = repo.get(command.parcel_id)

        changes = {
            name: getattr(command, name)
            for name in (
                "address_from",
                "address_to",
                "baggage_types",
                "departure_at",
                "declared_value",
                "description",
            )
            if getattr(command, name) is not None
        }
        for prefix in ("origin", "destination"):
            point = _point(command, prefix)
            if point is not None:
                changes[prefix] = point

        parcel.update_shipment(**changes)
        repo.add(parcel)

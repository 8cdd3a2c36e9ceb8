"""GeoPoint value object for route and parcel coordinates."""

from protean.fields import Float

from logistics.domain import logistics


@logistics.value_object
class GeoPoint:
    """Latitude/longitude pair in decimal degrees.

    Both coordinates are required. Latitude ranges from -90 to 90, longitude
    from -180 to 180.
    """

    latitude = Float(required=True, min_value=-90.0, max_value=90.0)
    longitude = Float(required=True, min_value=-180.0, max_value=180.0)

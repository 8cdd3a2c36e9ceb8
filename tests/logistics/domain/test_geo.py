"""Tests for spherical distance helpers and the GeoPoint value object."""

import pytest
from logistics.matching.geo import haversine_km, latitude_band
from logistics.shared.geo_point import GeoPoint
from protean.exceptions import ValidationError


class TestHaversine:
    def test_zero_distance(self):
        assert haversine_km(55.75, 37.61, 55.75, 37.61) == 0.0

    def test_moscow_to_saint_petersburg(self):
        distance = haversine_km(55.7558, 37.6173, 59.9343, 30.3351)
        assert 630 < distance < 640

    def test_one_degree_of_latitude(self):
        assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.2, abs=0.1)

    def test_across_the_antimeridian(self):
        assert haversine_km(0.0, 179.9, 0.0, -179.9) < 25


class TestLatitudeBand:
    def test_band_contains_radius(self):
        south, north = latitude_band(50.0, 111.2)
        assert south == pytest.approx(49.0, abs=0.01)
        assert north == pytest.approx(51.0, abs=0.01)

    def test_band_is_clamped_at_the_poles(self):
        south, north = latitude_band(89.5, 500)
        assert north == 90.0
        assert south < 89.5


class TestGeoPoint:
    def test_valid_point(self):
        point = GeoPoint(latitude=-33.86, longitude=151.2)
        assert point.latitude == -33.86

    @pytest.mark.parametrize("latitude,longitude", [(91.0, 0.0), (-91.0, 0.0), (0.0, 181.0), (0.0, -181.0)])
    def test_out_of_range_is_rejected(self, latitude, longitude):
        with pytest.raises(ValidationError):
            GeoPoint(latitude=latitude, longitude=longitude)

    def test_missing_coordinate_is_rejected(self):
        with pytest.raises(ValidationError):
            GeoPoint(latitude=10.0)

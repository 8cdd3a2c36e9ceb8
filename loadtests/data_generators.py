"""Faker-based data generators for Locust load test scenarios.

Payloads pass the domain's validation rules (coordinate ranges, non-empty
baggage sets, transport modes) and use the field names of the API's
Pydantic request schemas.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

BAGGAGE_TYPES = ["Documents", "SmallBox", "Suitcase", "Pet", "Fragile", "Oversized"]
TRANSPORT_MODES = ["Car", "Minibus", "Bus", "Truck", "Train", "Plane"]

# Load is concentrated around a handful of hubs so searches find matches.
HUBS = [
    (55.7558, 37.6173),
    (59.9343, 30.3351),
    (56.8389, 60.6057),
    (55.0084, 82.9357),
]


def user_id(prefix: str) -> str:
    return f"{prefix}-lt-{uuid.uuid4().hex[:8]}"


def point_near(hub: tuple[float, float], spread_deg: float = 0.2) -> dict:
    return {
        "latitude": round(hub[0] + random.uniform(-spread_deg, spread_deg), 5),
        "longitude": round(hub[1] + random.uniform(-spread_deg, spread_deg), 5),
    }


def baggage_set() -> list[str]:
    return random.sample(BAGGAGE_TYPES, k=random.randint(1, 3))


def departure_window() -> tuple[str, str]:
    """Random future departure, a few hours of travel."""
    start = datetime.now(UTC) + timedelta(days=random.randint(1, 30), hours=random.randint(0, 23))
    end = start + timedelta(hours=random.randint(2, 12))
    return start.isoformat(), end.isoformat()


def deal_data() -> dict:
    """Generate a CreateDealRequest payload."""
    hub = random.choice(HUBS)
    departure_at, arrival_at = departure_window()
    return {
        "address_from": fake.street_address()[:255],
        "address_to": fake.city()[:255],
        "origin": point_near(hub),
        "destination": point_near(random.choice(HUBS)),
        "baggage_types": baggage_set(),
        "transport": random.choice(TRANSPORT_MODES),
        "departure_at": departure_at,
        "arrival_at": arrival_at,
        "description": fake.sentence(nb_words=8)[:1000],
    }


def parcel_data(hub: tuple[float, float] | None = None) -> dict:
    """Generate a ParcelRequest payload."""
    hub = hub or random.choice(HUBS)
    return {
        "address_from": fake.street_address()[:255],
        "address_to": fake.city()[:255],
        "origin": point_near(hub),
        "baggage_types": baggage_set(),
        "departure_at": (datetime.now(UTC) + timedelta(hours=1)).isoformat(),
        "declared_value": round(random.uniform(5, 500), 2),
        "description": fake.sentence(nb_words=5)[:1000],
    }


def search_data() -> dict:
    """Generate a SearchDealsRequest payload around one of the hubs."""
    return {
        "baggage_types": baggage_set(),
        "origin": point_near(random.choice(HUBS)),
        "radius_km": random.choice([10, 25, 50, 100]),
        "not_before": datetime.now(UTC).isoformat(),
    }

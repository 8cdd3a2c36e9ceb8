"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared between
users. State holds the ids returned by creation endpoints so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class TransporterState:
    """Tracks a simulated transporter and the deal it publishes."""

    transporter_id: str
    deal_id: str | None = None
    offer_ids: list[str] = field(default_factory=list)
    current_status: str = "BeingFormed"


@dataclass
class ShipperState:
    """Tracks a simulated shipper, its parcels and the deal it subscribes to."""

    client_id: str
    parcel_ids: list[str] = field(default_factory=list)
    deal_id: str | None = None
    offer_ids: list[str] = field(default_factory=list)

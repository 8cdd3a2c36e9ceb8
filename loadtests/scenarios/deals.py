"""Deal marketplace load test scenarios.

Stateful SequentialTaskSet journeys: a transporter publishing a route and
driving it to completion, and a shipper registering parcels, searching for
deals and subscribing to one.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import HUBS, deal_data, parcel_data, search_data, user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShipperState, TransporterState


class TransporterJourney(SequentialTaskSet):
    """Publish -> Edit -> Read -> Depart (refresh) -> Finish.

    Generates DealCreated, DealRouteUpdated and DealActionApplied events and
    keeps the origin index busy.
    """

    def on_start(self):
        self.state = TransporterState(transporter_id=user_id("trn"))
        self.headers = {"X-User-Id": self.state.transporter_id}

    @task
    def publish_deal(self):
        with self.client.post(
            "/deals",
            json=deal_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /deals",
        ) as resp:
            if resp.status_code == 201:
                self.state.deal_id = resp.json()["deal_id"]
            else:
                resp.failure(f"Publish deal failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def edit_deal(self):
        with self.client.patch(
            f"/deals/{self.state.deal_id}",
            json={"description": "Updated by load test"},
            catch_response=True,
            name="PATCH /deals/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Edit deal failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def read_deal(self):
        self.client.get(f"/deals/{self.state.deal_id}", name="GET /deals/{id}")

    @task
    def list_my_deals(self):
        self.client.get(
            "/deals",
            params={"transporter_id": self.state.transporter_id, "actuality": "Current"},
            name="GET /deals?transporter_id",
        )

    @task
    def finish_deal(self):
        with self.client.put(
            f"/deals/{self.state.deal_id}/actions/FinishDeal",
            catch_response=True,
            name="PUT /deals/{id}/actions/{action}",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Finish deal failed: {resp.status_code}: {extract_error_detail(resp)}")
        self.interrupt()


class ShipperJourney(SequentialTaskSet):
    """Register parcels -> Search -> Subscribe batch -> Cancel one.

    Exercises the two-write Parcel/Offer link and batch outcome reporting.
    """

    def on_start(self):
        self.state = ShipperState(client_id=user_id("cli"))
        self.headers = {"X-User-Id": self.state.client_id}
        self.hub = random.choice(HUBS)

    @task
    def register_parcels(self):
        for _ in range(random.randint(1, 3)):
            with self.client.post(
                "/parcels",
                json=parcel_data(self.hub),
                headers=self.headers,
                catch_response=True,
                name="POST /parcels",
            ) as resp:
                if resp.status_code == 201:
                    self.state.parcel_ids.append(resp.json()["parcel_id"])
                else:
                    resp.failure(f"Register parcel failed: {resp.status_code}: {extract_error_detail(resp)}")
        if not self.state.parcel_ids:
            self.interrupt()

    @task
    def find_deal(self):
        with self.client.get(
            f"/parcels/{self.state.parcel_ids[0]}/matches",
            params={"radius_km": 100},
            catch_response=True,
            name="GET /parcels/{id}/matches",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Match failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()
            matches = resp.json()
            if not matches:
                # Nothing published nearby yet; not a failure
                resp.success()
                self.interrupt()
            self.state.deal_id = matches[0]["deal"]["deal_id"]

    @task
    def subscribe(self):
        with self.client.post(
            f"/deals/{self.state.deal_id}/subscriptions/client",
            json={"parcel_ids": self.state.parcel_ids},
            headers=self.headers,
            catch_response=True,
            name="POST /deals/{id}/subscriptions/client",
        ) as resp:
            if resp.status_code in (200, 207):
                self.state.offer_ids = [o["offer_id"] for o in resp.json()["outcomes"] if o["offer_id"]]
                resp.success()
            else:
                resp.failure(f"Subscribe failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def list_my_parcels(self):
        self.client.get("/parcels", headers=self.headers, name="GET /parcels")

    @task
    def cancel_one(self):
        self.client.delete(
            f"/deals/{self.state.deal_id}/subscriptions/{self.state.parcel_ids[0]}",
            name="DELETE /deals/{id}/subscriptions/{parcel_id}",
        )
        self.interrupt()


class SearchJourney(SequentialTaskSet):
    """Read-heavy traffic against the matching query."""

    @task
    def search(self):
        self.client.post("/deals/search", json=search_data(), name="POST /deals/search")


class TransporterUser(HttpUser):
    tasks = [TransporterJourney]
    wait_time = between(1, 3)


class ShipperUser(HttpUser):
    tasks = [ShipperJourney]
    wait_time = between(1, 3)


class MarketplaceUser(HttpUser):
    """Mixed workload: mostly searches, some publishing and subscribing."""

    tasks = {SearchJourney: 6, TransporterJourney: 2, ShipperJourney: 2}
    wait_time = between(0.5, 2)

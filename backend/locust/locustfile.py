"""
Locust Load Test Suite

Run against a seeded database (python -m app.db.seed):
  locust -f locustfile.py --tags concurrency  # Contend on one booking's travellers
  locust -f locustfile.py --tags throughput   # Booking lists and cached summaries
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string

from locust import HttpUser, task, between, tag

SEED_EMAILS = [
    "john.doe@example.com",
    "jane.smith@example.com",
    "mike.johnson@example.com",
    "sarah.williams@example.com",
]
SEED_PASSWORD = "password123"


def random_name(length: int = 6) -> str:
    return "".join(random.choices(string.ascii_lowercase, k=length)).capitalize()


def traveller_payload(booking_id: int) -> dict:
    return {
        "booking_id": booking_id,
        "first_name": random_name(),
        "last_name": random_name(8),
        "date_of_birth": f"19{random.randint(50, 99)}-0{random.randint(1, 9)}-1{random.randint(0, 9)}",
        "gender": random.choice(["male", "female", "other"]),
        "nationality": "Canadian",
    }


class SeededUser(HttpUser):
    """Logs in as one of the seeded accounts and remembers its bookings."""

    abstract = True

    def on_start(self):
        self.headers = {}
        self.booking_ids = []

        resp = self.client.post("/api/v1/auth/login", json={
            "email": random.choice(SEED_EMAILS),
            "password": SEED_PASSWORD,
        })
        if resp.status_code != 200:
            return

        self.headers = {"Authorization": f"Bearer {resp.json()['tokens']['access_token']}"}
        resp = self.client.get("/api/v1/bookings/?status=upcoming", headers=self.headers)
        if resp.status_code == 200:
            self.booking_ids = [b["id"] for b in resp.json()["bookings"]]


class ConcurrencyUser(SeededUser):
    """
    TEST 1: Concurrency - many clients editing the same booking

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    With only four seeded accounts, clients pile onto the same soonest
    booking. After the run, verify for every booking:
      json_array_length(travellers) >= 1
    and no two travellers share (lower(first_name), lower(last_name), date_of_birth).
    409 here means a duplicate or an exhausted version retry; both are expected.
    """
    wait_time = between(0, 0.1)

    @tag("concurrency")
    @task(3)
    def add_traveller(self):
        if not self.booking_ids:
            return

        with self.client.post("/api/v1/travellers/",
            json=traveller_payload(self.booking_ids[0]),
            headers=self.headers,
            name="/api/v1/travellers/ [add]",
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("concurrency")
    @task(2)
    def remove_traveller(self):
        """Remove a random traveller; 400 when it is the last one."""
        if not self.booking_ids:
            return

        booking_id = self.booking_ids[0]
        resp = self.client.get(f"/api/v1/bookings/{booking_id}", headers=self.headers,
            name="/api/v1/bookings/{id}")
        if resp.status_code != 200:
            return

        traveller = random.choice(resp.json()["travellers"])
        with self.client.request("DELETE", f"/api/v1/travellers/{traveller['id']}",
            json={"booking_id": booking_id},
            headers=self.headers,
            name="/api/v1/travellers/{id} [delete]",
            catch_response=True
        ) as resp:
            if resp.status_code in (200, 400, 404, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(SeededUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false, run again

    Compare avg response time and P95/P99 of the summary endpoint.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_bookings(self):
        status = random.choice(["upcoming", "completed", ""])
        self.client.get(f"/api/v1/bookings/?status={status}" if status else "/api/v1/bookings/",
            headers=self.headers, name="/api/v1/bookings/")

    @tag("throughput", "read")
    @task(5)
    def list_travellers(self):
        self.client.get("/api/v1/travellers/", headers=self.headers)

    @tag("throughput")
    @task(3)
    def summarize_booking(self):
        if self.booking_ids:
            self.client.post(f"/api/v1/bookings/{random.choice(self.booking_ids)}/summary",
                headers=self.headers, name="/api/v1/bookings/{id}/summary")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(SeededUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_booking(self):
        with self.client.post("/api/v1/travellers/", json=traveller_payload(999999),
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def future_birth_date(self):
        payload = traveller_payload(self.booking_ids[0] if self.booking_ids else 1)
        payload["date_of_birth"] = "2999-01-01"
        with self.client.post("/api/v1/travellers/", json=payload,
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def malformed_traveller_id(self):
        with self.client.put("/api/v1/travellers/not-a-valid-id", json=traveller_payload(1),
            headers=self.headers, name="/api/v1/travellers/{id} [bad id]",
            catch_response=True) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def oversized_page(self):
        with self.client.get("/api/v1/bookings/?limit=1000",
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/travellers/", data="not json at all",
            headers=self.headers, catch_response=True) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.get("/api/v1/bookings/", catch_response=True) as resp:
            self._expect(resp, (401,))

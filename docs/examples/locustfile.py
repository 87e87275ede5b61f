"""Locust load-test: sustained event ingestion with occasional reads.

Drives ``POST /ingest`` hard enough to exercise both flush triggers and,
at high concurrency, the 503 backpressure path.  503 responses are counted
as expected outcomes, not failures.

Run with::

    pip install -e '.[load]'
    locust -f docs/examples/locustfile.py --host=http://localhost:8080

Headless::

    locust -f docs/examples/locustfile.py \\
        --host=http://localhost:8080 \\
        --users=200 --spawn-rate=20 \\
        --run-time=60s --headless

Endpoints exercised
-------------------
GET  /health          – probe before start; also sampled during the run
POST /ingest          – event ingestion (write)
GET  /events          – recent events (read)
GET  /events/stats    – 24h counters (read)

Metrics to watch
----------------
- p95/p99 latency of ``/ingest`` (should stay flat; submit never blocks)
- share of 503s as ``BUFFER_SIZE`` / ``BATCH_SIZE`` change
- ``buffer_usage`` reported by ``/health``
"""

from __future__ import annotations

import random
import uuid
from datetime import UTC, datetime

from locust import HttpUser, between, task

INGEST_WEIGHT = 20
READ_WEIGHT = 2
HEALTH_WEIGHT = 1

_EVENT_TYPES = ("auth_attempt", "api_call", "admin_action", "data_access", "config_change")
_SEVERITIES = ("low", "low", "low", "medium", "medium", "high", "critical")
_USERS = [f"user-{n}" for n in range(50)]
_ENDPOINTS = ("/login", "/api/orders", "/api/users", "/admin/settings", "/export")


def _payload() -> dict[str, object]:
    return {
        "id": str(uuid.uuid4()),
        "event_type": random.choice(_EVENT_TYPES),
        "severity": random.choice(_SEVERITIES),
        "ip_address": f"10.{random.randint(0, 255)}.{random.randint(0, 255)}.{random.randint(1, 254)}",
        "user_id": random.choice(_USERS),
        "user_agent": "locust",
        "endpoint": random.choice(_ENDPOINTS),
        "http_method": random.choice(("GET", "POST", "PUT", "DELETE")),
        "status_code": random.choice((200, 200, 201, 401, 403, 500)),
        "metadata": {"load_test": True},
        "occurred_at": datetime.now(UTC).isoformat(),
    }


class EventProducer(HttpUser):
    """Simulates an upstream service emitting audit events."""

    wait_time = between(0.01, 0.1)

    def on_start(self) -> None:
        """Probe /health before the test starts; abort if unavailable."""
        resp = self.client.get("/health", name="/health [probe]")
        if resp.status_code != 200:
            self.environment.runner.quit()

    @task(INGEST_WEIGHT)
    def ingest(self) -> None:
        with self.client.post(
            "/ingest",
            json=_payload(),
            name="/ingest",
            catch_response=True,
        ) as resp:
            if resp.status_code == 503:
                resp.success()
            elif resp.status_code != 202:
                resp.failure(f"Unexpected status: {resp.status_code}")

    @task(READ_WEIGHT)
    def recent_events(self) -> None:
        self.client.get("/events?limit=50", name="/events")

    @task(READ_WEIGHT)
    def stats(self) -> None:
        self.client.get("/events/stats?hours=24", name="/events/stats")

    @task(HEALTH_WEIGHT)
    def health(self) -> None:
        with self.client.get("/health", name="/health", catch_response=True) as resp:
            if resp.status_code not in (200, 503):
                resp.failure(f"Unexpected status: {resp.status_code}")

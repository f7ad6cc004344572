"""
Tests for the dashboard scheduler and the RSS dashboard endpoints.
"""

import asyncio
import time
from datetime import timedelta
from unittest.mock import Mock

import pytest

from athena.api.dependencies import get_scheduler
from athena.core.utils import utc_now, utc_now_iso
from athena.models.dashboard import DashboardSnapshot, ProcessedClaim
from athena.models.fact_check import SourceType
from athena.services.dashboard_scheduler import DashboardScheduler
from athena.services.rss_service import calculate_stats
from main import app


def _snapshot() -> DashboardSnapshot:
    now = utc_now()
    claims = [
        ProcessedClaim(
            id="claim_1_0", title="Election turnout hit a record", description="Officials said",
            source="PolitiFact", source_url="https://www.politifact.com/a", source_type=SourceType.FACT_CHECKER,
            publish_date=now.isoformat(), category="politics", trending_score=0.8, credibility_score=95,
        ),
        ProcessedClaim(
            id="claim_1_1", title="New vaccine study published", description="Researchers found",
            source="Reuters", source_url="https://www.reuters.com/b", source_type=SourceType.NEWS,
            publish_date=(now - timedelta(days=3)).isoformat(), category="health", trending_score=0.4,
            credibility_score=75,
        ),
    ]
    return DashboardSnapshot(claims=claims, articles=[], stats=calculate_stats(claims, now), last_update=utc_now_iso())


@pytest.fixture
def rss_service():
    rss_service = Mock()
    rss_service.build_snapshot.side_effect = lambda: _snapshot()
    return rss_service


@pytest.fixture
def scheduler(rss_service):
    return DashboardScheduler(rss_service=rss_service, interval_minutes=15)


@pytest.fixture
def dashboard_client(client, scheduler):
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    return client


def test_get_snapshot_fetches_once(scheduler, rss_service):
    first = asyncio.run(scheduler.get_snapshot())
    second = asyncio.run(scheduler.get_snapshot())

    assert first is second
    assert rss_service.build_snapshot.call_count == 1


def test_scheduled_refresh_failure_keeps_previous_snapshot(scheduler, rss_service):
    asyncio.run(scheduler.refresh())
    previous = scheduler._snapshot
    rss_service.build_snapshot.side_effect = RuntimeError("feeds down")

    asyncio.run(scheduler.run_scheduled_refresh())

    assert scheduler._snapshot is previous
    assert scheduler.get_status()["last_error"] == "feeds down"


def _slow_snapshot():
    time.sleep(0.2)
    return _snapshot()


def test_scheduled_refresh_skips_while_refreshing(scheduler, rss_service):
    rss_service.build_snapshot.side_effect = _slow_snapshot

    async def overlap():
        running = asyncio.create_task(scheduler.refresh())
        while not scheduler.is_refreshing:
            await asyncio.sleep(0)
        await scheduler.run_scheduled_refresh()
        await running

    asyncio.run(overlap())

    assert rss_service.build_snapshot.call_count == 1
    assert scheduler.get_status()["has_snapshot"] is True


def test_concurrent_first_reads_share_one_fetch(scheduler, rss_service):
    rss_service.build_snapshot.side_effect = _slow_snapshot

    async def first_reads():
        return await asyncio.gather(*(scheduler.get_snapshot() for _ in range(3)))

    snapshots = asyncio.run(first_reads())

    assert rss_service.build_snapshot.call_count == 1
    assert all(s is snapshots[0] for s in snapshots)


def test_status_before_start(scheduler):
    status = scheduler.get_status()

    assert status["running"] is False
    assert status["interval_minutes"] == 15
    assert status["has_snapshot"] is False
    assert status["next_run"] is None


def test_get_dashboard(dashboard_client, auth_headers):
    response = dashboard_client.get("/api/dashboard/rss", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [c["id"] for c in body["claims"]] == ["claim_1_0", "claim_1_1"]
    assert body["stats"]["total_claims"] == 2


def test_get_dashboard_filters_claims_not_stats(dashboard_client, auth_headers):
    response = dashboard_client.get(
        "/api/dashboard/rss", params={"category": "health", "time_range": "7d"}, headers=auth_headers
    )

    body = response.json()
    assert [c["id"] for c in body["claims"]] == ["claim_1_1"]
    assert body["stats"]["total_claims"] == 2

    verified = dashboard_client.get(
        "/api/dashboard/rss", params={"verification_status": "verified"}, headers=auth_headers
    ).json()
    assert [c["id"] for c in verified["claims"]] == ["claim_1_0"]


def test_get_dashboard_rejects_unknown_time_range(dashboard_client, auth_headers):
    response = dashboard_client.get("/api/dashboard/rss", params={"time_range": "1y"}, headers=auth_headers)
    assert response.status_code == 422


def test_get_dashboard_failure(dashboard_client, auth_headers, rss_service):
    rss_service.build_snapshot.side_effect = RuntimeError("feeds down")

    response = dashboard_client.get("/api/dashboard/rss", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch RSS feed data"


def test_refresh(dashboard_client, auth_headers, rss_service):
    dashboard_client.get("/api/dashboard/rss", headers=auth_headers)

    response = dashboard_client.post("/api/dashboard/rss/refresh", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "RSS feed refreshed successfully"
    assert len(response.json()["claims"]) == 2
    assert rss_service.build_snapshot.call_count == 2


def test_refresh_failure(dashboard_client, auth_headers, rss_service):
    rss_service.build_snapshot.side_effect = RuntimeError("feeds down")

    response = dashboard_client.post("/api/dashboard/rss/refresh", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to refresh RSS feed"


def test_scheduler_status_endpoint(dashboard_client, auth_headers):
    response = dashboard_client.get("/api/dashboard/scheduler", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["running"] is False


def test_dashboard_requires_authentication(dashboard_client):
    assert dashboard_client.get("/api/dashboard/rss").status_code in (401, 403)

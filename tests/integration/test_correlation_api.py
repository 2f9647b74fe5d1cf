"""
Integration tests for the enhanced correlation endpoints.

Tests:
- POST and GET success responses (camelCase bodies)
- Validation errors (400)
- Service failures (500)
- Default 30-day range
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.api.correlation import get_orchestration_service
from app.main import app
from app.services.correlation_orchestration_service import CorrelationOrchestrationService
from tests.factories import BASE_TIME_MS as T0, DAY_MS, HOUR_MS, create_food_event, create_symptom_instance
from tests.fixtures.mocks import FailingEventRepository, InMemoryEventRepository

pytestmark = pytest.mark.integration


class RecordingOrchestrationService:
    """Records the arguments it was called with and returns an empty result."""

    def __init__(self):
        self.calls = []
        self._service = CorrelationOrchestrationService(InMemoryEventRepository())

    def compute_with_combinations(self, user_id, symptom_id, time_range, min_sample_size=None):
        self.calls.append(
            {
                "user_id": user_id,
                "symptom_id": symptom_id,
                "time_range": time_range,
                "min_sample_size": min_sample_size,
            }
        )
        return self._service.compute_with_combinations(
            user_id, symptom_id, time_range, min_sample_size
        )


@pytest.fixture
def scenario_data(db: Session):
    """Cheese at 0h, 24h, 48h; headache at 6h and 30h."""
    for offset in (0, 24, 48):
        create_food_event(db, timestamp=T0 + offset * HOUR_MS, food_ids=["food-cheese"])
    for offset in (6, 30):
        create_symptom_instance(db, timestamp=T0 + offset * HOUR_MS, symptom_id="headache")


@pytest.fixture
def recording_service():
    service = RecordingOrchestrationService()
    app.dependency_overrides[get_orchestration_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_orchestration_service, None)


@pytest.fixture
def failing_service():
    app.dependency_overrides[get_orchestration_service] = lambda: CorrelationOrchestrationService(
        FailingEventRepository()
    )
    yield
    app.dependency_overrides.pop(get_orchestration_service, None)


class TestEnhancedCorrelationSuccess:
    """Tests for successful requests."""

    def test_post(self, client: TestClient, scenario_data):
        response = client.post(
            "/api/correlation/enhanced",
            json={
                "userId": "user-1",
                "symptomId": "headache",
                "startMs": T0,
                "endMs": T0 + 48 * HOUR_MS,
            },
        )

        assert response.status_code == 200
        body = response.json()
        correlation = body["correlations"][0]
        assert correlation["foodId"] == "food-cheese"
        assert correlation["exposureType"] == "food"
        assert correlation["bestWindow"]["window"] == "6-12h"
        assert correlation["bestWindow"]["score"] == pytest.approx(0.6667)
        assert correlation["status"] == "computed"
        assert body["combinations"] == []
        assert body["metadata"]["userId"] == "user-1"
        assert body["metadata"]["range"] == {"start": T0, "end": T0 + 48 * HOUR_MS}
        assert body["metadata"]["totalPairs"] == 1

    def test_get(self, client: TestClient, scenario_data):
        response = client.get(
            "/api/correlation/enhanced",
            params={
                "userId": "user-1",
                "symptomId": "headache",
                "startMs": T0,
                "endMs": T0 + 48 * HOUR_MS,
            },
        )

        assert response.status_code == 200
        assert response.json()["correlations"][0]["bestWindow"]["window"] == "6-12h"

    def test_min_sample_size_passed_through(self, client: TestClient, recording_service):
        response = client.post(
            "/api/correlation/enhanced",
            json={"userId": "user-1", "symptomId": "headache", "minSampleSize": 5},
        )

        assert response.status_code == 200
        assert recording_service.calls[0]["min_sample_size"] == 5

    def test_default_range_is_30_days(self, client: TestClient, recording_service):
        response = client.get(
            "/api/correlation/enhanced",
            params={"userId": "user-1", "symptomId": "headache", "endMs": T0},
        )

        assert response.status_code == 200
        time_range = recording_service.calls[0]["time_range"]
        assert time_range.end == T0
        assert time_range.start == T0 - 30 * DAY_MS


class TestEnhancedCorrelationValidation:
    """Tests for 400 responses."""

    def test_post_missing_symptom(self, client: TestClient):
        response = client.post("/api/correlation/enhanced", json={"userId": "user-1"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["error"] == "Missing required fields"
        assert "symptomId" in body["message"]
        assert isinstance(body["timestamp"], int)

    def test_post_without_body(self, client: TestClient):
        response = client.post("/api/correlation/enhanced")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_get_missing_user(self, client: TestClient):
        response = client.get("/api/correlation/enhanced", params={"symptomId": "headache"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required query params"

    def test_inverted_range(self, client: TestClient):
        response = client.post(
            "/api/correlation/enhanced",
            json={"userId": "user-1", "symptomId": "headache", "startMs": 10, "endMs": 5},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid range"

    def test_post_wrongly_typed_user(self, client: TestClient):
        response = client.post(
            "/api/correlation/enhanced", json={"userId": 123, "symptomId": "headache"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["error"] == "Invalid request parameters"
        assert "userId" in body["message"]
        assert isinstance(body["timestamp"], int)
        assert "detail" not in body

    def test_get_unparseable_start(self, client: TestClient):
        response = client.get(
            "/api/correlation/enhanced",
            params={"userId": "user-1", "symptomId": "headache", "startMs": "abc"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "startMs" in body["message"]


class TestEnhancedCorrelationFailures:
    """Tests for 500 responses."""

    def test_post_service_failure(self, client: TestClient, failing_service):
        response = client.post(
            "/api/correlation/enhanced", json={"userId": "user-1", "symptomId": "headache"}
        )

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert body["error"] == "Failed to compute enhanced correlation"

    def test_get_service_failure(self, client: TestClient, failing_service):
        response = client.get(
            "/api/correlation/enhanced", params={"userId": "user-1", "symptomId": "headache"}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch enhanced correlation"

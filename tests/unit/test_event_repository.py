"""
Unit tests for EventRepository against the test database.

Tests user scoping, inclusive time bounds, ordering and error wrapping.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.services.event_repository import EventRepository, RepositoryError
from tests.factories import (
    BASE_TIME_MS as T0,
    DAY_MS,
    HOUR_MS,
    create_flare,
    create_flare_event,
    create_food_event,
    create_medication_event,
    create_symptom_instance,
    create_trigger_event,
)


class TestTimeRangeQueries:
    """Tests for the per-event-type range queries."""

    def test_food_events_in_range_and_ordered(self, db: Session):
        late = create_food_event(db, timestamp=T0 + 2 * HOUR_MS, food_ids=["food-wine"])
        early = create_food_event(db, timestamp=T0, food_ids=["food-cheese"])
        create_food_event(db, timestamp=T0 + 2 * DAY_MS)
        repo = EventRepository(db)

        events = repo.find_food_events("user-1", T0, T0 + DAY_MS)

        assert [e.id for e in events] == [early.id, late.id]
        assert events[0].food_ids == ["food-cheese"]

    def test_bounds_are_inclusive(self, db: Session):
        create_trigger_event(db, timestamp=T0)
        create_trigger_event(db, timestamp=T0 + HOUR_MS)
        repo = EventRepository(db)

        assert len(repo.find_trigger_events("user-1", T0, T0 + HOUR_MS)) == 2

    def test_user_isolation(self, db: Session):
        create_symptom_instance(db, user_id="user-1")
        create_symptom_instance(db, user_id="user-2")
        repo = EventRepository(db)

        instances = repo.find_symptom_instances("user-1", T0 - DAY_MS, T0 + DAY_MS)

        assert [i.user_id for i in instances] == ["user-1"]

    def test_skipped_medications_excluded(self, db: Session):
        taken = create_medication_event(db, taken=True)
        create_medication_event(db, taken=False)
        repo = EventRepository(db)

        events = repo.find_medication_events("user-1", T0 - DAY_MS, T0 + DAY_MS)

        assert [e.id for e in events] == [taken.id]


class TestFlareQueries:
    """Tests for flare and flare history queries."""

    def test_find_flares_all_time(self, db: Session):
        old = create_flare(db, start_date=T0 - 400 * DAY_MS)
        recent = create_flare(db, start_date=T0)
        create_flare(db, user_id="user-2", start_date=T0)
        repo = EventRepository(db)

        assert [f.id for f in repo.find_flares("user-1", None, T0)] == [old.id, recent.id]
        assert [f.id for f in repo.find_flares("user-1", T0 - DAY_MS, T0)] == [recent.id]

    def test_find_flare_events(self, db: Session):
        flare = create_flare(db)
        other = create_flare(db)
        second = create_flare_event(db, flare, timestamp=T0 + 2 * HOUR_MS, severity=7)
        first = create_flare_event(db, flare, timestamp=T0 + HOUR_MS, severity=6)
        create_flare_event(db, other, severity=3)
        repo = EventRepository(db)

        events = repo.find_flare_events("user-1", [flare.id])

        assert [e.id for e in events] == [first.id, second.id]

    def test_find_flare_events_without_ids(self, db: Session):
        assert EventRepository(db).find_flare_events("user-1", []) == []


class TestRepositoryErrors:
    """Database failures surface as RepositoryError."""

    def test_database_error_wrapped(self):
        query = MagicMock()
        query.filter.return_value = query
        query.order_by.return_value = query
        query.all.side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
        session = MagicMock()
        session.query.return_value = query
        repo = EventRepository(session)

        with pytest.raises(RepositoryError) as exc_info:
            repo.find_food_events("user-1", T0, T0 + DAY_MS)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert "food events" in str(exc_info.value)

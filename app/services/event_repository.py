"""Read access to a user's logged events, scoped by user and time range."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.flare import Flare, FlareEvent
from app.models.food_event import FoodEvent
from app.models.medication_event import MedicationEvent
from app.models.symptom_instance import SymptomInstance
from app.models.trigger_event import TriggerEvent

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Event store could not be read."""

    pass


class EventRepository:
    """
    Query layer for the analysis services.

    Every method filters on ``user_id`` and returns rows ordered by timestamp
    (inclusive bounds, epoch ms). Database failures surface as RepositoryError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _in_range(self, model, user_id: str, start_ms: Optional[int], end_ms: int):
        query = self.db.query(model).filter(
            model.user_id == user_id, model.timestamp <= end_ms
        )
        if start_ms is not None:
            query = query.filter(model.timestamp >= start_ms)
        return query.order_by(model.timestamp, model.id)

    def _fetch(self, description: str, query) -> list:
        try:
            return query.all()
        except SQLAlchemyError as e:
            logger.error("Failed to load %s: %s", description, e)
            raise RepositoryError(f"Failed to load {description}") from e

    def find_food_events(self, user_id: str, start_ms: int, end_ms: int) -> List[FoodEvent]:
        return self._fetch(
            "food events", self._in_range(FoodEvent, user_id, start_ms, end_ms)
        )

    def find_trigger_events(
        self, user_id: str, start_ms: int, end_ms: int
    ) -> List[TriggerEvent]:
        return self._fetch(
            "trigger events", self._in_range(TriggerEvent, user_id, start_ms, end_ms)
        )

    def find_medication_events(
        self, user_id: str, start_ms: int, end_ms: int
    ) -> List[MedicationEvent]:
        """Medication doses actually taken (skipped doses are not exposures)."""
        query = self._in_range(MedicationEvent, user_id, start_ms, end_ms).filter(
            MedicationEvent.taken.is_(True)
        )
        return self._fetch("medication events", query)

    def find_symptom_instances(
        self, user_id: str, start_ms: int, end_ms: int
    ) -> List[SymptomInstance]:
        return self._fetch(
            "symptom instances",
            self._in_range(SymptomInstance, user_id, start_ms, end_ms),
        )

    def find_flares(
        self, user_id: str, start_ms: Optional[int], end_ms: int
    ) -> List[Flare]:
        """Flares that started inside the range. ``start_ms=None`` means all time."""
        query = self.db.query(Flare).filter(
            Flare.user_id == user_id, Flare.start_date <= end_ms
        )
        if start_ms is not None:
            query = query.filter(Flare.start_date >= start_ms)
        return self._fetch("flares", query.order_by(Flare.start_date, Flare.id))

    def find_flare_events(
        self, user_id: str, flare_ids: Sequence[int]
    ) -> List[FlareEvent]:
        if not flare_ids:
            return []
        query = (
            self.db.query(FlareEvent)
            .filter(FlareEvent.user_id == user_id, FlareEvent.flare_id.in_(list(flare_ids)))
            .order_by(FlareEvent.timestamp, FlareEvent.id)
        )
        return self._fetch("flare events", query)

"""
Factory functions for creating test data.

These factories create model instances with sensible defaults.
Use db.flush() to get IDs without committing (for transaction rollback).
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import (
    Flare,
    FlareEvent,
    FlareEventType,
    FlareStatus,
    FoodEvent,
    MedicationEvent,
    SymptomInstance,
    TriggerEvent,
)

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# 2023-11-14T22:13:20Z
BASE_TIME_MS = 1_700_000_000_000


# =============================================================================
# Event Factories
# =============================================================================


def create_food_event(
    db: Session,
    user_id: str = "user-1",
    timestamp: int = BASE_TIME_MS,
    food_ids: Optional[List[str]] = None,
    **overrides,
) -> FoodEvent:
    """
    Create a food event.

    Args:
        db: Database session
        user_id: Owner of the event
        timestamp: Epoch ms
        food_ids: Foods in the meal (defaults to a single "food-cheese")
        **overrides: Additional fields to override (portion_map, meal_id, ...)

    Returns:
        Created FoodEvent object
    """
    event = FoodEvent(
        user_id=user_id,
        timestamp=timestamp,
        food_ids=food_ids if food_ids is not None else ["food-cheese"],
        **overrides,
    )
    db.add(event)
    db.flush()
    return event


def create_trigger_event(
    db: Session,
    user_id: str = "user-1",
    timestamp: int = BASE_TIME_MS,
    trigger_id: str = "trigger-stress",
    **overrides,
) -> TriggerEvent:
    event = TriggerEvent(
        user_id=user_id, timestamp=timestamp, trigger_id=trigger_id, **overrides
    )
    db.add(event)
    db.flush()
    return event


def create_medication_event(
    db: Session,
    user_id: str = "user-1",
    timestamp: int = BASE_TIME_MS,
    medication_id: str = "med-ibuprofen",
    taken: bool = True,
    **overrides,
) -> MedicationEvent:
    event = MedicationEvent(
        user_id=user_id,
        timestamp=timestamp,
        medication_id=medication_id,
        taken=taken,
        **overrides,
    )
    db.add(event)
    db.flush()
    return event


def create_symptom_instance(
    db: Session,
    user_id: str = "user-1",
    timestamp: int = BASE_TIME_MS,
    symptom_id: str = "headache",
    severity: int = 5,
    **overrides,
) -> SymptomInstance:
    """Create a symptom instance; ``name`` defaults to the symptom id."""
    overrides.setdefault("name", symptom_id)
    instance = SymptomInstance(
        user_id=user_id,
        timestamp=timestamp,
        symptom_id=symptom_id,
        severity=severity,
        **overrides,
    )
    db.add(instance)
    db.flush()
    return instance


# =============================================================================
# Flare Factories
# =============================================================================


def create_flare(
    db: Session,
    user_id: str = "user-1",
    start_date: int = BASE_TIME_MS,
    initial_severity: int = 5,
    status: FlareStatus = FlareStatus.ACTIVE,
    **overrides,
) -> Flare:
    overrides.setdefault("body_region_id", "left-knee")
    overrides.setdefault("current_severity", initial_severity)
    flare = Flare(
        user_id=user_id,
        start_date=start_date,
        initial_severity=initial_severity,
        status=status,
        **overrides,
    )
    db.add(flare)
    db.flush()
    return flare


def create_flare_event(
    db: Session,
    flare: Flare,
    timestamp: Optional[int] = None,
    severity: Optional[int] = None,
    event_type: FlareEventType = FlareEventType.SEVERITY_UPDATE,
    **overrides,
) -> FlareEvent:
    event = FlareEvent(
        flare_id=flare.id,
        user_id=flare.user_id,
        event_type=event_type,
        timestamp=timestamp if timestamp is not None else flare.start_date,
        severity=severity,
        **overrides,
    )
    db.add(event)
    db.flush()
    return event

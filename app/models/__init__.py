"""
Database models for Flare Insights.

Import all models here so Alembic can detect them for migrations.
"""

from app.database import Base
from app.models.food_event import FoodEvent
from app.models.trigger_event import TriggerEvent
from app.models.medication_event import MedicationEvent
from app.models.symptom_instance import SymptomInstance
from app.models.flare import Flare, FlareEvent, FlareStatus, FlareEventType

__all__ = [
    "Base",
    "FoodEvent",
    "TriggerEvent",
    "MedicationEvent",
    "SymptomInstance",
    "Flare",
    "FlareEvent",
    "FlareStatus",
    "FlareEventType",
]

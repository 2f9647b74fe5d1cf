"""
Pydantic models and closed enumerations for analysis results.

Every result is transient and request-scoped. Models serialize with camelCase
aliases (``windowScores``, ``bestWindow``, ``pValue``) because that is the shape
the timeline and analytics views consume.
"""

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalysisModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Enumerations ---


class ConfidenceLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DoseResponseConfidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INSUFFICIENT = "insufficient"


class TrendDirection(str, enum.Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"  # flare frequency rising
    INSUFFICIENT_DATA = "insufficient-data"


class CorrelationStatus(str, enum.Enum):
    COMPUTED = "computed"
    INSUFFICIENT_DATA = "insufficient-data"


class ExposureType(str, enum.Enum):
    FOOD = "food"
    TRIGGER = "trigger"
    MEDICATION = "medication"


class PatternType(str, enum.Enum):
    FOOD_SYMPTOM = "food-symptom"
    TRIGGER_SYMPTOM = "trigger-symptom"
    MEDICATION_SYMPTOM = "medication-symptom"


class TimelineEventType(str, enum.Enum):
    FOOD = "food"
    TRIGGER = "trigger"
    MEDICATION = "medication"
    SYMPTOM = "symptom"


class TimeRangeOption(str, enum.Enum):
    LAST_30D = "last30d"
    LAST_90D = "last90d"
    LAST_YEAR = "lastYear"
    ALL_TIME = "allTime"


CONFIDENCE_RANK = {
    ConfidenceLevel.HIGH: 3,
    ConfidenceLevel.MEDIUM: 2,
    ConfidenceLevel.LOW: 1,
}


# --- Shared ---


class TimeRange(AnalysisModel):
    start: int  # epoch ms, inclusive
    end: int  # epoch ms, inclusive

    @property
    def duration_ms(self) -> int:
        return self.end - self.start


class RegressionResult(AnalysisModel):
    slope: float = 0.0
    intercept: float = 0.0
    r2: float = 0.0


# --- Correlation ---


class WindowScore(AnalysisModel):
    window: str
    score: Optional[float] = None  # None when there were no exposures
    sample_size: int = 0
    p_value: Optional[float] = None
    hits: int = 0
    baseline_rate: Optional[float] = None


class PortionSeverityPair(AnalysisModel):
    portion: int = Field(ge=1, le=3)  # small=1, medium=2, large=3
    severity: float = Field(ge=0, le=10)


class DoseResponseResult(AnalysisModel):
    slope: float
    intercept: float
    r2: float
    confidence: DoseResponseConfidence
    sample_size: int
    portion_severity_pairs: list[PortionSeverityPair] = Field(default_factory=list)
    message: str


class CorrelationResult(AnalysisModel):
    exposure_type: ExposureType
    food_id: Optional[str] = None
    trigger_id: Optional[str] = None
    symptom_id: str
    window_scores: list[WindowScore]
    best_window: Optional[WindowScore] = None
    sample_size: int
    status: CorrelationStatus
    confidence: Optional[ConfidenceLevel] = None
    consistency: Optional[float] = None
    dose_response: Optional[DoseResponseResult] = None
    computed_at: int

    @property
    def exposure_id(self) -> str:
        return self.food_id if self.exposure_type == ExposureType.FOOD else self.trigger_id

    @property
    def correlation_id(self) -> str:
        return f"{self.exposure_type.value}-{self.exposure_id}-{self.symptom_id}"


class CombinationResult(AnalysisModel):
    food_ids: list[str]
    symptom_id: str
    window: Optional[str] = None
    combination_correlation: float
    individual_max: float
    synergistic: bool
    p_value: Optional[float] = None
    confidence: Optional[ConfidenceLevel] = None
    sample_size: int
    computed_at: int


class EnhancedCorrelationMetadata(AnalysisModel):
    user_id: str
    range: TimeRange
    computed_at: int
    total_pairs: int
    combinations_detected: int
    synergistic_count: int


class EnhancedCorrelationResult(AnalysisModel):
    correlations: list[CorrelationResult]
    combinations: list[CombinationResult]
    metadata: EnhancedCorrelationMetadata


# --- Monthly trend ---


class TrendDataPoint(AnalysisModel):
    month: str  # "YYYY-MM", UTC
    month_timestamp: int
    flare_count: int
    average_severity: Optional[float] = None
    peak_severity: Optional[int] = None


class TrendAnalysis(AnalysisModel):
    data_points: list[TrendDataPoint]
    trend_line: RegressionResult
    trend_direction: TrendDirection
    time_range: TimeRangeOption


# --- Timeline patterns ---


class TimelineEvent(AnalysisModel):
    id: str
    type: TimelineEventType
    timestamp: int
    item_id: Optional[str] = None  # food/trigger/medication/symptom identifier
    severity: Optional[float] = None


class PatternOccurrence(AnalysisModel):
    event1: TimelineEvent  # exposure
    event2: TimelineEvent  # symptom
    timestamp: int


class DetectedPattern(AnalysisModel):
    id: str
    type: PatternType
    description: str
    frequency: int
    confidence: ConfidenceLevel
    occurrences: list[PatternOccurrence]
    correlation_id: Optional[str] = None
    coefficient: float
    lag_hours: float
    window: str


class DayOfWeekPattern(AnalysisModel):
    day_of_week: int  # 0 = Sunday
    day_name: str
    avg_symptom_severity: float
    occurrence_count: int
    is_significant: bool


class TimelinePatternsResult(AnalysisModel):
    patterns: list[DetectedPattern]
    day_of_week: list[DayOfWeekPattern]

from sqlalchemy import BigInteger, Column, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class FlareStatus(str, enum.Enum):
    """Lifecycle status cached on the flare from its latest history event."""
    ACTIVE = "active"
    IMPROVING = "improving"
    WORSENING = "worsening"
    RESOLVED = "resolved"


class FlareEventType(str, enum.Enum):
    """Kinds of append-only flare history records."""
    CREATED = "created"
    SEVERITY_UPDATE = "severity_update"
    TREND_CHANGE = "trend_change"
    INTERVENTION = "intervention"
    RESOLVED = "resolved"


class Flare(Base):
    """A tracked period of elevated symptom activity in one body region."""

    __tablename__ = "flares"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    body_region_id = Column(String(64), nullable=False)
    initial_severity = Column(Integer, nullable=False)  # 1-10 scale
    current_severity = Column(Integer, nullable=False)  # cached from latest event
    start_date = Column(BigInteger, nullable=False)  # epoch ms
    end_date = Column(BigInteger, nullable=True)
    status = Column(Enum(FlareStatus), nullable=False, default=FlareStatus.ACTIVE)

    # Relationships
    events = relationship(
        "FlareEvent", back_populates="flare", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_flares_user_start_date", "user_id", "start_date"),
    )

    def __repr__(self):
        return f"<Flare(id={self.id}, region={self.body_region_id}, status={self.status})>"


class FlareEvent(Base):
    """Append-only history record for a flare. Never updated in place."""

    __tablename__ = "flare_events"

    id = Column(Integer, primary_key=True)
    flare_id = Column(
        Integer, ForeignKey("flares.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(64), nullable=False)
    event_type = Column(Enum(FlareEventType), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    severity = Column(Integer, nullable=True)  # present on created/severity_update
    trend = Column(String(20), nullable=True)  # improving, stable, worsening
    notes = Column(Text, nullable=True)

    # Relationships
    flare = relationship("Flare", back_populates="events")

    __table_args__ = (
        Index("idx_flare_events_flare_id", "flare_id"),
        Index("idx_flare_events_user_id", "user_id"),
    )

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text

from app.database import Base


class TriggerEvent(Base):
    """Exposure to an environmental or lifestyle trigger (stress, heat, poor sleep)."""

    __tablename__ = "trigger_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    trigger_id = Column(String(64), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    intensity = Column(String(20), nullable=True)  # low, medium, high
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_trigger_events_user_timestamp", "user_id", "timestamp"),
    )

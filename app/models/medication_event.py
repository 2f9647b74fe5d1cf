from sqlalchemy import BigInteger, Boolean, Column, Index, Integer, String

from app.database import Base


class MedicationEvent(Base):
    """A scheduled or ad-hoc medication dose."""

    __tablename__ = "medication_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    medication_id = Column(String(64), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    taken = Column(Boolean, nullable=False, default=True)
    dosage = Column(String(64), nullable=True)

    __table_args__ = (
        Index("idx_medication_events_user_timestamp", "user_id", "timestamp"),
    )

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text

from app.database import Base


class SymptomInstance(Base):
    """A single logged occurrence of a symptom."""

    __tablename__ = "symptom_instances"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    symptom_id = Column(String(64), nullable=True)
    name = Column(String(255), nullable=False)  # e.g. "headache", "bloating"
    severity = Column(Integer, nullable=False)  # 1-10 scale
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_symptom_instances_user_timestamp", "user_id", "timestamp"),
        Index("idx_symptom_instances_name", "name"),
    )

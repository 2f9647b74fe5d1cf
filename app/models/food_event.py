from sqlalchemy import BigInteger, Column, Index, Integer, JSON, String, Text

from app.database import Base


class FoodEvent(Base):
    """A logged meal or snack; one event may carry several foods."""

    __tablename__ = "food_events"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
    meal_id = Column(String(64), nullable=True)  # groups events logged as one meal
    meal_type = Column(String(20), nullable=True)  # breakfast, lunch, dinner, snack
    food_ids = Column(JSON, nullable=False, default=list)  # ["food-cheese", "food-wine"]
    portion_map = Column(JSON, nullable=True)  # {"food-cheese": "large"}
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_food_events_user_timestamp", "user_id", "timestamp"),
    )

    def __repr__(self):
        return f"<FoodEvent(id={self.id}, user_id={self.user_id}, foods={self.food_ids})>"

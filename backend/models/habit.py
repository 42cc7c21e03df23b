from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime
from config import DEFAULT_HABIT_COLOR
from database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)  # auth user uuid
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), default=DEFAULT_HABIT_COLOR)  # e.g. "#6366f1"
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

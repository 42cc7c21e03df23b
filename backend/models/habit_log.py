from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from database import Base


class HabitLog(Base):
    __tablename__ = "habit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    habit_id = Column(Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)  # completed/missed/skipped

    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_date"),
    )

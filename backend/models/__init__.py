# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.habit import Habit
from models.habit_log import HabitLog
from models.task import Task

__all__ = [
    "Habit",
    "HabitLog",
    "Task",
]

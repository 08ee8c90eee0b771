"""Study task engine."""

from .coach import build_coach_messages
from .tasks import StudyTasks

__all__ = ["StudyTasks", "build_coach_messages"]

"""Study material and generated artifact models."""

from .schema import (
    ChatMessage,
    CoachMessage,
    Concept,
    ContextExplanation,
    Difficulty,
    Exam,
    ExplanationLevel,
    Flashcard,
    Goal,
    GraphLink,
    GraphNode,
    KnowledgeGraph,
    LearningMaterial,
    LearningPath,
    PaperSummary,
    PlanItem,
    PotentialQuestion,
    Question,
    QuestionExplanation,
    ScheduleBlock,
    Source,
    SourceMaterial,
    StudyContext,
    StudySchedule,
    Word,
)

__all__ = [
    "ChatMessage",
    "CoachMessage",
    "Concept",
    "ContextExplanation",
    "Difficulty",
    "Exam",
    "ExplanationLevel",
    "Flashcard",
    "Goal",
    "GraphLink",
    "GraphNode",
    "KnowledgeGraph",
    "LearningMaterial",
    "LearningPath",
    "PaperSummary",
    "PlanItem",
    "PotentialQuestion",
    "Question",
    "QuestionExplanation",
    "ScheduleBlock",
    "Source",
    "SourceMaterial",
    "StudyContext",
    "StudySchedule",
    "Word",
]

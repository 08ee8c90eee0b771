"""Pydantic models for study materials and generated artifacts."""

import math
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ExplanationLevel = Literal["eli5", "beginner", "standard", "graduate", "professor"]
Difficulty = Literal["easy", "medium", "hard"]


def _as_text(value: Any) -> Any:
    """Coerce scalar model output (numbers, booleans) into text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _as_text_list(value: Any) -> Any:
    """Accept a single string where a list of strings is expected."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [_as_text(v) for v in value]
    return value


class ArtifactModel(BaseModel):
    """Base for shapes returned by the model; unknown keys are kept."""

    model_config = ConfigDict(extra="allow")


class SourceMaterial(BaseModel):
    """A unit of user-provided study text."""

    id: Optional[str] = None
    title: str = "Untitled"
    content: str = ""
    subject: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("title", "content", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Question(ArtifactModel):
    """Quiz, exam or word-map question."""

    question: str
    type: str = "short_answer"  # multiple_choice, short_answer, true_false, essay, code
    options: list[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    points: Optional[Union[int, float]] = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def answer_as_text(cls, v: Any) -> Any:
        if isinstance(v, list):
            return ", ".join(str(item) for item in v)
        return _as_text(v)

    @field_validator("options", mode="before")
    @classmethod
    def options_as_list(cls, v: Any) -> Any:
        return _as_text_list(v)


class Flashcard(ArtifactModel):
    """Front/back card for spaced repetition."""

    question: str
    answer: str
    difficulty: str = "medium"
    key_concepts: list[str] = Field(default_factory=list)

    @field_validator("answer", mode="before")
    @classmethod
    def answer_as_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("key_concepts", mode="before")
    @classmethod
    def concepts_as_list(cls, v: Any) -> Any:
        return _as_text_list(v)


class GraphNode(ArtifactModel):
    id: str
    label: str
    type: Optional[str] = None
    mastery_level: Optional[Union[int, float, str]] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v: Any) -> Any:
        return _as_text(v)


class GraphLink(ArtifactModel):
    source: str
    target: str
    relationship_type: Optional[str] = None

    @field_validator("source", "target", mode="before")
    @classmethod
    def endpoint_as_text(cls, v: Any) -> Any:
        return _as_text(v)


class KnowledgeGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)


class Exam(BaseModel):
    """Generated exam. Difficulty and duration are echoed from the request."""

    questions: list[Question] = Field(default_factory=list)
    predicted_difficulty: Optional[str] = None
    duration_minutes: Optional[int] = None


class Goal(BaseModel):
    """A study goal with the materials that support it."""

    title: str = ""
    subject: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    materials: list[SourceMaterial] = Field(default_factory=list)

    @field_validator("priority", "deadline", mode="before")
    @classmethod
    def scalar_as_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("materials", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class PlanItem(ArtifactModel):
    """One step of a content-based study plan."""

    order: int
    topic: str
    description: str = ""
    material: str = ""
    goal: str = ""


class ScheduleBlock(ArtifactModel):
    """One time slot of a daily study schedule."""

    time: str = ""
    activity: str
    subject: str = ""
    duration_minutes: Optional[int] = None
    priority: Optional[str] = None

    @field_validator("time", "priority", mode="before")
    @classmethod
    def scalar_as_text(cls, v: Any) -> Any:
        return _as_text(v)


class StudySchedule(BaseModel):
    schedule: list[ScheduleBlock] = Field(default_factory=list)


class Concept(ArtifactModel):
    name: str
    description: str = ""
    order: int = 0


class LearningMaterial(ArtifactModel):
    title: str
    content: str = ""
    order: int = 0


class LearningPath(BaseModel):
    """Prerequisite concepts and materials working back from a problem."""

    concepts: list[Concept] = Field(default_factory=list)
    materials: list[LearningMaterial] = Field(default_factory=list)


class Source(ArtifactModel):
    """A citation candidate."""

    title: str
    type: str = "website"  # textbook, paper, video, website
    url: Optional[str] = None
    relevance_score: Optional[Union[int, float, str]] = None


class PotentialQuestion(ArtifactModel):
    question: str
    type: Optional[str] = None
    answer: Optional[str] = None

    @field_validator("answer", mode="before")
    @classmethod
    def answer_as_text(cls, v: Any) -> Any:
        return _as_text(v)


class PaperSummary(BaseModel):
    summary: str = ""
    key_contributions: list[str] = Field(default_factory=list)
    contrasting_viewpoints: list[str] = Field(default_factory=list)
    potential_questions: list[PotentialQuestion] = Field(default_factory=list)

    @field_validator("key_contributions", "contrasting_viewpoints", mode="before")
    @classmethod
    def text_list(cls, v: Any) -> Any:
        return _as_text_list(v)


class Word(ArtifactModel):
    """Key term extracted from the materials; frequency is an importance score 1-100."""

    word: str
    frequency: int = 1
    category: str = "term"
    related_materials: list[str] = Field(default_factory=list)

    @field_validator("frequency", mode="before")
    @classmethod
    def clamp_frequency(cls, v: Any) -> Any:
        # Non-finite floats are left for pydantic to reject
        if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v):
            return max(1, min(100, int(v)))
        return v

    @field_validator("related_materials", mode="before")
    @classmethod
    def materials_as_list(cls, v: Any) -> Any:
        return _as_text_list(v)


class ContextExplanation(BaseModel):
    """Explanation with a percentage-style source breakdown."""

    explanation: str
    source_breakdown: str = ""


class QuestionExplanation(BaseModel):
    """Explanation with the ids of the notes it drew on."""

    explanation: str
    used_note_ids: list[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class StudyContext(BaseModel):
    """What the assistant knows about the student for a chat turn."""

    materials: list[SourceMaterial] = Field(default_factory=list)
    concepts: list[dict[str, Any]] = Field(default_factory=list)
    sessions: list[dict[str, Any]] = Field(default_factory=list)
    exams: list[dict[str, Any]] = Field(default_factory=list)


class CoachMessage(BaseModel):
    type: Literal["motivation", "feedback", "suggestion"]
    content: str
    timestamp: str

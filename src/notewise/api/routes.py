"""Task endpoints.

Each endpoint checks that its required fields are present, calls one task
function and serializes the result. Task functions never raise, so the
only error responses here are 400s for missing or malformed input.
"""

import base64
import binascii
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..artifacts import ChatMessage, Difficulty, ExplanationLevel, Goal, SourceMaterial, StudyContext
from ..engine import StudyTasks

logger = logging.getLogger(__name__)


class RequestModel(BaseModel):
    """Request body accepting camelCase keys (``userMaterials``) as well as snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExplainRequest(RequestModel):
    concept: str = ""
    context: str = ""
    level: ExplanationLevel = "standard"
    user_materials: list[SourceMaterial] = Field(default_factory=list)


class ExplainQuestionRequest(RequestModel):
    question: str = ""
    materials: list[SourceMaterial] = Field(default_factory=list)


class ContentRequest(RequestModel):
    content: str = ""


class QuizRequest(ContentRequest):
    num_questions: int = Field(default=5, ge=1, le=50)


class FlashcardsRequest(ContentRequest):
    num_cards: int = Field(default=10, ge=1, le=100)


class MaterialsRequest(RequestModel):
    materials: list[str] = Field(default_factory=list)


class ExamRequest(MaterialsRequest):
    duration: int = Field(default=60, ge=5, le=480)
    difficulty: Difficulty = "medium"


class NotesRequest(RequestModel):
    image_base64: str = ""
    mime_type: str = "image/jpeg"


class ScheduleRequest(RequestModel):
    goals: list[Goal] = Field(default_factory=list)


class StudyScheduleRequest(RequestModel):
    subjects: list[Any] = Field(default_factory=list)
    deadlines: list[Any] = Field(default_factory=list)
    performance: dict[str, Any] = Field(default_factory=dict)
    energy_level: int = Field(default=5, ge=1, le=10)


class CoachRequest(RequestModel):
    streak: int = 0
    recent_sessions: list[dict[str, Any]] = Field(default_factory=list)
    recent_exams: list[dict[str, Any]] = Field(default_factory=list)
    weak_concepts: list[dict[str, Any]] = Field(default_factory=list)
    strong_concepts: list[dict[str, Any]] = Field(default_factory=list)


class ReverseLearningRequest(RequestModel):
    problem: str = ""
    subject: str = ""


class ResearchRequest(RequestModel):
    paper_content: str = ""


class WordMapRequest(RequestModel):
    action: str = ""
    materials: Optional[list[SourceMaterial]] = None
    word: str = ""


class ChatRequest(RequestModel):
    message: str = ""
    conversation_history: list[ChatMessage] = Field(default_factory=list)
    user_context: Optional[StudyContext] = None


def _decode_image(data: str) -> bytes:
    """Decode base64 image data, accepting a ``data:`` URL prefix."""
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("[API] Rejected notes upload: image is not valid base64")
        raise HTTPException(400, "Image must be base64 encoded")


def create_router(tasks: StudyTasks) -> APIRouter:
    """Create the task API router."""
    router = APIRouter()

    @router.get("/health")
    async def health():
        """Health check; reports whether the model backend is configured."""
        return {"status": "ok", "service": "notewise", "ai_configured": bool(tasks.llm.configured)}

    @router.post("/api/explain")
    async def explain(body: ExplainRequest):
        if not body.concept.strip():
            raise HTTPException(400, "Concept is required")
        return await tasks.explain_concept(body.concept, body.context, body.level, body.user_materials)

    @router.post("/api/explain/question")
    async def explain_question(body: ExplainQuestionRequest):
        if not body.question.strip():
            raise HTTPException(400, "Question is required")
        return await tasks.explain_question(body.question, body.materials)

    @router.post("/api/quiz")
    async def quiz(body: QuizRequest):
        if not body.content.strip():
            raise HTTPException(400, "Content is required")
        questions = await tasks.generate_quiz(body.content, body.num_questions)
        return {"questions": questions}

    @router.post("/api/flashcards")
    async def flashcards(body: FlashcardsRequest):
        if not body.content.strip():
            raise HTTPException(400, "Content is required")
        cards = await tasks.generate_flashcards(body.content, body.num_cards)
        return {"flashcards": cards}

    @router.post("/api/knowledge-graph")
    async def knowledge_graph(body: MaterialsRequest):
        if not body.materials:
            raise HTTPException(400, "Materials array is required")
        return await tasks.build_knowledge_graph(body.materials)

    @router.post("/api/exam")
    async def exam(body: ExamRequest):
        if not body.materials:
            raise HTTPException(400, "Materials array is required")
        result = await tasks.generate_exam(body.materials, body.duration, body.difficulty)
        return result.model_dump(exclude_none=True)

    @router.post("/api/notes")
    async def clean_notes(body: NotesRequest):
        if not body.image_base64:
            raise HTTPException(400, "Image is required")
        image = _decode_image(body.image_base64)
        cleaned_text = await tasks.clean_handwritten_image(image, body.mime_type)
        return {"cleaned_text": cleaned_text}

    @router.post("/api/schedule")
    async def schedule(body: ScheduleRequest):
        if not body.goals:
            raise HTTPException(400, "Goals are required")
        plan = await tasks.generate_content_schedule(body.goals)
        return {"plan": plan}

    @router.post("/api/study-schedule")
    async def study_schedule(body: StudyScheduleRequest):
        if not body.subjects:
            raise HTTPException(400, "Subjects are required")
        return await tasks.generate_study_schedule(
            body.subjects, body.deadlines, body.performance, body.energy_level
        )

    @router.post("/api/coach")
    async def coach(body: CoachRequest):
        messages = await tasks.coach_messages(
            streak=body.streak,
            recent_sessions=body.recent_sessions,
            recent_exams=body.recent_exams,
            weak_concepts=body.weak_concepts,
            strong_concepts=body.strong_concepts,
        )
        return {"messages": messages}

    @router.post("/api/reverse-learning")
    async def reverse_learning(body: ReverseLearningRequest):
        if not body.problem.strip() or not body.subject.strip():
            raise HTTPException(400, "Problem and subject are required")
        return await tasks.reverse_learning_path(body.problem, body.subject)

    @router.post("/api/citations")
    async def citations(body: ContentRequest):
        if not body.content.strip():
            raise HTTPException(400, "Content is required")
        sources = await tasks.find_citations(body.content)
        return {"sources": sources}

    @router.post("/api/research")
    async def research(body: ResearchRequest):
        if not body.paper_content.strip():
            raise HTTPException(400, "Paper content is required")
        return await tasks.summarize_paper(body.paper_content)

    @router.post("/api/word-map")
    async def word_map(body: WordMapRequest):
        if body.action == "extract":
            if not body.materials:
                raise HTTPException(400, "Materials are required")
            words = await tasks.extract_key_words(body.materials)
            return {"words": words}

        if body.action == "generate-questions":
            if not body.word.strip() or body.materials is None:
                raise HTTPException(400, "Word and materials are required")
            questions = await tasks.questions_for_word(body.word, body.materials)
            return {"questions": questions}

        raise HTTPException(400, "Invalid action")

    @router.post("/api/chat")
    async def chat(body: ChatRequest):
        if not body.message.strip():
            raise HTTPException(400, "Message is required")
        response = await tasks.chat(body.message, body.conversation_history, body.user_context)
        return {"response": response}

    return router

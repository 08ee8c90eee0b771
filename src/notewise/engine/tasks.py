"""Task functions: build prompt -> invoke model -> parse and post-process.

Every public coroutine on :class:`StudyTasks` returns a well-formed result.
Backend absence, backend failure and malformed output all degrade to the
task's empty default or an explanatory placeholder string.
"""

import logging
from typing import Any, Optional, Sequence

from ..artifacts import (
    ChatMessage,
    CoachMessage,
    ContextExplanation,
    Exam,
    Flashcard,
    Goal,
    GraphLink,
    GraphNode,
    KnowledgeGraph,
    LearningPath,
    PaperSummary,
    PlanItem,
    Question,
    QuestionExplanation,
    ScheduleBlock,
    Source,
    SourceMaterial,
    StudyContext,
    StudySchedule,
    Word,
)
from ..llm import prompts
from ..llm.attribution import (
    estimate_source_breakdown,
    infer_used_note_ids,
    parse_note_ids,
    split_notes_marker,
    split_source_marker,
)
from ..llm.client import InvocationResult, OpenAIClient, PromptSpec
from ..llm.formatting import normalize_explanation
from ..llm.parsing import parse_json_object, validate_items, validate_object
from .coach import build_coach_messages

logger = logging.getLogger(__name__)

EXPLANATION_NOT_CONFIGURED = "OpenAI API key not configured. Please add your API key to continue."
EXPLANATION_FAILED = "Error generating explanation. Please check your API key and try again."
EXPLANATION_EMPTY = "Unable to generate explanation."

NOTES_NOT_CONFIGURED = "OpenAI API key not configured."
NOTES_FAILED = "Error processing handwritten notes."
NOTES_EMPTY = "Unable to process image."

DIGEST_NOT_CONFIGURED = "OpenAI API key not configured."
DIGEST_FAILED = "Error generating weekly digest."
DIGEST_EMPTY = "Unable to generate digest."

CHAT_NOT_CONFIGURED = "OpenAI API key not configured. Please add your API key to use the assistant."
CHAT_FAILED = "Sorry, I couldn't process that message right now. Please try again."
CHAT_EMPTY = "Unable to generate a response."


def _text_or_placeholder(
    result: InvocationResult,
    not_configured: str,
    failed: str,
    empty: str,
) -> tuple[str, bool]:
    """Pick the text to show for a free-text call. Second value is True for real output."""
    if result.not_configured:
        return not_configured, False
    if not result.ok:
        return failed, False
    if not (result.output or "").strip():
        return empty, False
    return result.output, True


class StudyTasks:
    """Orchestrates every study task against an injected model client."""

    def __init__(self, llm: OpenAIClient):
        self.llm = llm

    async def _invoke_json(self, spec: PromptSpec, task: str) -> dict[str, Any]:
        """Run a JSON-mode prompt and return the parsed object (``{}`` on any failure)."""
        logger.info(f"[TASK] {task}: calling model")
        result = await self.llm.invoke(spec)
        if not result.ok:
            logger.warning(f"[TASK] {task}: {result.error.kind} ({result.error.message}), returning default")
            return {}
        data = parse_json_object(result.output)
        if not data:
            logger.warning(f"[TASK] {task}: no usable JSON in response, returning default")
        return data

    async def _invoke_text(self, spec: PromptSpec, task: str) -> InvocationResult:
        logger.info(f"[TASK] {task}: calling model")
        result = await self.llm.invoke(spec)
        if not result.ok:
            logger.warning(f"[TASK] {task}: {result.error.kind} ({result.error.message})")
        return result

    async def explain_concept(
        self,
        concept: str,
        context: str = "",
        level: str = "standard",
        materials: Sequence[SourceMaterial] = (),
    ) -> ContextExplanation:
        """Explain a concept at the given level with a percentage source breakdown."""
        spec = prompts.build_explanation_prompt(concept, context, level, materials)
        result = await self._invoke_text(spec, "explain")

        text, produced = _text_or_placeholder(
            result, EXPLANATION_NOT_CONFIGURED, EXPLANATION_FAILED, EXPLANATION_EMPTY
        )
        if not result.ok:
            return ContextExplanation(explanation=text, source_breakdown="")
        if not produced:
            return ContextExplanation(
                explanation=text,
                source_breakdown=estimate_source_breakdown(materials),
            )

        body, breakdown = split_source_marker(text)
        if breakdown is None:
            logger.debug("[TASK] explain: no Source line in response, estimating breakdown")
            breakdown = estimate_source_breakdown(materials)

        return ContextExplanation(
            explanation=normalize_explanation(body),
            source_breakdown=breakdown,
        )

    async def explain_question(
        self,
        question: str,
        materials: Sequence[SourceMaterial] = (),
    ) -> QuestionExplanation:
        """Answer a question and report which of the supplied notes were used."""
        spec = prompts.build_question_explanation_prompt(question, materials)
        result = await self._invoke_text(spec, "explain-question")

        text, produced = _text_or_placeholder(
            result, EXPLANATION_NOT_CONFIGURED, EXPLANATION_FAILED, EXPLANATION_EMPTY
        )
        if not produced:
            return QuestionExplanation(explanation=text, used_note_ids=[])

        body, payload = split_notes_marker(text)
        if payload is None:
            logger.debug("[TASK] explain-question: no NOTES_USED line, inferring from overlap")
            used = infer_used_note_ids(question, materials)
        else:
            used = parse_note_ids(payload, materials)

        return QuestionExplanation(
            explanation=normalize_explanation(body),
            used_note_ids=used,
        )

    async def generate_quiz(self, content: str, num_questions: int = 5) -> list[Question]:
        data = await self._invoke_json(prompts.build_quiz_prompt(content, num_questions), "quiz")
        return validate_items(data, "questions", Question)

    async def generate_flashcards(self, content: str, num_cards: int = 10) -> list[Flashcard]:
        data = await self._invoke_json(prompts.build_flashcards_prompt(content, num_cards), "flashcards")
        return validate_items(data, "flashcards", Flashcard)

    async def build_knowledge_graph(self, materials: Sequence[str]) -> KnowledgeGraph:
        data = await self._invoke_json(prompts.build_knowledge_graph_prompt(materials), "knowledge-graph")
        return KnowledgeGraph(
            nodes=validate_items(data, "nodes", GraphNode),
            links=validate_items(data, "links", GraphLink),
        )

    async def generate_exam(
        self,
        materials: Sequence[str],
        duration: int = 60,
        difficulty: str = "medium",
    ) -> Exam:
        """Generate an exam; on failure only an empty question list is returned."""
        spec = prompts.build_exam_prompt(materials, duration, difficulty)
        data = await self._invoke_json(spec, "exam")
        if not data:
            return Exam()
        return Exam(
            questions=validate_items(data, "questions", Question),
            predicted_difficulty=difficulty,
            duration_minutes=duration,
        )

    async def clean_handwritten_image(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        """Turn a photo of handwritten notes into structured text."""
        logger.info(f"[TASK] clean-notes: calling vision model ({len(image)} bytes)")
        result = await self.llm.invoke_vision(prompts.build_handwriting_prompt(), image, mime_type)
        if not result.ok:
            logger.warning(f"[TASK] clean-notes: {result.error.kind} ({result.error.message})")

        text, produced = _text_or_placeholder(result, NOTES_NOT_CONFIGURED, NOTES_FAILED, NOTES_EMPTY)
        return normalize_explanation(text) if produced else text

    async def generate_content_schedule(self, goals: Sequence[Goal]) -> list[PlanItem]:
        """Order the goals' material topics into a learning sequence."""
        data = await self._invoke_json(prompts.build_content_schedule_prompt(goals), "schedule")
        items = validate_items(data, "plan", PlanItem)
        return sorted(items, key=lambda item: item.order)

    async def generate_study_schedule(
        self,
        subjects: Sequence[Any],
        deadlines: Sequence[Any],
        performance: Any,
        energy_level: int,
    ) -> StudySchedule:
        spec = prompts.build_study_schedule_prompt(subjects, deadlines, performance, energy_level)
        data = await self._invoke_json(spec, "study-schedule")
        return StudySchedule(schedule=validate_items(data, "schedule", ScheduleBlock))

    async def generate_weekly_digest(
        self,
        progress: Any,
        weak_areas: Sequence[str],
        strong_areas: Sequence[str],
    ) -> str:
        spec = prompts.build_weekly_digest_prompt(progress, weak_areas, strong_areas)
        result = await self._invoke_text(spec, "digest")
        text, produced = _text_or_placeholder(result, DIGEST_NOT_CONFIGURED, DIGEST_FAILED, DIGEST_EMPTY)
        return normalize_explanation(text) if produced else text

    async def coach_messages(
        self,
        streak: int = 0,
        recent_sessions: Sequence[dict] = (),
        recent_exams: Sequence[dict] = (),
        weak_concepts: Sequence[dict] = (),
        strong_concepts: Sequence[dict] = (),
    ) -> list[CoachMessage]:
        """Compose coach messages, including one line from an AI weekly digest."""
        weak_areas = [str(c["name"]) for c in weak_concepts if c.get("name")]
        strong_areas = [str(c["name"]) for c in strong_concepts if c.get("name")]
        progress = {
            "streak": streak,
            "recentSessions": len(recent_sessions),
            "recentExams": len(recent_exams),
            "weakAreas": weak_areas,
            "strongAreas": strong_areas,
        }

        digest: Optional[str] = await self.generate_weekly_digest(progress, weak_areas, strong_areas)
        if digest in (DIGEST_NOT_CONFIGURED, DIGEST_FAILED, DIGEST_EMPTY):
            digest = None

        return build_coach_messages(streak, recent_exams, weak_concepts, digest)

    async def reverse_learning_path(self, problem: str, subject: str) -> LearningPath:
        data = await self._invoke_json(prompts.build_reverse_learning_prompt(problem, subject), "reverse-learning")
        path = validate_object(data, LearningPath)
        return LearningPath(
            concepts=sorted(path.concepts, key=lambda c: c.order),
            materials=sorted(path.materials, key=lambda m: m.order),
        )

    async def find_citations(self, content: str) -> list[Source]:
        data = await self._invoke_json(prompts.build_citations_prompt(content), "citations")
        return validate_items(data, "sources", Source)

    async def summarize_paper(self, paper: str) -> PaperSummary:
        data = await self._invoke_json(prompts.build_paper_summary_prompt(paper), "research")
        return validate_object(data, PaperSummary)

    async def extract_key_words(self, materials: Sequence[SourceMaterial]) -> list[Word]:
        data = await self._invoke_json(prompts.build_word_extraction_prompt(materials), "word-map")
        return validate_items(data, "words", Word)

    async def questions_for_word(self, word: str, materials: Sequence[SourceMaterial]) -> list[Question]:
        """Questions about one term, drawn only from materials that mention it."""
        needle = word.lower()
        relevant = [
            m for m in materials
            if needle in (m.content or "").lower() or needle in (m.title or "").lower()
        ]
        if not relevant:
            logger.info(f"[TASK] word-questions: no material mentions '{word}', skipping model call")
            return []

        data = await self._invoke_json(prompts.build_word_questions_prompt(word, relevant), "word-questions")
        return validate_items(data, "questions", Question)

    async def chat(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        context: Optional[StudyContext] = None,
    ) -> str:
        """Reply to a student's chat message given the conversation and study context."""
        spec = prompts.build_chat_prompt(message, history, context)
        result = await self._invoke_text(spec, "chat")
        text, produced = _text_or_placeholder(result, CHAT_NOT_CONFIGURED, CHAT_FAILED, CHAT_EMPTY)
        return normalize_explanation(text) if produced else text

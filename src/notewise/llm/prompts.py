"""System prompts and prompt builders for every study task.

Each ``build_*`` function is pure: it formats caller content into a
:class:`PromptSpec` with the task's system directive, response format and
fixed temperature.
"""

import json
from typing import Any, Iterable, Sequence

from ..artifacts import ChatMessage, Goal, SourceMaterial, StudyContext
from ..utils import truncate
from .client import PromptSpec

MATERIAL_SEPARATOR = "\n\n---\n\n"
SCHEDULE_CONTENT_LIMIT = 500
CHAT_MATERIAL_LIMIT = 1500

# Extraction and analysis tasks run cooler than generative ones
TEMPERATURE_OCR = 0.3
TEMPERATURE_ANALYSIS = 0.5
TEMPERATURE_PATHING = 0.6
TEMPERATURE_GENERATIVE = 0.7
TEMPERATURE_MOTIVATIONAL = 0.8

LEVEL_PROMPTS = {
    "eli5": "Explain this like I'm 5 years old. Use simple words, analogies, and examples a child would understand.",
    "beginner": "Explain this for someone who is just starting to learn. Use simple language and provide clear examples.",
    "standard": "Explain this at a standard student level. Include technical terms but define them clearly.",
    "graduate": "Explain this at a graduate level. Assume familiarity with the field and use appropriate terminology.",
    "professor": "Explain this at a professor/technical expert level. Include deep technical details, mathematical formulations, and advanced concepts.",
}

EXPLANATION_SYSTEM_PROMPT = """You are an expert tutor. {level_prompt}

IMPORTANT INSTRUCTIONS:
1. Use the student's study materials (if provided) as the PRIMARY source for explaining the concept
2. Supplement with your general knowledge when the student's materials don't fully cover the concept
3. Prioritize information from the student's materials to help them connect with what they've already studied
4. When using information from the student's materials, reference them naturally (e.g., "As mentioned in your notes...", "Based on your study materials...")
5. After your explanation, provide a source breakdown showing what percentage came from the student's materials vs. online/general knowledge"""

QUESTION_EXPLANATION_SYSTEM_PROMPT = """You are an expert tutor answering a student's question.

IMPORTANT INSTRUCTIONS:
1. Answer using the student's notes (if provided) as the PRIMARY source, supplemented with your general knowledge
2. Format the answer in markdown: short paragraphs, headings for sections, and bullet lists where they help
3. Refer to the notes naturally (e.g., "Your notes on ... point out ...")
4. End your answer with exactly one line of the form:
NOTES_USED: <comma-separated note ids>
Only list ids that appear in the notes you were given. If you used none of them, write: NOTES_USED: none"""

QUIZ_SYSTEM_PROMPT = "You are an expert quiz generator. Create educational quizzes from study materials."

FLASHCARDS_SYSTEM_PROMPT = (
    "You are an expert flashcard generator. Create effective flashcards for spaced repetition learning."
)

KNOWLEDGE_GRAPH_SYSTEM_PROMPT = (
    "You are an expert at building knowledge graphs. "
    "Analyze study materials and extract concepts and their relationships."
)

EXAM_SYSTEM_PROMPT = (
    "You are an expert exam generator. "
    "Create comprehensive exams that test understanding across all study materials."
)

HANDWRITING_SYSTEM_PROMPT = (
    "You are an expert at converting handwritten notes into clean, structured text "
    "with proper headings, summaries, and highlighted definitions."
)

CONTENT_SCHEDULE_SYSTEM_PROMPT = (
    "You are an expert study planner. Create a content-based study plan that organizes topics "
    "and concepts from the provided materials in a logical learning order. Focus on what content "
    "to study, not when to study it. Organize topics by prerequisites and learning progression."
)

STUDY_SCHEDULE_SYSTEM_PROMPT = (
    "You are an expert study planner. Create personalized micro-schedules based on deadlines, "
    "difficulty, performance, and energy levels."
)

WEEKLY_DIGEST_SYSTEM_PROMPT = (
    "You are a motivational study coach. "
    "Create weekly progress summaries that are encouraging and actionable."
)

REVERSE_LEARNING_SYSTEM_PROMPT = (
    "You are an expert at reverse engineering learning paths. "
    "Given a problem, identify all prerequisite concepts and create a study plan."
)

CITATIONS_SYSTEM_PROMPT = (
    "You are an expert at finding academic sources. Identify potential citations, textbooks, "
    "research papers, videos, and websites related to the content."
)

PAPER_SUMMARY_SYSTEM_PROMPT = (
    "You are an expert research paper analyzer. "
    "Extract key contributions, summarize findings, and generate potential exam questions."
)

WORD_EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at extracting key terms and concepts from study materials. "
    "Identify important words, concepts, and topics that students should focus on."
)

WORD_QUESTIONS_SYSTEM_PROMPT = (
    "You are an expert quiz generator. Create educational questions focused on a specific term or concept."
)

CHAT_SYSTEM_PROMPT = """You are a friendly, knowledgeable study assistant inside a study-companion app.

Use the student's study context (materials, concepts, recent sessions and exam results) when it is relevant.
Keep answers focused and practical. Use markdown with short paragraphs and bullet lists where they help.
If the student asks about something their materials do not cover, answer from general knowledge and say so."""


def _join(parts: Iterable[str]) -> str:
    return MATERIAL_SEPARATOR.join(parts)


def _format_material(material: SourceMaterial) -> str:
    return f"{material.title or 'Untitled'}\n\n{material.content}"


def build_explanation_prompt(
    concept: str,
    context: str,
    level: str,
    materials: Sequence[SourceMaterial] = (),
) -> PromptSpec:
    """Explanation with a trailing ``Source:`` breakdown line."""
    level_prompt = LEVEL_PROMPTS.get(level, LEVEL_PROMPTS["standard"])

    materials_block = ""
    if materials:
        materials_block = "\n\nSTUDENT'S STUDY MATERIALS:\n" + _join(
            f"Title: {m.title}\nSubject: {m.subject or 'General'}\nContent: {m.content}"
            for m in materials
        )

    payload = (
        f"Concept to explain: {concept}\n\n"
        f"Additional context: {context}{materials_block}\n\n"
        "Please explain this concept using the student's materials as the primary source, "
        "supplemented with your knowledge. After the explanation, provide a source breakdown "
        'in this format: "Source: X% from your study materials, Y% from online/general knowledge"'
    )
    return PromptSpec(
        system_directive=EXPLANATION_SYSTEM_PROMPT.format(level_prompt=level_prompt),
        user_payload=payload,
        response_format="text",
        temperature=TEMPERATURE_GENERATIVE,
    )


def build_question_explanation_prompt(
    question: str,
    materials: Sequence[SourceMaterial] = (),
) -> PromptSpec:
    """Answer to a free-form question with a trailing ``NOTES_USED:`` line."""
    if materials:
        notes_block = _join(
            f"Note ID: {m.id}\nTitle: {m.title}\nSubject: {m.subject or 'General'}\nContent: {m.content}"
            for m in materials
        )
    else:
        notes_block = "(no notes provided)"

    payload = f"Question: {question}\n\nSTUDENT'S NOTES:\n{notes_block}"
    return PromptSpec(
        system_directive=QUESTION_EXPLANATION_SYSTEM_PROMPT,
        user_payload=payload,
        response_format="text",
        temperature=TEMPERATURE_GENERATIVE,
    )


def build_quiz_prompt(content: str, num_questions: int = 5) -> PromptSpec:
    payload = (
        f"Generate {num_questions} quiz questions from the following content. "
        'Return JSON with a "questions" array of objects containing: question, '
        "type (multiple_choice, short_answer, or true_false), options (if multiple_choice), "
        f"correct_answer, and explanation.\n\nContent:\n{content}"
    )
    return PromptSpec(QUIZ_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def build_flashcards_prompt(content: str, num_cards: int = 10) -> PromptSpec:
    payload = (
        f"Generate {num_cards} flashcards from the following content. "
        'Return JSON with a "flashcards" array of objects containing: question, answer, '
        f"difficulty (easy, medium, or hard), and key_concepts.\n\nContent:\n{content}"
    )
    return PromptSpec(FLASHCARDS_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def build_knowledge_graph_prompt(materials: Sequence[str]) -> PromptSpec:
    payload = (
        "Analyze the following study materials and create a knowledge graph. "
        "Return JSON with nodes (id, label, type, mastery_level) and links "
        f"(source, target, relationship_type).\n\nMaterials:\n{_join(materials)}"
    )
    return PromptSpec(KNOWLEDGE_GRAPH_SYSTEM_PROMPT, payload, "json", TEMPERATURE_ANALYSIS)


def build_exam_prompt(materials: Sequence[str], duration: int = 60, difficulty: str = "medium") -> PromptSpec:
    payload = (
        f"Generate a {duration}-minute {difficulty} exam from the following materials. "
        "Include a mix of question types (multiple choice, short answer, essay, code if applicable). "
        "Return JSON with questions array containing: question, type, options (if applicable), "
        f"correct_answer, points, and explanation.\n\nMaterials:\n{_join(materials)}"
    )
    return PromptSpec(EXAM_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def build_handwriting_prompt() -> PromptSpec:
    payload = (
        "Convert this handwritten note into clean, structured text. "
        "Add headings, create summaries, and highlight important definitions."
    )
    return PromptSpec(HANDWRITING_SYSTEM_PROMPT, payload, "text", TEMPERATURE_OCR)


def _goal_payload(goal: Goal) -> dict[str, Any]:
    return {
        "title": goal.title,
        "subject": goal.subject,
        "deadline": goal.deadline,
        "priority": goal.priority,
        "materials": [
            {
                "title": m.title,
                "content": truncate(m.content, SCHEDULE_CONTENT_LIMIT),
                "subject": m.subject,
            }
            for m in goal.materials
        ],
    }


def build_content_schedule_prompt(goals: Sequence[Goal]) -> PromptSpec:
    goals_json = json.dumps([_goal_payload(g) for g in goals], indent=2, ensure_ascii=False)
    payload = (
        "Create a content-based study plan for these goals and their supporting documents. "
        "Return JSON with a plan array containing objects with: order (number), topic (string), "
        "description (string), material (string - which document it comes from), and goal "
        "(string - which goal it supports). Organize topics in a logical learning sequence "
        f"considering prerequisites.\n\nGoals with Materials:\n{goals_json}"
    )
    return PromptSpec(CONTENT_SCHEDULE_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def build_study_schedule_prompt(
    subjects: Sequence[Any],
    deadlines: Sequence[Any],
    performance: Any,
    energy_level: int,
) -> PromptSpec:
    payload = (
        f"Generate a daily study schedule. Subjects: {json.dumps(list(subjects), ensure_ascii=False, default=str)}, "
        f"Deadlines: {json.dumps(list(deadlines), ensure_ascii=False, default=str)}, "
        f"Performance: {json.dumps(performance, ensure_ascii=False, default=str)}, Energy Level: {energy_level}/10. "
        "Return JSON with schedule array containing: time, activity, subject, duration_minutes, and priority."
    )
    return PromptSpec(STUDY_SCHEDULE_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def build_weekly_digest_prompt(
    progress: Any,
    weak_areas: Sequence[str],
    strong_areas: Sequence[str],
) -> PromptSpec:
    payload = (
        f"Create a weekly progress digest. Progress: {json.dumps(progress, ensure_ascii=False, default=str)}, "
        f"Weak Areas: {', '.join(map(str, weak_areas))}, Strong Areas: {', '.join(map(str, strong_areas))}. "
        "Include achievements, areas for improvement, and a recommended plan for next week."
    )
    return PromptSpec(WEEKLY_DIGEST_SYSTEM_PROMPT, payload, "text", TEMPERATURE_MOTIVATIONAL)


def build_reverse_learning_prompt(problem: str, subject: str) -> PromptSpec:
    payload = (
        f"Problem: {problem}\nSubject: {subject}\n\n"
        "Identify all prerequisite concepts and create a learning path. "
        "Return JSON with concepts array (name, description, order) and materials array "
        "(title, content, order)."
    )
    return PromptSpec(REVERSE_LEARNING_SYSTEM_PROMPT, payload, "json", TEMPERATURE_PATHING)


def build_citations_prompt(content: str) -> PromptSpec:
    payload = (
        "Find relevant citations and sources for this content. Return JSON with sources array "
        "containing: title, type (textbook, paper, video, website), url (if applicable), and "
        f"relevance_score.\n\nContent:\n{content}"
    )
    return PromptSpec(CITATIONS_SYSTEM_PROMPT, payload, "json", TEMPERATURE_ANALYSIS)


def build_paper_summary_prompt(paper: str) -> PromptSpec:
    payload = (
        "Analyze this research paper. Return JSON with: summary, key_contributions (array), "
        "contrasting_viewpoints (array), and potential_questions (array of objects with "
        f"question, type, answer).\n\nPaper:\n{paper}"
    )
    return PromptSpec(PAPER_SUMMARY_SYSTEM_PROMPT, payload, "json", TEMPERATURE_ANALYSIS)


def build_word_extraction_prompt(materials: Sequence[SourceMaterial]) -> PromptSpec:
    payload = (
        "Extract key terms, concepts, and important words from these study materials. "
        "Return JSON with a words array containing objects with: word (string), frequency "
        '(number 1-100 based on importance), category (string like "concept", "term", '
        '"formula", "definition"), and related_materials (array of material titles where this '
        "word appears). Focus on educational terms, concepts, and important vocabulary.\n\n"
        f"Materials:\n{_join(_format_material(m) for m in materials)}"
    )
    return PromptSpec(WORD_EXTRACTION_SYSTEM_PROMPT, payload, "json", TEMPERATURE_ANALYSIS)


def build_word_questions_prompt(word: str, materials: Sequence[SourceMaterial]) -> PromptSpec:
    payload = (
        f'Generate 5-8 questions about "{word}" based on these materials. Return JSON with a '
        "questions array containing objects with: question (string), type (multiple_choice, "
        "short_answer, or true_false), options (array if multiple_choice), correct_answer "
        "(string), and explanation (string).\n\n"
        f"Materials:\n{_join(_format_material(m) for m in materials)}"
    )
    return PromptSpec(WORD_QUESTIONS_SYSTEM_PROMPT, payload, "json", TEMPERATURE_GENERATIVE)


def _format_context(context: StudyContext) -> str:
    sections = []
    if context.materials:
        sections.append(
            "Study materials:\n"
            + _join(
                f"Title: {m.title}\nSubject: {m.subject or 'General'}\n"
                f"Content: {truncate(m.content, CHAT_MATERIAL_LIMIT)}"
                for m in context.materials
            )
        )
    for label, rows in (
        ("Concepts", context.concepts),
        ("Recent study sessions", context.sessions),
        ("Recent exam results", context.exams),
    ):
        if rows:
            sections.append(f"{label}:\n{json.dumps(rows, ensure_ascii=False, default=str)}")
    return "\n\n".join(sections)


def build_chat_prompt(
    message: str,
    history: Sequence[ChatMessage] = (),
    context: StudyContext | None = None,
) -> PromptSpec:
    parts = []
    if context is not None:
        formatted = _format_context(context)
        if formatted:
            parts.append(f"STUDENT'S STUDY CONTEXT:\n{formatted}")
    if history:
        transcript = "\n".join(
            f"{'Student' if turn.role == 'user' else 'Assistant'}: {turn.content}" for turn in history
        )
        parts.append(f"CONVERSATION SO FAR:\n{transcript}")
    parts.append(f"Student: {message}")
    return PromptSpec(CHAT_SYSTEM_PROMPT, "\n\n".join(parts), "text", TEMPERATURE_GENERATIVE)

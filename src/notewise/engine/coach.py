"""Coach messages shown on the study dashboard."""

import re
from typing import Optional, Sequence

from ..artifacts import CoachMessage

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
MIN_DIGEST_SENTENCE = 20
MAX_WEAK_CONCEPTS = 3


def _score(exam: dict) -> int | float:
    score = exam.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return score
    return 0


def _exam_feedback(recent_exams: Sequence[dict]) -> Optional[CoachMessage]:
    if not recent_exams:
        return None

    latest = _score(recent_exams[0])
    improvement = 0
    if len(recent_exams) > 1:
        improvement = latest - _score(recent_exams[1])

    if improvement > 0:
        content = (
            f"Your performance improved by {improvement}%! "
            f"Your latest exam score was {latest}%. Excellent progress!"
        )
    elif latest >= 80:
        content = f"Your latest exam score was {latest}%. You're doing great! Keep up the excellent work!"
    else:
        content = f"Your latest exam score was {latest}%. Focus on reviewing weak areas to improve."
    return CoachMessage(type="feedback", content=content, timestamp="Recently")


def first_digest_sentence(digest: str) -> Optional[str]:
    """First sentence of the digest long enough to stand on its own."""
    for sentence in _SENTENCE_SPLIT.split(digest):
        if len(sentence.strip()) > MIN_DIGEST_SENTENCE:
            return sentence.strip() + "."
    return None


def build_coach_messages(
    streak: int,
    recent_exams: Sequence[dict],
    weak_concepts: Sequence[dict],
    digest: Optional[str] = None,
) -> list[CoachMessage]:
    """Compose streak, exam, weak-area and digest messages in display order.

    ``recent_exams`` is newest first; each entry needs a ``score``.
    ``weak_concepts`` entries need a ``name``.
    """
    messages: list[CoachMessage] = []

    if streak > 0:
        messages.append(
            CoachMessage(
                type="motivation",
                content=f"Great job! You've maintained a {streak}-day study streak. Keep it up! 🔥",
                timestamp="Just now",
            )
        )

    feedback = _exam_feedback(recent_exams)
    if feedback is not None:
        messages.append(feedback)

    weak_names = [str(c["name"]) for c in weak_concepts if c.get("name")][:MAX_WEAK_CONCEPTS]
    if weak_names:
        messages.append(
            CoachMessage(
                type="suggestion",
                content=(
                    f"Based on your performance, consider reviewing: {', '.join(weak_names)}. "
                    "These are areas that need more practice."
                ),
                timestamp="Today",
            )
        )

    if digest:
        sentence = first_digest_sentence(digest)
        if sentence:
            messages.append(CoachMessage(type="motivation", content=sentence, timestamp="Today"))

    return messages

"""Attribution for free-text explanations.

The model is asked to end its answer with a marker line, either
``Source: X% from your study materials, ...`` or ``NOTES_USED: id1,id2``.
When the marker is missing we fall back to a heuristic. Every function here
is pure, so re-running it on the same output gives the same attribution.
"""

import re
from typing import Literal, Optional, Sequence

from ..artifacts import SourceMaterial

ContributionLevel = Literal["significant", "moderate", "minimal"]

SIGNIFICANT_CHARS = 1000
MODERATE_CHARS = 500

CONTRIBUTION_PERCENT: dict[ContributionLevel, int] = {
    "significant": 50,
    "moderate": 30,
    "minimal": 15,
}

NO_MATERIALS_BREAKDOWN = "100% from online/general knowledge (no study materials provided)"

# Start-of-line marker, tolerating markdown emphasis such as "**Source:**"
_SOURCE_MARKER = re.compile(
    r"^[ \t>*_]*source[*_]*[ \t]*:[*_]*[ \t]*(?P<payload>.*?)[ \t*_]*$",
    re.IGNORECASE | re.MULTILINE,
)
_NOTES_MARKER = re.compile(
    r"^[ \t>*_]*notes_used[*_]*[ \t]*:[*_]*[ \t]*(?P<payload>.*?)[ \t*_]*$",
    re.IGNORECASE | re.MULTILINE,
)
_WORD = re.compile(r"\w+")
_EMPTY_PAYLOADS = {"", "none", "n/a", "[]"}


def _split_marker(text: str, pattern: re.Pattern) -> tuple[str, Optional[str]]:
    matches = list(pattern.finditer(text))
    if not matches:
        return text.strip(), None

    last = matches[-1]
    body = text[: last.start()] + text[last.end():]
    # Collapse the blank run left where the marker line was
    body = re.sub(r"\n(?:[ \t]*\n){2,}", "\n\n", body)
    return body.strip(), last.group("payload").strip()


def split_source_marker(text: str) -> tuple[str, Optional[str]]:
    """Remove the last ``Source:`` line and return ``(text, payload or None)``."""
    body, payload = _split_marker(text, _SOURCE_MARKER)
    if payload is not None and not payload:
        return body, None
    return body, payload


def split_notes_marker(text: str) -> tuple[str, Optional[str]]:
    """Remove the last ``NOTES_USED:`` line and return ``(text, payload or None)``."""
    return _split_marker(text, _NOTES_MARKER)


def parse_note_ids(payload: str, materials: Sequence[SourceMaterial]) -> list[str]:
    """Split a ``NOTES_USED`` payload, keeping only ids the caller supplied."""
    if payload.strip().lower() in _EMPTY_PAYLOADS:
        return []

    known = {m.id for m in materials if m.id}
    used: list[str] = []
    for token in payload.split(","):
        note_id = token.strip().strip("[]\"'`").strip()
        if note_id in known and note_id not in used:
            used.append(note_id)
    return used


def contribution_level(total_chars: int) -> ContributionLevel:
    if total_chars >= SIGNIFICANT_CHARS:
        return "significant"
    if total_chars >= MODERATE_CHARS:
        return "moderate"
    return "minimal"


def estimate_source_breakdown(materials: Sequence[SourceMaterial]) -> str:
    """Fallback breakdown bucketed on how much material text was supplied."""
    if not materials:
        return NO_MATERIALS_BREAKDOWN

    total_chars = sum(len(m.content or "") for m in materials)
    user_percent = CONTRIBUTION_PERCENT[contribution_level(total_chars)]
    return (
        f"{user_percent}% from your study materials, "
        f"{100 - user_percent}% from online/general knowledge"
    )


def question_words(question: str) -> list[str]:
    """Lowercased tokens of the question longer than three characters."""
    return [w for w in _WORD.findall(question.lower()) if len(w) > 3]


def infer_used_note_ids(question: str, materials: Sequence[SourceMaterial]) -> list[str]:
    """Approximate which notes an answer drew on by lexical overlap.

    A material counts as used when its content contains any question word
    as a case-insensitive substring.
    """
    words = question_words(question)
    if not words:
        return []

    used: list[str] = []
    for material in materials:
        if not material.id or material.id in used:
            continue
        content = (material.content or "").lower()
        if any(word in content for word in words):
            used.append(material.id)
    return used

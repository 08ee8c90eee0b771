"""Tests for notewise.llm.attribution module."""

import pytest

from notewise.artifacts import SourceMaterial
from notewise.llm.attribution import (
    NO_MATERIALS_BREAKDOWN,
    contribution_level,
    estimate_source_breakdown,
    infer_used_note_ids,
    parse_note_ids,
    question_words,
    split_notes_marker,
    split_source_marker,
)


def material(length: int, id: str = "m") -> SourceMaterial:
    return SourceMaterial(id=id, title="Notes", content="x" * length)


class TestSplitSourceMarker:
    def test_extracts_and_strips_line(self):
        text = "Entropy measures disorder.\n\nSource: 40% from your study materials, 60% from online/general knowledge"

        body, payload = split_source_marker(text)

        assert body == "Entropy measures disorder."
        assert payload == "40% from your study materials, 60% from online/general knowledge"

    def test_case_insensitive_and_bold(self):
        body, payload = split_source_marker("Answer.\n**SOURCE:** 100% from online/general knowledge")

        assert body == "Answer."
        assert payload == "100% from online/general knowledge"

    def test_must_start_the_line(self):
        text = "The main Source: of energy is the sun."

        body, payload = split_source_marker(text)

        assert payload is None
        assert body == text

    def test_missing_marker(self):
        assert split_source_marker("Just an answer.") == ("Just an answer.", None)

    def test_last_marker_wins(self):
        text = "Source: textbook chapter 2 says so.\nMore text.\nSource: 20% from your study materials"

        body, payload = split_source_marker(text)

        assert payload == "20% from your study materials"
        assert "Source: textbook chapter 2 says so." in body

    def test_idempotent(self):
        text = "Body.\n\nSource: 50% from your study materials"

        once = split_source_marker(text)
        twice = split_source_marker(text)

        assert once == twice


class TestNotesMarker:
    def test_extracts_ids_line(self):
        body, payload = split_notes_marker("Mitosis splits cells.\n\nNOTES_USED: n1, n2")

        assert body == "Mitosis splits cells."
        assert payload == "n1, n2"

    def test_marker_in_middle_leaves_single_blank_line(self):
        body, payload = split_notes_marker("First.\n\nnotes_used: n1\n\nSecond.")

        assert body == "First.\n\nSecond."
        assert payload == "n1"

    def test_parse_filters_unknown_ids(self, sample_materials):
        assert parse_note_ids("n1, ghost, n2, n1", sample_materials) == ["n1", "n2"]

    def test_parse_strips_brackets_and_quotes(self, sample_materials):
        assert parse_note_ids('["n2", "n1"]', sample_materials) == ["n2", "n1"]

    @pytest.mark.parametrize("payload", ["", "none", "None", "N/A", "[]"])
    def test_parse_explicit_none(self, payload, sample_materials):
        assert parse_note_ids(payload, sample_materials) == []

    def test_hallucinated_ids_never_returned(self):
        materials = [SourceMaterial(id="real", content="c")]

        assert parse_note_ids("fake1,fake2", materials) == []


class TestSourceBreakdownHeuristic:
    @pytest.mark.parametrize(
        "length, level",
        [(1200, "significant"), (1000, "significant"), (600, "moderate"), (500, "moderate"), (100, "minimal"), (0, "minimal")],
    )
    def test_contribution_level(self, length, level):
        assert contribution_level(length) == level

    def test_significant(self):
        breakdown = estimate_source_breakdown([material(700, "a"), material(500, "b")])

        assert breakdown == "50% from your study materials, 50% from online/general knowledge"

    def test_moderate(self):
        assert estimate_source_breakdown([material(600)]) == (
            "30% from your study materials, 70% from online/general knowledge"
        )

    def test_minimal(self):
        assert estimate_source_breakdown([material(100)]) == (
            "15% from your study materials, 85% from online/general knowledge"
        )

    def test_no_materials(self):
        assert estimate_source_breakdown([]) == NO_MATERIALS_BREAKDOWN
        assert NO_MATERIALS_BREAKDOWN.startswith("100% from online/general knowledge")


class TestInferUsedNoteIds:
    def test_lexical_overlap(self):
        materials = [SourceMaterial(id="bio-1", content="Mitosis is cell division.")]

        assert infer_used_note_ids("What is mitosis?", materials) == ["bio-1"]

    def test_short_words_ignored(self):
        materials = [SourceMaterial(id="m", content="it is an ox")]

        assert infer_used_note_ids("Is it an ox?", materials) == []

    def test_only_matching_materials(self, sample_materials):
        assert infer_used_note_ids("Explain photosynthesis please", sample_materials) == ["n2"]

    def test_materials_without_id_skipped(self):
        materials = [SourceMaterial(content="Mitosis is cell division.")]

        assert infer_used_note_ids("What is mitosis?", materials) == []

    def test_question_words(self):
        assert question_words("What's the role of ATP-synthase?") == ["role", "synthase"]

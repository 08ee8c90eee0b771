"""Tests for notewise.engine.tasks module."""

import json

import pytest

from notewise.artifacts import ChatMessage, Exam, Goal, SourceMaterial
from notewise.engine import tasks as tasks_module
from notewise.llm import InvocationResult


class TestExplainConcept:
    async def test_splits_source_line(self, tasks, respond_with, sample_materials):
        respond_with(
            "Mitosis splits a cell.\nEach daughter gets a copy.\n\n"
            "Source: 40% from your study materials, 60% from online/general knowledge"
        )

        result = await tasks.explain_concept("Mitosis", "", "standard", sample_materials)

        assert result.explanation == "Mitosis splits a cell.\n\nEach daughter gets a copy."
        assert result.source_breakdown == "40% from your study materials, 60% from online/general knowledge"

    async def test_estimates_breakdown_without_source_line(self, tasks, respond_with):
        respond_with("Entropy measures disorder.")
        materials = [SourceMaterial(id="a", content="x" * 1200)]

        result = await tasks.explain_concept("Entropy", materials=materials)

        assert result.explanation == "Entropy measures disorder."
        assert result.source_breakdown == "50% from your study materials, 50% from online/general knowledge"

    async def test_no_materials_is_all_general_knowledge(self, tasks, respond_with):
        respond_with("Entropy measures disorder.")

        result = await tasks.explain_concept("Entropy")

        assert result.source_breakdown.startswith("100% from online/general knowledge")

    async def test_not_configured_placeholder(self, tasks, unconfigure):
        unconfigure()

        result = await tasks.explain_concept("Entropy")

        assert result.explanation == tasks_module.EXPLANATION_NOT_CONFIGURED
        assert result.source_breakdown == ""

    async def test_backend_failure_placeholder(self, tasks, fail_with):
        fail_with("rate_limited", "slow down")

        result = await tasks.explain_concept("Entropy")

        assert result.explanation == tasks_module.EXPLANATION_FAILED

    async def test_empty_output_placeholder(self, tasks, respond_with):
        respond_with("   ")

        result = await tasks.explain_concept("Entropy")

        assert result.explanation == tasks_module.EXPLANATION_EMPTY

    async def test_prompt_passed_to_client(self, tasks, mock_llm, respond_with):
        respond_with("Answer.")

        await tasks.explain_concept("Entropy", "thermo", "eli5")

        spec = mock_llm.invoke.call_args.args[0]
        assert "Entropy" in spec.user_payload
        assert spec.response_format == "text"


class TestExplainQuestion:
    async def test_heuristic_picks_overlapping_note(self, tasks, respond_with):
        respond_with("Mitosis is how a cell divides into two identical cells.")
        materials = [SourceMaterial(id="bio-1", title="Bio", content="Mitosis is cell division.")]

        result = await tasks.explain_question("What is mitosis?", materials)

        assert result.used_note_ids == ["bio-1"]

    async def test_marker_ids_filtered_to_known_notes(self, tasks, respond_with, sample_materials):
        respond_with("Cells divide.\n\nNOTES_USED: n1, invented-9")

        result = await tasks.explain_question("What is mitosis?", sample_materials)

        assert result.explanation == "Cells divide."
        assert result.used_note_ids == ["n1"]

    async def test_marker_none_means_no_notes(self, tasks, respond_with, sample_materials):
        respond_with("General answer.\nNOTES_USED: none")

        result = await tasks.explain_question("What is mitosis?", sample_materials)

        assert result.used_note_ids == []

    async def test_failure_reports_no_notes(self, tasks, fail_with, sample_materials):
        fail_with()

        result = await tasks.explain_question("What is mitosis?", sample_materials)

        assert result.explanation == tasks_module.EXPLANATION_FAILED
        assert result.used_note_ids == []


class TestJsonTasks:
    async def test_flashcards_invalid_json_returns_empty(self, tasks, respond_with):
        respond_with("Sure! Here are your flashcards: 1. ...")

        assert await tasks.generate_flashcards("Photosynthesis notes") == []

    async def test_flashcards(self, tasks, respond_with):
        respond_with(json.dumps({"flashcards": [{"question": "Q", "answer": "A", "key_concepts": ["c"]}]}))

        cards = await tasks.generate_flashcards("notes", 1)

        assert len(cards) == 1
        assert cards[0].answer == "A"

    async def test_quiz_failure_returns_empty(self, tasks, fail_with):
        fail_with("timeout", "timed out")

        assert await tasks.generate_quiz("notes") == []

    async def test_citations_returned_unmodified(self, tasks, respond_with):
        respond_with('{"sources":[{"title":"Intro to X","type":"textbook","relevance_score":90}]}')

        sources = await tasks.find_citations("Notes about X")

        assert len(sources) == 1
        assert sources[0].model_dump(exclude_none=True) == {
            "title": "Intro to X",
            "type": "textbook",
            "relevance_score": 90,
        }

    async def test_knowledge_graph(self, tasks, respond_with):
        respond_with(
            json.dumps(
                {
                    "nodes": [{"id": "1", "label": "Cell", "type": "concept", "mastery_level": 40}],
                    "links": [{"source": "1", "target": "1", "relationship_type": "relates_to"}],
                }
            )
        )

        graph = await tasks.build_knowledge_graph(["cells"])

        assert graph.nodes[0].label == "Cell"
        assert graph.links[0].relationship_type == "relates_to"

    async def test_knowledge_graph_default(self, tasks, unconfigure):
        unconfigure()

        graph = await tasks.build_knowledge_graph(["cells"])

        assert graph.model_dump() == {"nodes": [], "links": []}

    async def test_exam_unconfigured_with_no_materials(self, tasks, unconfigure):
        unconfigure()

        exam = await tasks.generate_exam([])

        assert exam == Exam()
        assert exam.model_dump(exclude_none=True) == {"questions": []}

    async def test_exam_echoes_duration_and_difficulty(self, tasks, respond_with):
        respond_with(json.dumps({"questions": [{"question": "Define osmosis", "type": "essay", "points": 10}]}))

        exam = await tasks.generate_exam(["osmosis notes"], 90, "hard")

        assert len(exam.questions) == 1
        assert exam.predicted_difficulty == "hard"
        assert exam.duration_minutes == 90

    async def test_content_schedule_sorted(self, tasks, respond_with):
        respond_with(
            json.dumps(
                {
                    "plan": [
                        {"order": 2, "topic": "Meiosis"},
                        {"order": 1, "topic": "Mitosis"},
                        {"topic": "no order"},
                    ]
                }
            )
        )

        plan = await tasks.generate_content_schedule([Goal(title="Bio exam")])

        assert [p.topic for p in plan] == ["Mitosis", "Meiosis"]

    async def test_study_schedule(self, tasks, respond_with):
        respond_with(
            json.dumps({"schedule": [{"time": "09:00", "activity": "Review", "subject": "Math", "duration_minutes": 45}]})
        )

        schedule = await tasks.generate_study_schedule(["Math"], [], {}, 7)

        assert schedule.schedule[0].activity == "Review"
        assert schedule.schedule[0].duration_minutes == 45

    async def test_reverse_learning_sorted(self, tasks, respond_with):
        respond_with(
            json.dumps(
                {
                    "concepts": [{"name": "Derivatives", "order": 2}, {"name": "Limits", "order": 1}],
                    "materials": [{"title": "B", "order": 2}, {"title": "A", "order": 1}],
                }
            )
        )

        path = await tasks.reverse_learning_path("Optimize f(x)", "Calculus")

        assert [c.name for c in path.concepts] == ["Limits", "Derivatives"]
        assert [m.title for m in path.materials] == ["A", "B"]

    async def test_summarize_paper_default(self, tasks, respond_with):
        respond_with("[]")

        summary = await tasks.summarize_paper("paper")

        assert summary.summary == ""
        assert summary.key_contributions == []

    async def test_extract_key_words(self, tasks, respond_with, sample_materials):
        respond_with(json.dumps({"words": [{"word": "mitosis", "frequency": 250, "category": "process"}, {"frequency": 3}]}))

        words = await tasks.extract_key_words(sample_materials)

        assert len(words) == 1
        assert words[0].frequency == 100


class TestMalformedOutputNeverRaises:
    """Model output that parses but is out of range still degrades to defaults."""

    @pytest.mark.parametrize("frequency", ["1e999", "-1e999", "Infinity", "NaN"])
    async def test_non_finite_word_frequency_dropped(self, tasks, respond_with, frequency):
        respond_with('{"words":[{"word":"x","frequency":%s},{"word":"y","frequency":40}]}' % frequency)

        words = await tasks.extract_key_words([])

        assert [w.word for w in words] == ["y"]

    async def test_deeply_nested_json_returns_default(self, tasks, respond_with):
        respond_with("[" * 100000 + "]" * 100000)

        assert await tasks.generate_flashcards("notes") == []
        assert (await tasks.build_knowledge_graph(["cells"])).model_dump() == {"nodes": [], "links": []}

    async def test_numeric_concept_names(self, tasks, mock_llm, respond_with):
        respond_with("Your work on topic five is paying off nicely. Keep at it!")

        messages = await tasks.coach_messages(weak_concepts=[{"name": 5}], strong_concepts=[{"name": 7.5}])

        assert messages[0].type == "suggestion"
        assert "consider reviewing: 5." in messages[0].content
        payload = mock_llm.invoke.call_args.args[0].user_payload
        assert "Weak Areas: 5, Strong Areas: 7.5." in payload


class TestQuestionsForWord:
    async def test_no_matching_material_skips_call(self, tasks, mock_llm, sample_materials):
        questions = await tasks.questions_for_word("entropy", sample_materials)

        assert questions == []
        mock_llm.invoke.assert_not_called()

    async def test_only_relevant_materials_sent(self, tasks, mock_llm, respond_with, sample_materials):
        respond_with(json.dumps({"questions": [{"question": "What is mitosis?"}]}))

        questions = await tasks.questions_for_word("Mitosis", sample_materials)

        assert [q.question for q in questions] == ["What is mitosis?"]
        spec = mock_llm.invoke.call_args.args[0]
        assert "Cell Biology" in spec.user_payload
        assert "Photosynthesis" not in spec.user_payload


class TestCleanHandwrittenImage:
    async def test_success_normalized(self, tasks, mock_llm):
        mock_llm.invoke_vision.return_value = InvocationResult.success("# Notes\nCells divide.\n\n\n\nThe end.")

        text = await tasks.clean_handwritten_image(b"img", "image/png")

        assert text == "# Notes\n\nCells divide.\n\nThe end."
        args = mock_llm.invoke_vision.call_args.args
        assert args[1] == b"img"
        assert args[2] == "image/png"

    async def test_not_configured(self, tasks, unconfigure):
        unconfigure()

        assert await tasks.clean_handwritten_image(b"img") == tasks_module.NOTES_NOT_CONFIGURED

    async def test_empty_output_is_placeholder(self, tasks, mock_llm):
        mock_llm.invoke_vision.return_value = InvocationResult.success("")

        assert await tasks.clean_handwritten_image(b"img") == tasks_module.NOTES_EMPTY


class TestDigestAndCoach:
    async def test_digest_failure_placeholder(self, tasks, fail_with):
        fail_with()

        assert await tasks.generate_weekly_digest({}, [], []) == tasks_module.DIGEST_FAILED

    async def test_coach_includes_digest_sentence(self, tasks, respond_with):
        respond_with("You studied consistently this week and it shows. Keep going!")

        messages = await tasks.coach_messages(streak=4, weak_concepts=[{"name": "Algebra"}])

        assert [m.type for m in messages] == ["motivation", "suggestion", "motivation"]
        assert messages[-1].content == "You studied consistently this week and it shows."

    async def test_coach_skips_placeholder_digest(self, tasks, unconfigure):
        unconfigure()

        messages = await tasks.coach_messages(streak=0)

        assert messages == []


class TestChat:
    async def test_reply(self, tasks, mock_llm, respond_with):
        respond_with("Mitosis has four phases.")
        history = [ChatMessage(role="user", content="Hi"), ChatMessage(role="assistant", content="Hello!")]

        reply = await tasks.chat("Tell me about mitosis", history)

        assert reply == "Mitosis has four phases."
        assert mock_llm.invoke.call_args.args[0].user_payload.endswith("Student: Tell me about mitosis")

    async def test_not_configured_placeholder(self, tasks, unconfigure):
        unconfigure()

        assert await tasks.chat("Hello") == tasks_module.CHAT_NOT_CONFIGURED

    async def test_failure_placeholder(self, tasks, fail_with):
        fail_with()

        assert await tasks.chat("Hello") == tasks_module.CHAT_FAILED

    async def test_empty_placeholder(self, tasks, respond_with):
        respond_with("")

        assert await tasks.chat("Hello") == tasks_module.CHAT_EMPTY

import pytest
from pydantic import ValidationError

from timed_cbt.models.exam_model import Exam, Question, QuestionOption
from timed_cbt.models.session_state import ExamResult, SessionUpdate

from conftest import make_question


def _opts(*values):
    return [QuestionOption(label=v.upper(), text=v, value=v) for v in values]


class TestQuestion:
    def test_requires_two_options(self):
        with pytest.raises(ValidationError):
            Question(id="q", exam_id="e", text="t", options=_opts("a"), correct_answer="a")

    def test_answer_must_be_an_option_value(self):
        with pytest.raises(ValidationError):
            Question(id="q", exam_id="e", text="t", options=_opts("a", "b"), correct_answer="A")

    def test_option_values_unique(self):
        with pytest.raises(ValidationError):
            Question(id="q", exam_id="e", text="t", options=_opts("a", "a"), correct_answer="a")

    def test_public_dict_hides_answer_key(self):
        q = make_question("e", "q1", "b")

        public = q.to_public_dict()

        assert "correct_answer" not in public
        assert [o["value"] for o in public["options"]] == ["a", "b", "c", "d"]


class TestExam:
    def test_from_minutes_converts_to_seconds(self):
        exam = Exam.from_minutes(30, id="e", title="t", question_count=10)
        assert exam.duration_seconds == 1800

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            Exam(id="e", title="t", duration_seconds=0, question_count=1)


class TestSessionUpdate:
    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            SessionUpdate.model_validate({"is_completed": True})

    def test_rejects_negative_time(self):
        with pytest.raises(ValidationError):
            SessionUpdate(time_remaining=-1)

    def test_flags_deduplicated_in_order(self):
        update = SessionUpdate(flagged_questions=["q2", "q1", "q2"])
        assert update.flagged_questions == ["q2", "q1"]

    def test_provided_fields_only(self):
        update = SessionUpdate.model_validate({"flagged_questions": ["q1"], "answers": None})
        assert update.provided_fields() == {"flagged_questions": ["q1"]}


def test_result_score_bounds():
    with pytest.raises(ValidationError):
        ExamResult(
            session_id="s",
            user_id="u",
            exam_id="e",
            score=101,
            correct_answers=1,
            total_questions=1,
            time_taken=0,
            passed=True,
        )

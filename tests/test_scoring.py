"""
채점 엔진 단위 테스트.
"""

import pytest

from timed_cbt.errors import InvalidExamError
from timed_cbt.services.scoring import (
    calculate_score,
    calculate_time_taken,
    count_correct,
    is_passed,
    score_answers,
)


class TestScoreAnswers:
    def test_partial_answers_scenario(self, questions):
        answers = {"q1": "a", "q2": "x", "q3": "c"}

        summary = score_answers(answers, questions, 1800, 610)

        assert summary.correct == 2
        assert summary.total == 4
        assert summary.score == 50
        assert summary.passed is False
        assert summary.time_taken == 1190

    def test_all_correct_passes(self, questions):
        answers = {"q1": "a", "q2": "b", "q3": "c", "q4": "d"}

        summary = score_answers(answers, questions, 1800, 0)

        assert summary.score == 100
        assert summary.passed is True

    def test_zero_questions_is_invalid_exam(self):
        with pytest.raises(InvalidExamError):
            score_answers({}, [], 1800, 100)

    def test_deterministic(self, questions):
        answers = {"q1": "a", "q4": "a"}

        first = score_answers(answers, questions, 1800, 42)
        second = score_answers(answers, questions, 1800, 42)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_pass_score_is_configurable(self, questions):
        answers = {"q1": "a", "q2": "b"}

        assert score_answers(answers, questions, 1800, 0, pass_score=50).passed is True
        assert score_answers(answers, questions, 1800, 0, pass_score=51).passed is False


class TestCountCorrect:
    def test_missing_answer_counts_as_incorrect(self, questions):
        assert count_correct(questions, {}) == 0

    def test_compares_option_value_not_label(self, questions):
        # 라벨은 대문자, value 는 소문자
        assert count_correct(questions, {"q1": "A"}) == 0
        assert count_correct(questions, {"q1": "a"}) == 1

    def test_ignores_answers_for_unknown_questions(self, questions):
        assert count_correct(questions, {"zzz": "a", "q2": "b"}) == 1


class TestCalculateScore:
    @pytest.mark.parametrize(
        "correct,total,expected",
        [
            (2, 3, 67),
            (1, 3, 33),
            (1, 8, 13),   # 12.5 -> 13 (사사오입)
            (5, 8, 63),   # 62.5 -> 63
            (0, 5, 0),
            (7, 7, 100),
        ],
    )
    def test_half_up_rounding(self, correct, total, expected):
        assert calculate_score(correct, total) == expected

    def test_zero_total_raises(self):
        with pytest.raises(InvalidExamError):
            calculate_score(0, 0)


class TestTimeTaken:
    def test_duration_minus_remaining(self):
        assert calculate_time_taken(1800, 610) == 1190

    def test_clamped_at_zero(self):
        assert calculate_time_taken(1800, 2000) == 0

    def test_missing_remaining_counts_as_zero(self):
        assert calculate_time_taken(1800, None) == 1800


def test_is_passed_threshold():
    assert is_passed(70, 70) is True
    assert is_passed(69, 70) is False

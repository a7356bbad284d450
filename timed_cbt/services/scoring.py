"""
services/scoring.py

시험 채점 비즈니스 로직.
순수 Python 함수로 구성 — 전역 상태 변경, 저장소 접근 없음.
같은 입력이면 항상 같은 결과를 낸다 (재채점/감사용).
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from config import PASS_SCORE
from timed_cbt.errors import InvalidExamError
from timed_cbt.models.exam_model import Question


class ScoreSummary(BaseModel):
    """채점 결과 요약."""

    model_config = ConfigDict(frozen=True)

    score: int
    correct: int
    total: int
    time_taken: int
    passed: bool


def count_correct(questions: List[Question], answers: Dict[str, str]) -> int:
    """
    정답 수를 센다.

    정답 판정 기준: answers.get(question.id) == question.correct_answer
    응답하지 않은 문제(키 없음)는 오답으로 처리 (오류 아님).
    """
    return sum(1 for q in questions if answers.get(q.id) == q.correct_answer)


def calculate_score(correct: int, total: int) -> int:
    """
    100점 만점 환산 점수 (정수, 사사오입).

    파이썬 round() 는 은행가 반올림이므로 쓰지 않고,
    floor(correct * 100 / total + 0.5) 를 정수 연산으로 계산한다.

    Raises:
        InvalidExamError: total == 0
    """
    if total <= 0:
        raise InvalidExamError("문제가 없는 시험은 채점할 수 없습니다.")
    return (correct * 200 + total) // (2 * total)


def calculate_time_taken(exam_duration: int, time_remaining: Optional[int]) -> int:
    """소요 시간 (초). 남은 시간이 제한 시간보다 커도 음수가 되지 않게 0 으로 고정."""
    return max(0, exam_duration - (time_remaining or 0))


def is_passed(score: int, pass_score: int = PASS_SCORE) -> bool:
    """
    합격 여부를 반환한다.

    Args:
        score:      calculate_score()가 반환한 점수 (0 ~ 100).
        pass_score: 합격 기준 점수 (기본값 config.PASS_SCORE).
    """
    return score >= pass_score


def score_answers(
    answers: Dict[str, str],
    questions: List[Question],
    exam_duration: int,
    time_remaining: Optional[int],
    pass_score: int = PASS_SCORE,
) -> ScoreSummary:
    """
    세션의 최종 답안과 정답 키로 결과를 계산한다.

    Args:
        answers:        {question.id: 선택한 보기 value}
        questions:      채점 대상 Question 리스트 (정답 키 포함).
        exam_duration:  시험 제한 시간 (초).
        time_remaining: 제출 시점의 남은 시간 (초).
        pass_score:     합격 기준 점수.

    Raises:
        InvalidExamError: questions 가 비어 있음.
    """
    total = len(questions)
    correct = count_correct(questions, answers)
    score = calculate_score(correct, total)
    return ScoreSummary(
        score=score,
        correct=correct,
        total=total,
        time_taken=calculate_time_taken(exam_duration, time_remaining),
        passed=is_passed(score, pass_score),
    )

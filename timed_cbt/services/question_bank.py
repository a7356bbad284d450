"""
services/question_bank.py

문제은행 접근자 (읽기 전용).
Public API:
  - QuestionBank.get_exam(exam_id) -> Optional[Exam]
  - QuestionBank.list_active_exams() -> List[Exam]
  - QuestionBank.get_questions(exam_id) -> List[Question]   : 정답 키 포함, order 순
  - sample_questions(questions, count, rng) -> List[Question] : 비복원 무작위 추출

시험/문제 등록은 관리자 프로세스 몫이며, 여기서는 load() 로 적재만 한다.
"""

import logging
import random
import threading
from typing import Dict, Iterable, List, Optional

from timed_cbt.models.exam_model import Exam, Question

logger = logging.getLogger(__name__)


def sample_questions(
    questions: List[Question],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    min(count, len(questions)) 개를 비복원 추출한다.

    호출마다 순서/구성이 달라질 수 있다 (새로고침 시 다른 세트가 나오는 것은 의도된 동작).
    테스트에서는 시드를 고정한 rng 를 넘겨 결과를 재현한다.
    """
    rng = rng or random.Random()
    k = max(0, min(count, len(questions)))
    return rng.sample(questions, k)


class QuestionBank:
    """시험 정의와 문제(정답 키 포함)를 보관하는 읽기 전용 저장소."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._exams: Dict[str, Exam] = {}
        self._questions: Dict[str, List[Question]] = {}

    def load(self, exam: Exam, questions: Iterable[Question]) -> None:
        """시험 하나와 그 문제들을 적재. 같은 ID 면 통째로 교체."""
        items = list(questions)
        foreign = [q.id for q in items if q.exam_id != exam.id]
        if foreign:
            raise ValueError(f"다른 시험에 속한 문제가 섞여 있습니다: {foreign}")
        ids = [q.id for q in items]
        if len(set(ids)) != len(ids):
            raise ValueError(f"문제 ID 가 중복되었습니다 (exam={exam.id})")

        with self._lock:
            self._exams[exam.id] = exam
            self._questions[exam.id] = sorted(items, key=lambda q: q.order)
        logger.info(f"시험 적재: {exam.id} ({len(items)}문항)")

    def get_exam(self, exam_id: str) -> Optional[Exam]:
        with self._lock:
            return self._exams.get(exam_id)

    def list_active_exams(self) -> List[Exam]:
        with self._lock:
            return [e for e in self._exams.values() if e.is_active]

    def get_questions(self, exam_id: str) -> List[Question]:
        with self._lock:
            return list(self._questions.get(exam_id, []))

    def question_ids(self, exam_id: str) -> set:
        return {q.id for q in self.get_questions(exam_id)}

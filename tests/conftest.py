import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from timed_cbt.models.exam_model import Exam, Question, QuestionOption
from timed_cbt.services.question_bank import QuestionBank
from timed_cbt.services.session_manager import ExamSessionManager
from timed_cbt.storage.session_store import InMemorySessionStore

EXAM_ID = "exam-1"
EMPTY_EXAM_ID = "exam-empty"
USER = "user-1"
OTHER_USER = "user-2"


class FakeClock:
    """테스트용 시계. advance() 로 시간을 흘려보낸다."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def make_question(exam_id: str, qid: str, answer: str, order: int = 0) -> Question:
    return Question(
        id=qid,
        exam_id=exam_id,
        text=f"{qid} 문제",
        options=[
            QuestionOption(label=v.upper(), text=f"보기 {v}", value=v)
            for v in ("a", "b", "c", "d")
        ],
        correct_answer=answer,
        order=order,
    )


@pytest.fixture
def exam() -> Exam:
    return Exam(id=EXAM_ID, title="샘플 시험", duration_seconds=1800, question_count=4)


@pytest.fixture
def questions():
    key = {"q1": "a", "q2": "b", "q3": "c", "q4": "d"}
    return [make_question(EXAM_ID, qid, ans, order=i) for i, (qid, ans) in enumerate(key.items())]


@pytest.fixture
def bank(exam, questions) -> QuestionBank:
    b = QuestionBank()
    b.load(exam, questions)
    b.load(Exam(id=EMPTY_EXAM_ID, title="빈 시험", duration_seconds=600, question_count=0), [])
    b.load(
        Exam(id="exam-inactive", title="비활성", duration_seconds=600, question_count=1, is_active=False),
        [make_question("exam-inactive", "x1", "a")],
    )
    return b


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def manager(bank, store, clock) -> ExamSessionManager:
    return ExamSessionManager(bank, store, pass_score=70, rng=random.Random(1234), clock=clock)


@pytest.fixture
def client(manager) -> TestClient:
    return TestClient(create_app(manager))


@pytest.fixture
def auth_headers():
    return {"X-User-Id": USER}

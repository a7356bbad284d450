"""
api/sample_exams.py — 데모용 샘플 시험 (LOAD_SAMPLE_EXAMS=true 일 때 적재)
"""

from typing import List, Tuple

from timed_cbt.models.exam_model import Exam, Question, QuestionOption
from timed_cbt.services.question_bank import QuestionBank


def _q(exam_id: str, order: int, text: str, options: List[str], answer_index: int) -> Question:
    labels = "ABCDE"
    opts = [
        QuestionOption(label=labels[i], text=t, value=labels[i].lower())
        for i, t in enumerate(options)
    ]
    return Question(
        id=f"{exam_id}-q{order}",
        exam_id=exam_id,
        text=text,
        options=opts,
        correct_answer=opts[answer_index].value,
        order=order,
    )


_PY = "python-basics"
_NET = "networking-101"

SAMPLE_EXAMS: List[Tuple[Exam, List[Question]]] = [
    (
        Exam.from_minutes(
            15,
            id=_PY,
            title="Python 기초",
            description="자료형, 제어문, 함수에 대한 기초 문제",
            question_count=5,
            difficulty="easy",
            tags=["python", "programming"],
        ),
        [
            _q(_PY, 1, "len([1, 2, 3]) 의 결과는?", ["2", "3", "4", "오류"], 1),
            _q(_PY, 2, "변경 불가능(immutable)한 자료형은?", ["list", "dict", "tuple", "set"], 2),
            _q(_PY, 3, "함수를 정의하는 키워드는?", ["func", "def", "lambda", "fn"], 1),
            _q(_PY, 4, "3 // 2 의 결과는?", ["1", "1.5", "2", "0"], 0),
            _q(_PY, 5, "None 과 비교할 때 권장되는 연산자는?", ["==", "is", "=", "in"], 1),
            _q(_PY, 6, "예외를 발생시키는 키워드는?", ["throw", "raise", "except", "error"], 1),
        ],
    ),
    (
        Exam.from_minutes(
            30,
            id=_NET,
            title="네트워크 입문",
            description="OSI 계층과 기본 프로토콜",
            question_count=4,
            difficulty="medium",
            tags=["network"],
        ),
        [
            _q(_NET, 1, "HTTP 의 기본 포트는?", ["21", "25", "80", "443"], 2),
            _q(_NET, 2, "TCP 가 속한 OSI 계층은?", ["네트워크", "전송", "세션", "응용"], 1),
            _q(_NET, 3, "도메인 이름을 IP 로 바꾸는 프로토콜은?", ["DHCP", "ARP", "DNS", "SMTP"], 2),
            _q(_NET, 4, "IPv4 주소의 비트 수는?", ["16", "32", "64", "128"], 1),
        ],
    ),
]


def load_sample_exams(bank: QuestionBank) -> int:
    """샘플 시험을 문제은행에 적재하고 적재한 시험 수를 반환."""
    for exam, questions in SAMPLE_EXAMS:
        bank.load(exam, questions)
    return len(SAMPLE_EXAMS)

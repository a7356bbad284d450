"""
models/exam_model.py

시험(Exam) / 문제(Question) 정의 모델.
관리자 프로세스가 만든 뒤에는 읽기 전용. 코어는 변경하지 않는다.
Pydantic v2 적용.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QuestionOption(BaseModel):
    """보기 한 개. 채점은 label 이 아닌 value 로 비교한다."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="화면 표시용 라벨 (예: A, B)")
    text: str = Field(..., description="보기 내용")
    value: str = Field(..., min_length=1, description="제출/채점에 쓰이는 값")


class Question(BaseModel):
    """
    객관식 문제 모델.
    반드시 하나의 시험(exam_id)에 속하고, 정답은 정확히 하나.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="문제 고유 식별자")
    exam_id: str = Field(..., min_length=1, description="소속 시험 ID")
    text: str = Field(..., min_length=1, description="발문")
    options: List[QuestionOption] = Field(..., description="순서가 있는 보기 리스트")
    correct_answer: str = Field(..., description="정답 보기의 value")
    order: int = Field(default=0, ge=0, description="출제 기본 순서")

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: List[QuestionOption]) -> List[QuestionOption]:
        """
        검증 로직 1: 보기는 최소 2개 이상, value 는 중복 불가.
        """
        if len(v) < 2:
            raise ValueError("보기(options)는 최소 2개 이상의 항목이 필요합니다.")
        values = [opt.value for opt in v]
        if len(set(values)) != len(values):
            raise ValueError(f"보기 value 가 중복되었습니다: {values}")
        return v

    @model_validator(mode="after")
    def validate_answer_in_options(self) -> "Question":
        """
        검증 로직 2: 정답은 반드시 보기 value 중 하나여야 한다.
        """
        if self.correct_answer not in {opt.value for opt in self.options}:
            raise ValueError(
                f"정답('{self.correct_answer}')이 보기 value 목록에 존재하지 않습니다."
            )
        return self

    def to_public_dict(self) -> dict:
        """응시자에게 내려보낼 형태. 정답(correct_answer)은 제외."""
        return {
            "id": self.id,
            "exam_id": self.exam_id,
            "text": self.text,
            "options": [opt.model_dump() for opt in self.options],
            "order": self.order,
        }


class Exam(BaseModel):
    """시험 정의. 제한 시간은 내부적으로 항상 초 단위."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    duration_seconds: int = Field(..., gt=0, description="제한 시간 (초)")
    question_count: int = Field(..., ge=0, description="출제 목표 문항 수")
    difficulty: str = "medium"
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True

    @classmethod
    def from_minutes(cls, duration_minutes: int, **fields) -> "Exam":
        """분 단위로 작성된 시험 정의를 초 단위로 변환해 생성."""
        return cls(duration_seconds=duration_minutes * 60, **fields)

"""
models/session_state.py

시험 진행 상태를 담는 OMR 카드 모델과 채점 결과 스냅샷.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExamSession(BaseModel):
    """
    한 사용자의 한 시험에 대한 단일 응시 기록.

    Attributes:
        id:                세션 ID (uuid hex).
        user_id:           응시자 ID. 인증 계층이 넘겨준 값을 그대로 신뢰.
        exam_id:           시험 ID.
        started_at:        시작 시각 (UTC).
        submitted_at:      제출 시각. 진행 중이면 None.
        time_remaining:    남은 시간 (초). 진행 중에는 증가하지 않는다.
        answers:           답안지. {question.id: 선택한 보기 value}, 미응답은 키 없음.
        flagged_questions: 표시(flag)한 문제 ID 목록.
        is_completed:      제출 완료 여부. False → True 단방향.
    """

    id: str = Field(default_factory=_new_id)
    user_id: str
    exam_id: str
    started_at: datetime = Field(default_factory=utcnow)
    submitted_at: Optional[datetime] = None
    time_remaining: Optional[int] = Field(default=None, ge=0)
    answers: Dict[str, str] = Field(default_factory=dict)
    flagged_questions: List[str] = Field(default_factory=list)
    is_completed: bool = False


class SessionUpdate(BaseModel):
    """
    자동저장 페이로드. 지정한 필드만 교체(full replace)하고 나머지는 유지.
    클라이언트는 매번 현재 답안 전체를 보낸다.
    """

    model_config = ConfigDict(extra="forbid")

    answers: Optional[Dict[str, str]] = None
    flagged_questions: Optional[List[str]] = None
    time_remaining: Optional[int] = Field(default=None, ge=0)

    @field_validator("flagged_questions")
    @classmethod
    def dedupe_flags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        # 순서 유지 중복 제거
        return list(dict.fromkeys(v))

    def provided_fields(self) -> Dict[str, object]:
        """요청에 실제로 포함된 필드만 반환. 명시적 null 은 '미지정'으로 취급."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class ExamResult(BaseModel):
    """제출된 세션 하나당 정확히 한 번 생성되는 채점 결과. 생성 후 불변."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    session_id: str
    user_id: str
    exam_id: str
    score: int = Field(..., ge=0, le=100, description="100점 만점 환산 점수")
    correct_answers: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    time_taken: int = Field(..., ge=0, description="소요 시간 (초)")
    passed: bool
    completed_at: datetime = Field(default_factory=utcnow)

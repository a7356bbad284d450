"""
api/routes.py — FastAPI 엔드포인트

코어(ExamSessionManager) 호출을 HTTP 로 노출하는 얇은 계층.
  - 호출자 식별: X-User-Id 헤더 (상위 인증 계층이 검증한 값을 그대로 신뢰)
  - 코어 예외 → HTTP 상태 코드 변환
상태는 갖지 않으며 매니저 인스턴스는 app.state.manager 에 있다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response, status

from timed_cbt.errors import (
    AlreadyCompletedError,
    ExamError,
    ForbiddenError,
    InvalidExamError,
    NotFoundError,
    SessionValidationError,
)
from timed_cbt.models.exam_model import Exam
from timed_cbt.models.session_state import ExamResult, ExamSession, SessionUpdate
from timed_cbt.services.session_manager import ExamSessionManager

router = APIRouter()


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyCompletedError: status.HTTP_400_BAD_REQUEST,
    SessionValidationError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    InvalidExamError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _to_http(e: ExamError) -> HTTPException:
    code = _STATUS_BY_ERROR.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(e))


def get_manager(request: Request) -> ExamSessionManager:
    return request.app.state.manager


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="인증 정보가 필요합니다.")
    return x_user_id.strip()


def _exam_to_dict(exam: Exam) -> dict:
    return {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "duration_seconds": exam.duration_seconds,
        "question_count": exam.question_count,
        "difficulty": exam.difficulty,
        "tags": list(exam.tags),
    }


# ── 시험 ─────────────────────────────────────────────────────────────────────

@router.get("/api/exams")
async def list_exams(
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    return [_exam_to_dict(e) for e in manager.list_active_exams()]


@router.get("/api/exams/{exam_id}")
async def get_exam(
    exam_id: str,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        return _exam_to_dict(manager.get_exam(exam_id))
    except ExamError as e:
        raise _to_http(e)


@router.post("/api/exams/{exam_id}/start", response_model=ExamSession)
async def start_exam(
    exam_id: str,
    response: Response,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        session, created = manager.start_session(user_id, exam_id)
    except ExamError as e:
        raise _to_http(e)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return session


@router.get("/api/exams/{exam_id}/questions")
async def get_questions(
    exam_id: str,
    count: Optional[int] = Query(default=None, ge=1),
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        questions = manager.select_questions(exam_id, user_id, count)
    except ExamError as e:
        raise _to_http(e)
    return [q.to_public_dict() for q in questions]


# ── 세션 ─────────────────────────────────────────────────────────────────────

@router.get("/api/exam-sessions/{session_id}", response_model=ExamSession)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        return manager.get_session(session_id, user_id)
    except ExamError as e:
        raise _to_http(e)


@router.patch("/api/exam-sessions/{session_id}", response_model=ExamSession)
async def autosave(
    session_id: str,
    body: SessionUpdate,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        return manager.autosave(session_id, user_id, body)
    except ExamError as e:
        raise _to_http(e)


@router.post("/api/exam-sessions/{session_id}/submit", response_model=ExamResult)
async def submit_exam(
    session_id: str,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        return manager.submit(session_id, user_id)
    except ExamError as e:
        raise _to_http(e)


# ── 결과 ─────────────────────────────────────────────────────────────────────

@router.get("/api/results", response_model=list[ExamResult])
async def list_results(
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    return manager.list_results(user_id)


@router.get("/api/results/{result_id}", response_model=ExamResult)
async def get_result(
    result_id: str,
    user_id: str = Depends(get_user_id),
    manager: ExamSessionManager = Depends(get_manager),
):
    try:
        return manager.get_result(result_id, user_id)
    except ExamError as e:
        raise _to_http(e)

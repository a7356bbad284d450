"""
api/app.py — FastAPI 앱 인스턴스 + 코어 조립 + 요청 검증 오류 처리
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS, LOAD_SAMPLE_EXAMS
from api.routes import router
from api.sample_exams import load_sample_exams
from timed_cbt.services.question_bank import QuestionBank
from timed_cbt.services.session_manager import ExamSessionManager
from timed_cbt.storage.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)


def build_manager(load_samples: bool = LOAD_SAMPLE_EXAMS) -> ExamSessionManager:
    """기본 구성: 인메모리 문제은행 + 인메모리 세션 저장소."""
    bank = QuestionBank()
    if load_samples:
        count = load_sample_exams(bank)
        logger.info(f"샘플 시험 {count}개 적재")
    return ExamSessionManager(bank, InMemorySessionStore())


def create_app(manager: Optional[ExamSessionManager] = None) -> FastAPI:
    app = FastAPI(title="Timed CBT", docs_url=None, redoc_url=None)
    app.state.manager = manager or build_manager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 잘못된 요청 본문은 422 대신 400 으로 통일
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "요청 형식이 올바르지 않습니다.", "errors": jsonable_errors(exc)},
        )

    app.include_router(router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx 에 예외 객체가 들어 있을 수 있어 문자열화 가능한 필드만 남긴다
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]

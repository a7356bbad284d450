"""
services/session_manager.py

시험 세션 상태 머신.
Public API:
  - start_session(user_id, exam_id) -> (ExamSession, created)
  - select_questions(exam_id, user_id, count) -> List[Question]
  - autosave(session_id, user_id, update) -> ExamSession
  - submit(session_id, user_id) -> ExamResult
  - get_session / get_result / list_results / get_exam / list_active_exams

설계 원칙:
- 소유자가 아니면 '없음'과 똑같이 NotFoundError (존재 여부 노출 방지)
- 세션 변경은 전부 저장소의 세션별 원자 연산 안에서 수행
- 재시도는 호출자 몫. 자동저장은 멱등, 제출은 정확히 한 번

제한 시간 정책 (config.TIME_LIMIT_POLICY):
  서버는 기본적으로 제한 시간을 강제하지 않는다 ("accept").
  시간이 지난 뒤 도착한 제출도 마지막으로 자동저장된 남은 시간으로 정상 채점하고,
  경과 시간이 제한 시간 + 유예를 넘으면 경고 로그만 남긴다.
  "clamp" 로 설정하면 남은 시간을 서버 시각 기준 값으로 상한 고정한 뒤 채점한다.
"""

import logging
import random
from datetime import datetime
from typing import Callable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from config import (
    DEFAULT_QUESTION_COUNT,
    PASS_SCORE,
    TIME_LIMIT_GRACE_SECONDS,
    TIME_LIMIT_POLICY,
)
from timed_cbt.errors import (
    AlreadyCompletedError,
    ForbiddenError,
    InvalidExamError,
    NotFoundError,
    SessionValidationError,
)
from timed_cbt.models.exam_model import Exam, Question
from timed_cbt.models.session_state import ExamResult, ExamSession, SessionUpdate, utcnow
from timed_cbt.services.question_bank import QuestionBank, sample_questions
from timed_cbt.services.scoring import score_answers
from timed_cbt.storage.session_store import InMemorySessionStore

logger = logging.getLogger(__name__)

TIME_LIMIT_POLICIES = ("accept", "clamp")


class ExamSessionManager:
    def __init__(
        self,
        bank: QuestionBank,
        store: InMemorySessionStore,
        pass_score: int = PASS_SCORE,
        time_limit_policy: str = TIME_LIMIT_POLICY,
        grace_seconds: int = TIME_LIMIT_GRACE_SECONDS,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if time_limit_policy not in TIME_LIMIT_POLICIES:
            raise ValueError(
                f"알 수 없는 제한 시간 정책: {time_limit_policy!r} (허용: {TIME_LIMIT_POLICIES})"
            )
        self.bank = bank
        self.store = store
        self.pass_score = pass_score
        self.time_limit_policy = time_limit_policy
        self.grace_seconds = grace_seconds
        self._rng = rng or random.Random()
        self._clock = clock

    # ── 시험 조회 ────────────────────────────────────────────────────────────

    def list_active_exams(self) -> List[Exam]:
        return self.bank.list_active_exams()

    def get_exam(self, exam_id: str) -> Exam:
        """활성 시험만 반환. 없거나 비활성이면 NotFoundError."""
        exam = self.bank.get_exam(exam_id)
        if exam is None or not exam.is_active:
            raise NotFoundError("시험을 찾을 수 없습니다.")
        return exam

    # ── 세션 ─────────────────────────────────────────────────────────────────

    def start_session(self, user_id: str, exam_id: str) -> Tuple[ExamSession, bool]:
        """
        시험 시작. 진행 중 세션이 있으면 그대로 돌려준다 (새로고침/중복 요청 대비).

        Returns:
            (세션, 새로 생성했는지 여부)
        """
        exam = self.get_exam(exam_id)

        def _new_session() -> ExamSession:
            return ExamSession(
                user_id=user_id,
                exam_id=exam.id,
                started_at=self._clock(),
                time_remaining=exam.duration_seconds,
            )

        session, created = self.store.get_or_create_active(user_id, exam.id, _new_session)
        if created:
            logger.info(f"세션 생성: session={session.id} user={user_id} exam={exam.id}")
        else:
            logger.info(f"진행 중 세션 재사용: session={session.id} user={user_id}")
        return session, created

    def get_session(self, session_id: str, user_id: str) -> ExamSession:
        session = self.store.get(session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError("세션을 찾을 수 없습니다.")
        return session

    def select_questions(
        self,
        exam_id: str,
        user_id: str,
        count: Optional[int] = None,
    ) -> List[Question]:
        """
        진행 중 세션이 있는 사용자에게 무작위 문제 세트를 준다.
        호출할 때마다 구성/순서가 달라질 수 있다.
        """
        exam = self.bank.get_exam(exam_id)
        if exam is None:
            raise NotFoundError("시험을 찾을 수 없습니다.")
        if self.store.find_active(user_id, exam_id) is None:
            raise ForbiddenError("진행 중인 시험 세션이 없습니다.")

        if count is None:
            count = exam.question_count or DEFAULT_QUESTION_COUNT
        return sample_questions(self.bank.get_questions(exam_id), count, self._rng)

    @staticmethod
    def _check_writable(session: ExamSession, user_id: str) -> None:
        # 소유권 검사를 먼저. 남의 세션이면 완료 여부도 알려주지 않는다
        if session.user_id != user_id:
            raise NotFoundError("세션을 찾을 수 없습니다.")
        if session.is_completed:
            raise AlreadyCompletedError("이미 제출된 시험입니다.")

    def autosave(
        self,
        session_id: str,
        user_id: str,
        update: Union[SessionUpdate, Mapping[str, object]],
    ) -> ExamSession:
        """
        진행 상태 자동저장. 요청에 포함된 필드만 교체하고 나머지는 유지한다.
        같은 요청을 두 번 적용해도 결과는 같다.
        """
        if not isinstance(update, SessionUpdate):
            try:
                update = SessionUpdate.model_validate(update)
            except ValidationError as e:
                raise SessionValidationError(str(e)) from e
        fields = update.provided_fields()

        def _apply(current: ExamSession) -> ExamSession:
            self._check_writable(current, user_id)
            if not fields:
                return current

            changes = dict(fields)
            valid_ids = self.bank.question_ids(current.exam_id)
            if "answers" in changes:
                unknown = sorted(set(changes["answers"]) - valid_ids)
                if unknown:
                    raise SessionValidationError(f"이 시험에 없는 문제입니다: {unknown}")
            if "flagged_questions" in changes:
                unknown = sorted(set(changes["flagged_questions"]) - valid_ids)
                if unknown:
                    raise SessionValidationError(f"이 시험에 없는 문제입니다: {unknown}")
            if "time_remaining" in changes and current.time_remaining is not None:
                # 남은 시간은 늘어나지 않는다
                changes["time_remaining"] = min(changes["time_remaining"], current.time_remaining)
            return current.model_copy(update=changes)

        return self.store.update(session_id, _apply)

    def _remaining_at_submit(self, exam: Exam, session: ExamSession, now: datetime) -> Optional[int]:
        elapsed = int((now - session.started_at).total_seconds())
        if elapsed > exam.duration_seconds + self.grace_seconds:
            logger.warning(
                f"제한 시간 초과 제출: session={session.id} "
                f"elapsed={elapsed}s limit={exam.duration_seconds}s policy={self.time_limit_policy}"
            )
        if self.time_limit_policy == "clamp":
            server_remaining = max(0, exam.duration_seconds - elapsed)
            if session.time_remaining is None:
                return server_remaining
            return min(session.time_remaining, server_remaining)
        return session.time_remaining

    def submit(self, session_id: str, user_id: str) -> ExamResult:
        """
        최종 제출: 채점 → 완료 처리 → 결과 1건 저장을 원자적으로 수행.
        두 번째 제출은 AlreadyCompletedError.
        """

        def _finalize(current: ExamSession) -> Tuple[ExamSession, ExamResult]:
            self._check_writable(current, user_id)
            exam = self.bank.get_exam(current.exam_id)
            if exam is None:
                raise InvalidExamError(f"세션의 시험 정의가 없습니다: {current.exam_id}")

            now = self._clock()
            remaining = self._remaining_at_submit(exam, current, now)
            summary = score_answers(
                current.answers,
                self.bank.get_questions(exam.id),
                exam.duration_seconds,
                remaining,
                self.pass_score,
            )
            completed = current.model_copy(
                update={"is_completed": True, "submitted_at": now, "time_remaining": remaining}
            )
            result = ExamResult(
                session_id=current.id,
                user_id=current.user_id,
                exam_id=exam.id,
                score=summary.score,
                correct_answers=summary.correct,
                total_questions=summary.total,
                time_taken=summary.time_taken,
                passed=summary.passed,
                completed_at=now,
            )
            return completed, result

        result = self.store.complete(session_id, _finalize)
        logger.info(
            f"제출 완료: session={session_id} score={result.score} "
            f"({result.correct_answers}/{result.total_questions}) passed={result.passed}"
        )
        return result

    # ── 결과 ─────────────────────────────────────────────────────────────────

    def get_result(self, result_id: str, user_id: str) -> ExamResult:
        result = self.store.get_result(result_id)
        if result is None or result.user_id != user_id:
            raise NotFoundError("결과를 찾을 수 없습니다.")
        return result

    def list_results(self, user_id: str) -> List[ExamResult]:
        return self.store.list_results(user_id)

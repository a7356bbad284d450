"""
storage/session_store.py — 시험 세션/결과 인메모리 저장소

세션 ID 키 기반 저장소. 원자성 보장 지점:
  - get_or_create_active : (user_id, exam_id) 당 진행 중 세션 1개 (유니크 인덱스 역할)
  - update               : 세션별 락 안에서 read-modify-write
  - complete             : 세션별 락 안에서 is_completed False → True CAS + 결과 1건 기록

락 순서: 세션별 락 → 전역 락. 전역 락을 잡은 채 세션별 락을 잡지 않는다.
저장/반환 시 항상 깊은 복사본을 주고받아 외부에서 내부 상태를 바꿀 수 없다.
"""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from timed_cbt.errors import AlreadyCompletedError, NotFoundError
from timed_cbt.models.session_state import ExamResult, ExamSession

ActiveKey = Tuple[str, str]


class InMemorySessionStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, ExamSession] = {}
        self._session_locks: Dict[str, threading.Lock] = {}
        self._active: Dict[ActiveKey, str] = {}
        self._results: Dict[str, ExamResult] = {}
        self._result_by_session: Dict[str, str] = {}

    # ── 세션 ─────────────────────────────────────────────────────────────────

    def get_or_create_active(
        self,
        user_id: str,
        exam_id: str,
        factory: Callable[[], ExamSession],
    ) -> Tuple[ExamSession, bool]:
        """
        진행 중 세션이 있으면 그대로, 없으면 factory() 로 만들어 저장.
        조회와 생성이 하나의 임계 구역 안에서 일어난다.

        Returns:
            (세션 복사본, 새로 생성했는지 여부)
        """
        key = (user_id, exam_id)
        with self._lock:
            existing_id = self._active.get(key)
            if existing_id is not None:
                return self._sessions[existing_id].model_copy(deep=True), False

            session = factory()
            if (session.user_id, session.exam_id) != key or session.is_completed:
                raise ValueError("factory 가 만든 세션이 요청 키와 맞지 않습니다.")
            if session.id in self._sessions:
                raise ValueError(f"세션 ID 충돌: {session.id}")

            self._sessions[session.id] = session.model_copy(deep=True)
            self._session_locks[session.id] = threading.Lock()
            self._active[key] = session.id
            return session.model_copy(deep=True), True

    def get(self, session_id: str) -> Optional[ExamSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def find_active(self, user_id: str, exam_id: str) -> Optional[ExamSession]:
        with self._lock:
            session_id = self._active.get((user_id, exam_id))
            if session_id is None:
                return None
            return self._sessions[session_id].model_copy(deep=True)

    def count_active(self, user_id: str, exam_id: str) -> int:
        with self._lock:
            return sum(
                1
                for s in self._sessions.values()
                if s.user_id == user_id and s.exam_id == exam_id and not s.is_completed
            )

    def _session_lock(self, session_id: str) -> threading.Lock:
        with self._lock:
            lock = self._session_locks.get(session_id)
        if lock is None:
            raise NotFoundError("세션을 찾을 수 없습니다.")
        return lock

    def update(
        self,
        session_id: str,
        mutate: Callable[[ExamSession], ExamSession],
    ) -> ExamSession:
        """
        세션별 락 안에서 mutate(현재 상태) 결과로 교체.
        mutate 가 예외를 던지면 아무것도 기록하지 않는다.
        """
        with self._session_lock(session_id):
            current = self.get(session_id)
            updated = mutate(current)
            if updated.id != session_id:
                raise ValueError("세션 ID 는 변경할 수 없습니다.")
            with self._lock:
                self._sessions[session_id] = updated.model_copy(deep=True)
            return updated.model_copy(deep=True)

    def complete(
        self,
        session_id: str,
        finalize: Callable[[ExamSession], Tuple[ExamSession, ExamResult]],
    ) -> ExamResult:
        """
        세션 종료 + 결과 저장을 한 번에 수행.

        finalize(현재 상태) 는 (완료 처리된 세션, 결과) 를 돌려준다.
        완료 플래그 CAS 에서 진 호출은 AlreadyCompletedError.
        """
        with self._session_lock(session_id):
            current = self.get(session_id)
            completed, result = finalize(current)
            if current.is_completed:
                raise AlreadyCompletedError("이미 제출된 시험입니다.")
            if not completed.is_completed or completed.id != session_id:
                raise ValueError("finalize 는 같은 세션을 완료 상태로 돌려줘야 합니다.")
            if result.session_id != session_id:
                raise ValueError("결과의 session_id 가 일치하지 않습니다.")

            with self._lock:
                if session_id in self._result_by_session:
                    raise AlreadyCompletedError("이미 채점 결과가 존재합니다.")
                self._sessions[session_id] = completed.model_copy(deep=True)
                key = (completed.user_id, completed.exam_id)
                if self._active.get(key) == session_id:
                    del self._active[key]
                self._results[result.id] = result
                self._result_by_session[session_id] = result.id
            return result

    # ── 결과 ─────────────────────────────────────────────────────────────────

    def get_result(self, result_id: str) -> Optional[ExamResult]:
        with self._lock:
            return self._results.get(result_id)

    def result_for_session(self, session_id: str) -> Optional[ExamResult]:
        with self._lock:
            result_id = self._result_by_session.get(session_id)
            return self._results.get(result_id) if result_id else None

    def list_results(self, user_id: str) -> List[ExamResult]:
        """사용자의 결과 목록 (최근 완료 순)."""
        with self._lock:
            mine = [r for r in self._results.values() if r.user_id == user_id]
        return sorted(mine, key=lambda r: r.completed_at, reverse=True)

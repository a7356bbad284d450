"""
errors.py

시험 세션 코어의 예외 계층.
코어는 실패를 조용히 넘기지 않고 아래 타입으로 raise 한다.
HTTP 상태 코드 변환은 api/routes.py 에서 담당.
"""


class ExamError(Exception):
    """코어 예외의 공통 부모."""


class NotFoundError(ExamError):
    """대상이 없거나 호출자 소유가 아님 (두 경우를 구분하지 않는다)."""


class AlreadyCompletedError(ExamError):
    """이미 제출 완료된 세션을 변경하려고 함."""


class SessionValidationError(ExamError):
    """자동저장 페이로드가 잘못됨."""


class InvalidExamError(ExamError):
    """문제가 0개인 시험이 채점 단계에 도달함 (데이터 무결성 오류)."""


class ForbiddenError(ExamError):
    """진행 중인 세션 없이 문제 목록을 요청함."""

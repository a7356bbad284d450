import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.getenv("LOG_FILE", os.path.join(BASE_DIR, "server.log"))

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# 채점 정책
PASS_SCORE = int(os.getenv("PASS_SCORE", "70"))                  # 합격 기준 점수 (100점 만점)
DEFAULT_QUESTION_COUNT = int(os.getenv("DEFAULT_QUESTION_COUNT", "25"))  # 시험에 목표 문항 수가 없을 때

# 제한 시간 정책
#   accept : 마지막 자동저장된 남은 시간 그대로 채점 (초과 시 경고 로그만)
#   clamp  : 제출 시각 기준 서버 계산 남은 시간으로 상한 고정
TIME_LIMIT_POLICY = os.getenv("TIME_LIMIT_POLICY", "accept")
TIME_LIMIT_GRACE_SECONDS = int(os.getenv("TIME_LIMIT_GRACE_SECONDS", "30"))

# 샘플 시험 적재
LOAD_SAMPLE_EXAMS = _env_bool("LOAD_SAMPLE_EXAMS", "true")

"""
main.py — Timed CBT API 서버 진입점
"""

import logging
import sys

from config import DEFAULT_HOST, DEFAULT_PORT, LOG_FILE

# ── 로깅 설정 ────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # 로그 파일 점유 시 콘솔 출력만 사용
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)


def main() -> None:
    import uvicorn
    from api.app import create_app

    logger.info(f"=== Timed CBT 서버 시작 - {DEFAULT_HOST}:{DEFAULT_PORT} ===")
    app = create_app()
    uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT, log_level="info")


if __name__ == "__main__":
    main()

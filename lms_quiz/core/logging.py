# lms_quiz/core/logging.py
"""
로깅 설정
- 프로세스 전역 설정은 main.py(조립 지점)에서 한 번만 호출
- 각 컴포넌트는 get_logger 의존성으로 받은 로거를 인자로 넘겨받는다
"""
import logging

APP_LOGGER_NAME = "lms_quiz"


def configure_logging(level: str = "info") -> logging.Logger:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return logging.getLogger(APP_LOGGER_NAME)


def get_logger() -> logging.Logger:
    """FastAPI 의존성: 요청 처리 경로에 앱 로거 주입"""
    return logging.getLogger(APP_LOGGER_NAME)

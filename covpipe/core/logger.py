"""
로깅 서비스

loguru 기반 구조화된 로깅
"""
import sys
from pathlib import Path
from typing import Any

from loguru import logger


class LoggerService:
    """
    로깅 서비스

    사용법:
        from covpipe.core.logger import get_logger

        logger = get_logger(__name__)
        logger.info("단계 시작")
        logger.error("단계 실패", stage="build")
    """

    _configured: bool = False

    @classmethod
    def configure(
        cls,
        level: str = "INFO",
        log_dir: str = "./logs",
        log_format: str | None = None,
        file_enabled: bool = False,
        colorize: bool | None = None,
        rotation: str = "10 MB",
        retention: str = "7 days",
    ) -> None:
        """
        로거 설정

        Args:
            level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: 로그 파일 디렉토리
            log_format: 로그 포맷 (None이면 기본값 사용)
            file_enabled: 파일 로깅 활성화 여부
            colorize: 콘솔 색상 (None이면 터미널 여부로 자동 결정)
            rotation: 로그 파일 로테이션 크기
            retention: 로그 파일 보관 기간
        """
        if cls._configured:
            return

        # 기존 핸들러 제거
        logger.remove()

        if log_format is None:
            log_format = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[name]}</cyan> | "
                "<level>{message}</level>"
            )

        # bind 없이 호출된 로그도 포맷이 깨지지 않도록
        logger.configure(extra={"name": "covpipe"})

        # 콘솔 핸들러
        logger.add(
            sys.stderr,
            format=log_format,
            level=level,
            colorize=colorize,
        )

        # 파일 핸들러
        if file_enabled:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            logger.add(
                log_path / "pipeline.log",
                format=log_format,
                level=level,
                rotation=rotation,
                retention=retention,
                compression="zip",
                encoding="utf-8",
                colorize=False,
            )

            # 에러 전용 로그
            logger.add(
                log_path / "error.log",
                format=log_format,
                level="ERROR",
                rotation=rotation,
                retention=retention,
                compression="zip",
                encoding="utf-8",
                colorize=False,
            )

        cls._configured = True

    @classmethod
    def reset(cls) -> None:
        """설정 리셋 (테스트용)"""
        logger.remove()
        cls._configured = False


def get_logger(name: str) -> Any:
    """
    모듈별 로거 반환

    Args:
        name: 모듈 이름 (보통 __name__ 사용)

    Returns:
        loguru logger 인스턴스
    """
    return logger.bind(name=name)


def setup_logger_from_config(colorize: bool | None = None) -> None:
    """
    설정 파일 기반 로거 초기화

    Args:
        colorize: 색상 출력 강제 여부 (CARGO_TERM_COLOR 등 트리거 환경에서 결정)
    """
    from covpipe.core.config import get_config
    from covpipe.core.exceptions import ConfigError

    try:
        logging_config = get_config().get_section("logging")
    except ConfigError:
        # 설정 로드 실패 시 기본 설정 사용
        LoggerService.configure(colorize=colorize)
        return

    file_config = logging_config.get("file", {}) or {}
    LoggerService.configure(
        level=logging_config.get("level", "INFO"),
        log_dir=logging_config.get("log_dir", "./logs"),
        log_format=logging_config.get("format"),
        file_enabled=file_config.get("enabled", False),
        colorize=colorize,
        rotation=file_config.get("rotation", "10 MB"),
        retention=file_config.get("retention", "7 days"),
    )

"""
커스텀 예외 클래스 정의

파이프라인 전 구간에서 사용하는 표준화된 예외 처리
"""
from typing import Any


class BaseError(Exception):
    """모든 커스텀 예외의 기본 클래스"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ============================================
# Configuration Errors
# ============================================
class ConfigError(BaseError):
    """설정 관련 오류"""
    pass


class ConfigNotFoundError(ConfigError):
    """설정 파일을 찾을 수 없음"""
    pass


class ConfigValidationError(ConfigError):
    """설정 값 유효성 검증 실패"""
    pass


# ============================================
# Pipeline Errors
# ============================================
class PipelineError(BaseError):
    """파이프라인 실행 관련 오류"""
    pass


class PipelineDefinitionError(PipelineError):
    """단계 정의가 잘못됨 (빈 목록, 중복 이름, 알 수 없는 트리거 등)"""
    pass


class StageExecutionFailure(PipelineError):
    """
    액션 실행 실패 (출력 보존)

    액션은 자신이 속한 단계를 모르므로 stage_name은 StageRunner가 채운다
    """

    def __init__(self, message: str, output: str = "", stage_name: str | None = None):
        super().__init__(message)
        self.output = output
        self.stage_name = stage_name


class PipelineAborted(PipelineError):
    """허용되지 않은 단계 실패로 파이프라인 중단"""

    def __init__(self, stage_name: str, reason: str | None = None):
        message = f"파이프라인 중단: {stage_name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, {"stage": stage_name})
        self.stage_name = stage_name


# ============================================
# Coverage Errors
# ============================================
class CoverageError(BaseError):
    """커버리지 데이터 관련 오류"""
    pass


class LcovParseError(CoverageError):
    """LCOV 파싱 실패"""

    def __init__(self, message: str, line_no: int | None = None):
        super().__init__(message, {"line": line_no} if line_no is not None else None)
        self.line_no = line_no


# ============================================
# Publish Errors
# ============================================
class PublishError(BaseError):
    """커버리지 업로드 실패"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code

"""
Core 모듈 - 공통 인프라

- config: 설정 관리
- logger: 로깅 서비스
- exceptions: 커스텀 예외
- interfaces: 핵심 인터페이스
"""
from covpipe.core.config import Config, get_config
from covpipe.core.logger import get_logger, LoggerService, setup_logger_from_config
from covpipe.core.exceptions import (
    BaseError,
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    PipelineError,
    PipelineDefinitionError,
    StageExecutionFailure,
    PipelineAborted,
    CoverageError,
    LcovParseError,
    PublishError,
)
from covpipe.core.interfaces import (
    EventKind,
    TriggerContext,
    Workspace,
    ActionOutcome,
    StageAction,
    Stage,
)

__all__ = [
    # Config
    "Config",
    "get_config",
    # Logger
    "get_logger",
    "LoggerService",
    "setup_logger_from_config",
    # Exceptions
    "BaseError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "PipelineError",
    "PipelineDefinitionError",
    "StageExecutionFailure",
    "PipelineAborted",
    "CoverageError",
    "LcovParseError",
    "PublishError",
    # Interfaces
    "EventKind",
    "TriggerContext",
    "Workspace",
    "ActionOutcome",
    "StageAction",
    "Stage",
]

"""
Actions: 단계 액션 구현

- command: 외부 명령 / 환경 변수 export
- coverage: LCOV 요약 / Coveralls 업로드
"""
from covpipe.actions.command import CommandAction, ExportEnvAction, parse_exports
from covpipe.actions.coverage import LcovSummaryAction, CoverallsUploadAction

__all__ = [
    "CommandAction",
    "ExportEnvAction",
    "parse_exports",
    "LcovSummaryAction",
    "CoverallsUploadAction",
]

"""
Orchestrator: 파이프라인 실행 조율

단계를 순차적으로 실행하고 결과를 집계
"""
from covpipe.orchestrator.pipeline import Pipeline, PipelineReport, PipelineStatus, validate_stages
from covpipe.orchestrator.stage_runner import StageRunner, StageResult, StageStatus
from covpipe.orchestrator.conditions import always, event_is, env_equals, only_upstream_call

__all__ = [
    "Pipeline",
    "PipelineReport",
    "PipelineStatus",
    "validate_stages",
    "StageRunner",
    "StageResult",
    "StageStatus",
    "always",
    "event_is",
    "env_equals",
    "only_upstream_call",
]

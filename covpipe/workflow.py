"""
Workflow 정의 로더

YAML 파일의 단계 목록을 Stage 객체로 변환

형식:
    name: coverage
    stages:
      - name: build
        run: [cargo, build]          # 외부 명령 (문자열이면 shlex 분리)
      - name: instrument
        export_env: cargo llvm-cov show-env --export-prefix
      - name: summary
        uses: lcov_summary           # 내장 액션
        with: {path: coverage.lcov}
      - name: upload
        uses: coveralls_upload
        if: {event_kind: [upstream_call]}
        continue_on_error: true
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

from covpipe.actions import CommandAction, CoverallsUploadAction, ExportEnvAction, LcovSummaryAction
from covpipe.core.exceptions import PipelineDefinitionError
from covpipe.core.interfaces import Condition, Stage, StageAction
from covpipe.core.logger import get_logger
from covpipe.orchestrator.conditions import env_equals, event_is
from covpipe.orchestrator.pipeline import validate_stages


logger = get_logger(__name__)

# 내장 액션 레지스트리 (uses: 이름 -> 생성자)
BUILTIN_ACTIONS: dict[str, Callable[..., StageAction]] = {
    "lcov_summary": LcovSummaryAction,
    "coveralls_upload": CoverallsUploadAction,
}

ACTION_KEYS = ("run", "export_env", "uses")
STAGE_KEYS = {"name", "if", "continue_on_error", "with", *ACTION_KEYS}


@dataclass
class Workflow:
    """YAML에서 읽은 파이프라인 정의"""
    name: str
    stages: list[Stage]


def _build_action(spec: dict[str, Any], stage_name: str) -> StageAction:
    keys = [k for k in ACTION_KEYS if k in spec]
    if len(keys) != 1:
        raise PipelineDefinitionError(
            f"단계 '{stage_name}'에는 run/export_env/uses 중 정확히 하나가 필요합니다",
            {"stage": stage_name, "found": keys},
        )

    key = keys[0]
    value = spec[key]
    options = spec.get("with") or {}

    try:
        if key == "run":
            return CommandAction(value)
        if key == "export_env":
            return ExportEnvAction(value)

        factory = BUILTIN_ACTIONS.get(value)
        if factory is None:
            raise PipelineDefinitionError(
                f"알 수 없는 내장 액션: {value}",
                {"stage": stage_name, "available": sorted(BUILTIN_ACTIONS)},
            )
        return factory(**options)

    except (TypeError, ValueError) as e:
        raise PipelineDefinitionError(f"단계 '{stage_name}' 액션 정의 오류: {e}") from e


def _build_condition(spec: Any, stage_name: str) -> Condition | None:
    if spec is None:
        return None
    if not isinstance(spec, dict):
        raise PipelineDefinitionError(f"단계 '{stage_name}'의 if는 매핑이어야 합니다")

    env = spec.get("env") or {}
    if not isinstance(env, dict):
        raise PipelineDefinitionError(
            f"단계 '{stage_name}'의 if.env는 매핑이어야 합니다", {"env": env}
        )

    conditions: list[Condition] = []
    try:
        if "event_kind" in spec:
            kinds = spec["event_kind"]
            if isinstance(kinds, str):
                kinds = [kinds]
            conditions.append(event_is(*kinds))
        for name, value in env.items():
            conditions.append(env_equals(name, str(value)))
    except ValueError as e:
        raise PipelineDefinitionError(f"단계 '{stage_name}' 조건 오류: {e}") from e

    unknown = set(spec) - {"event_kind", "env"}
    if unknown:
        raise PipelineDefinitionError(f"단계 '{stage_name}'의 알 수 없는 조건: {sorted(unknown)}")
    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return lambda trigger: all(c(trigger) for c in conditions)


def build_stage(spec: dict[str, Any]) -> Stage:
    """단계 정의 1개를 Stage로 변환"""
    if not isinstance(spec, dict) or not spec.get("name"):
        raise PipelineDefinitionError(f"단계 정의에 name이 없습니다: {spec!r}")

    name = str(spec["name"])
    unknown = set(spec) - STAGE_KEYS
    if unknown:
        raise PipelineDefinitionError(f"단계 '{name}'의 알 수 없는 키: {sorted(unknown)}")

    continue_on_error = spec.get("continue_on_error", False)
    if not isinstance(continue_on_error, bool):
        raise PipelineDefinitionError(f"단계 '{name}'의 continue_on_error는 bool이어야 합니다")

    return Stage(
        name=name,
        action=_build_action(spec, name),
        condition=_build_condition(spec.get("if"), name),
        fault_tolerant=continue_on_error,
    )


def build_workflow(definition: dict[str, Any]) -> Workflow:
    """dict 정의 -> Workflow"""
    if not isinstance(definition, dict):
        raise PipelineDefinitionError("workflow 정의는 매핑이어야 합니다")

    stage_specs = definition.get("stages")
    if not isinstance(stage_specs, list):
        raise PipelineDefinitionError("workflow에 stages 목록이 없습니다")

    stages = [build_stage(spec) for spec in stage_specs]
    validate_stages(stages)

    return Workflow(name=str(definition.get("name", "pipeline")), stages=stages)


def load_workflow(path: Path | str) -> Workflow:
    """YAML 파일에서 Workflow 로드"""
    path = Path(path)
    if not path.exists():
        raise PipelineDefinitionError(f"workflow 파일을 찾을 수 없습니다: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            definition = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PipelineDefinitionError(f"YAML 파싱 오류: {path}", {"error": str(e)}) from e

    workflow = build_workflow(definition)
    logger.debug(f"workflow 로드: {workflow.name} ({len(workflow.stages)}단계)")
    return workflow

"""
Pipeline: 커버리지 파이프라인 실행기

단계를 선언 순서대로 실행하고 결과를 PipelineReport로 집계.
허용되지 않은 실패가 나오면 즉시 중단 (이후 단계는 기록도 남기지 않음)
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Sequence

from covpipe.core.logger import get_logger
from covpipe.core.exceptions import PipelineAborted, PipelineDefinitionError
from covpipe.core.interfaces import EventKind, Stage, TriggerContext, Workspace
from covpipe.orchestrator.stage_runner import StageRunner, StageResult, StageStatus


class PipelineStatus(Enum):
    """파이프라인 전체 상태"""
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class PipelineReport:
    """파이프라인 실행 결과"""
    event_kind: EventKind
    started_at: datetime
    completed_at: datetime | None = None
    stage_results: list[StageResult] = field(default_factory=list)
    label: str = ""

    @property
    def status(self) -> PipelineStatus:
        if any(r.is_fatal for r in self.stage_results):
            return PipelineStatus.FAILED
        return PipelineStatus.PASSED

    @property
    def passed(self) -> bool:
        return self.status == PipelineStatus.PASSED

    @property
    def aborted_by(self) -> str | None:
        """중단을 일으킨 단계 이름"""
        for result in self.stage_results:
            if result.is_fatal:
                return result.stage_name
        return None

    @property
    def duration_seconds(self) -> float:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    def __len__(self) -> int:
        return len(self.stage_results)

    def get_stage(self, stage_name: str) -> StageResult | None:
        """특정 단계 결과 조회 (실행되지 않았으면 None)"""
        for stage in self.stage_results:
            if stage.stage_name == stage_name:
                return stage
        return None

    def raise_for_status(self) -> None:
        """실패한 경우 PipelineAborted 발생"""
        stage_name = self.aborted_by
        if stage_name is not None:
            raise PipelineAborted(stage_name, self.get_stage(stage_name).error)

    def to_summary(self) -> dict:
        """요약 정보 반환"""
        return {
            "status": self.status.value,
            "event_kind": self.event_kind.value,
            "label": self.label,
            "duration": f"{self.duration_seconds:.1f}s",
            "aborted_by": self.aborted_by,
            "stages": [s.to_dict() for s in self.stage_results],
        }


def validate_stages(stages: Sequence[Stage]) -> None:
    """단계 목록 검증 (비어 있지 않고 이름이 고유해야 함)"""
    if not stages:
        raise PipelineDefinitionError("단계가 하나도 정의되지 않았습니다")

    seen: set[str] = set()
    for stage in stages:
        if not stage.name:
            raise PipelineDefinitionError("이름 없는 단계가 있습니다")
        if stage.name in seen:
            raise PipelineDefinitionError(f"단계 이름 중복: {stage.name}", {"stage": stage.name})
        seen.add(stage.name)


class Pipeline:
    """
    순차 단계 실행기

    사용법:
        pipeline = Pipeline(stages=[
            Stage("build", CommandAction(["cargo", "build"])),
            Stage("upload", upload_action, condition=only_upstream_call, fault_tolerant=True),
        ])

        trigger = TriggerContext.from_environ("manual")
        report = pipeline.run(trigger)
        report.raise_for_status()
    """

    def __init__(self, stages: Sequence[Stage], runner: StageRunner | None = None):
        validate_stages(stages)
        self.logger = get_logger(self.__class__.__name__)
        self.stages = tuple(stages)
        self.runner = runner or StageRunner()

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def run(
        self,
        trigger: TriggerContext,
        workspace: Workspace | None = None,
        cwd: Path | str | None = None,
    ) -> PipelineReport:
        """
        전체 파이프라인 실행

        Args:
            trigger: 트리거 컨텍스트
            workspace: 공유 작업 환경 (없으면 trigger.env와 cwd로 생성)
            cwd: 작업 디렉토리 (workspace 미지정 시)

        Returns:
            PipelineReport
        """
        if not isinstance(trigger, TriggerContext):
            raise PipelineDefinitionError("trigger는 TriggerContext여야 합니다")

        if workspace is None:
            workspace = Workspace.from_trigger(trigger, cwd)

        report = PipelineReport(
            event_kind=trigger.event_kind,
            started_at=datetime.now(),
            label=trigger.context_label,
        )

        self.logger.info("=" * 50)
        self.logger.info(
            f"파이프라인 시작: {len(self.stages)}단계, event_kind={trigger.event_kind.value}"
            + (f" ({report.label})" if report.label else "")
        )
        self.logger.info("=" * 50)

        for index, stage in enumerate(self.stages):
            result = self.runner.run(stage, trigger, workspace)
            report.stage_results.append(result)

            if result.is_fatal:
                remaining = self.stage_names[index + 1:]
                if remaining:
                    self.logger.error(f"파이프라인 중단: {stage.name} 이후 단계 미실행 {remaining}")
                break

        report.completed_at = datetime.now()

        self.logger.info("=" * 50)
        self.logger.info(f"파이프라인 {report.status.value}: {report.duration_seconds:.1f}초")
        skipped = [r.stage_name for r in report.stage_results if r.status == StageStatus.SKIPPED]
        if skipped:
            self.logger.info(f"건너뛴 단계: {skipped}")
        self.logger.info("=" * 50)

        return report

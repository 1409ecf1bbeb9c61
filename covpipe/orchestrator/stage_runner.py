"""
Stage Runner: 개별 단계 실행기

실행 조건을 평가하고 액션을 실행한 뒤 결과를 반환
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from covpipe.core.logger import get_logger
from covpipe.core.exceptions import StageExecutionFailure
from covpipe.core.interfaces import Stage, TriggerContext, Workspace


class StageStatus(Enum):
    """단계 상태"""
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass
class StageResult:
    """단계 실행 결과"""
    stage_name: str
    status: StageStatus
    output: str = ""
    data: Any = None
    error: str | None = None
    tolerated: bool = False
    skip_reason: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """실행 시간 (초)"""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return 0.0

    @property
    def is_fatal(self) -> bool:
        """허용되지 않은 실패 여부"""
        return self.status == StageStatus.FAILURE and not self.tolerated

    def to_dict(self) -> dict:
        return {
            "stage": self.stage_name,
            "status": self.status.value,
            "duration": f"{self.duration_seconds:.1f}s",
            "tolerated": self.tolerated,
            "skip_reason": self.skip_reason,
            "error": self.error,
        }


class StageRunner:
    """
    개별 단계 실행기

    조건 평가, 액션 호출, 예외 처리와 시간 측정을 담당.
    재시도/타임아웃 없음

    사용법:
        runner = StageRunner()
        result = runner.run(stage, trigger, workspace)
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def run(self, stage: Stage, trigger: TriggerContext, workspace: Workspace) -> StageResult:
        """단계 1개 실행"""
        if not stage.should_run(trigger):
            reason = f"condition not met (event_kind={trigger.event_kind.value})"
            self.logger.info(f"[{stage.name}] 건너뜀: {reason}")
            return StageResult(
                stage_name=stage.name,
                status=StageStatus.SKIPPED,
                skip_reason=reason,
            )

        return self._run_stage(stage, workspace)

    def _run_stage(self, stage: Stage, workspace: Workspace) -> StageResult:
        """공통 단계 실행 래퍼"""
        result = StageResult(
            stage_name=stage.name,
            status=StageStatus.FAILURE,
            started_at=datetime.now(),
        )

        self.logger.info(f"[{stage.name}] 시작: {stage.action.describe()}")

        try:
            outcome = stage.action.execute(workspace)
            result.output = outcome.output
            result.data = outcome.data
            if outcome.success:
                result.status = StageStatus.SUCCESS
            else:
                result.error = "액션이 실패를 반환했습니다"

        except StageExecutionFailure as e:
            if e.stage_name is None:
                e.stage_name = stage.name
            result.output = e.output
            result.error = e.message
        except Exception as e:
            result.error = f"{e.__class__.__name__}: {e}"

        result.completed_at = datetime.now()

        if result.status == StageStatus.SUCCESS:
            self.logger.info(f"[{stage.name}] 완료 ({result.duration_seconds:.1f}s)")
        elif stage.fault_tolerant:
            result.tolerated = True
            self.logger.warning(f"[{stage.name}] 실패 (허용됨): {result.error}")
        else:
            self.logger.error(f"[{stage.name}] 실패: {result.error}")

        return result

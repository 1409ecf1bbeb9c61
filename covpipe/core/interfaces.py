"""
핵심 인터페이스 정의

트리거 컨텍스트, 작업 환경, 단계(Stage)와 액션의 표준 인터페이스
"""
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping


# ============================================
# Enums
# ============================================
class EventKind(Enum):
    """파이프라인 호출 방식"""
    MANUAL = "manual"                # 운영자가 직접 실행
    UPSTREAM_CALL = "upstream_call"  # 상위 파이프라인이 호출

    @classmethod
    def parse(cls, value: "str | EventKind") -> "EventKind":
        """문자열을 EventKind로 변환 (알 수 없는 값은 ValueError)"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(k.value for k in cls)
            raise ValueError(f"알 수 없는 event_kind: {value!r} (허용: {allowed})") from None


# 색상 설정 플래그와 실행 목적 문자열 (표시용, 판정에는 영향 없음)
COLOR_ENV = "CARGO_TERM_COLOR"
CONTEXT_ENV = "GITHUB_BOT_CONTEXT_STRING"


# ============================================
# Data Classes
# ============================================
@dataclass(frozen=True)
class TriggerContext:
    """
    파이프라인 트리거 정보

    파이프라인 시작 시 한 번 생성되고 이후 읽기 전용
    """
    event_kind: EventKind
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "event_kind", EventKind.parse(self.event_kind))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @classmethod
    def from_environ(
        cls,
        event_kind: "str | EventKind",
        environ: Mapping[str, str] | None = None,
    ) -> "TriggerContext":
        """현재 프로세스 환경 변수로 컨텍스트 생성"""
        return cls(event_kind=EventKind.parse(event_kind), env=dict(os.environ if environ is None else environ))

    @property
    def color_enabled(self) -> bool | None:
        """색상 출력 여부 (auto/미설정이면 None)"""
        value = self.env.get(COLOR_ENV, "auto").strip().lower()
        if value == "always":
            return True
        if value == "never":
            return False
        return None

    @property
    def context_label(self) -> str:
        """실행 목적 설명 문자열"""
        return self.env.get(CONTEXT_ENV, "")


@dataclass
class Workspace:
    """
    단계들이 공유하는 작업 환경

    작업 디렉토리와 누적 환경 변수. 단계는 순차 실행되므로 잠금 없음
    """
    cwd: Path
    env: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_trigger(cls, trigger: TriggerContext, cwd: Path | str | None = None) -> "Workspace":
        return cls(cwd=Path(cwd or os.getcwd()), env=dict(trigger.env))

    def export(self, variables: Mapping[str, str]) -> None:
        """환경 변수 추가 (이후 단계에 상속)"""
        self.env.update(variables)

    def resolve(self, path: Path | str) -> Path:
        """작업 디렉토리 기준 경로"""
        path = Path(path)
        return path if path.is_absolute() else self.cwd / path


@dataclass
class ActionOutcome:
    """액션 실행 결과"""
    success: bool
    output: str = ""
    data: Any = None


# ============================================
# Interfaces
# ============================================
class StageAction(ABC):
    """단계 액션 인터페이스 (Runner는 내부 동작을 알지 못함)"""

    @abstractmethod
    def execute(self, workspace: Workspace) -> ActionOutcome:
        """액션 실행"""
        pass

    def describe(self) -> str:
        """로그 표시용 설명"""
        return self.__class__.__name__


Condition = Callable[[TriggerContext], bool]


@dataclass(frozen=True)
class Stage:
    """파이프라인 단계 정의 (실행 전 정적으로 정의, 변경 불가)"""
    name: str
    action: StageAction
    condition: Condition | None = None
    fault_tolerant: bool = False

    def should_run(self, trigger: TriggerContext) -> bool:
        """실행 조건 평가 (조건 없으면 항상 실행)"""
        if self.condition is None:
            return True
        return bool(self.condition(trigger))

"""
실행 조건 (TriggerContext -> bool)

각 조건은 순수 함수라서 단독으로 테스트 가능
"""
from covpipe.core.interfaces import Condition, EventKind, TriggerContext


def always(trigger: TriggerContext) -> bool:
    return True


def event_is(*kinds: "str | EventKind") -> Condition:
    """트리거 종류가 kinds 중 하나일 때만 실행"""
    if not kinds:
        raise ValueError("event_is()에는 최소 1개의 event_kind가 필요합니다")
    allowed = frozenset(EventKind.parse(k) for k in kinds)

    def condition(trigger: TriggerContext) -> bool:
        return trigger.event_kind in allowed

    condition.__name__ = "event_is(" + ",".join(sorted(k.value for k in allowed)) + ")"
    return condition


def env_equals(name: str, value: str) -> Condition:
    """트리거 환경 변수가 특정 값일 때만 실행"""

    def condition(trigger: TriggerContext) -> bool:
        return trigger.env.get(name) == value

    condition.__name__ = f"env_equals({name}={value})"
    return condition


# 업로드 단계: 상위 파이프라인 호출 시에만 (수동 실행은 업로드 안 함)
only_upstream_call = event_is(EventKind.UPSTREAM_CALL)

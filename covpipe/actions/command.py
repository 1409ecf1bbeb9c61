"""
외부 명령 액션

subprocess로 명령을 실행하고 종료 코드로 성공/실패를 판단
"""
import shlex
import subprocess
from typing import Sequence

from covpipe.core.interfaces import ActionOutcome, StageAction, Workspace
from covpipe.core.logger import get_logger


def _combine(stdout: str | None, stderr: str | None) -> str:
    parts = [p.rstrip() for p in (stdout, stderr) if p and p.strip()]
    return "\n".join(parts)


class CommandAction(StageAction):
    """
    외부 명령 실행 (셸 없음)

    작업 디렉토리와 누적 환경 변수를 그대로 상속. 타임아웃 없음

    사용법:
        action = CommandAction(["cargo", "build"])
        outcome = action.execute(workspace)
    """

    def __init__(self, argv: Sequence[str] | str):
        if isinstance(argv, str):
            argv = shlex.split(argv)
        if not argv:
            raise ValueError("실행할 명령이 비어 있습니다")
        self.argv = list(argv)
        self.logger = get_logger(self.__class__.__name__)

    def describe(self) -> str:
        return shlex.join(self.argv)

    def execute(self, workspace: Workspace) -> ActionOutcome:
        try:
            result = subprocess.run(
                self.argv,
                cwd=workspace.cwd,
                env=workspace.env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            # 실행 파일 없음 / 권한 없음
            self.logger.error(f"명령 실행 불가: {self.argv[0]} - {e}")
            return ActionOutcome(success=False, output=str(e))

        output = _combine(result.stdout, result.stderr)
        if result.returncode != 0:
            self.logger.debug(f"종료 코드 {result.returncode}: {self.describe()}")

        return ActionOutcome(
            success=result.returncode == 0,
            output=output,
            data={"returncode": result.returncode},
        )


def parse_exports(text: str) -> dict[str, str]:
    """
    `export KEY=VALUE` 라인 파싱 (cargo llvm-cov show-env --export-prefix 출력)

    따옴표는 셸 규칙으로 해제. 주석/빈 줄/형식이 다른 줄은 무시
    """
    variables: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].strip()

        key, sep, raw_value = line.partition("=")
        if not sep or not key.isidentifier():
            continue

        try:
            tokens = shlex.split(raw_value)
        except ValueError:
            tokens = [raw_value]
        variables[key] = " ".join(tokens)

    return variables


class ExportEnvAction(CommandAction):
    """
    환경 변수 출력 명령을 실행하고 결과를 작업 환경에 병합

    사용법:
        action = ExportEnvAction(["cargo", "llvm-cov", "show-env", "--export-prefix"])
    """

    def execute(self, workspace: Workspace) -> ActionOutcome:
        outcome = super().execute(workspace)
        if not outcome.success:
            return outcome

        # stderr 경고가 섞여도 export 라인만 사용
        variables = parse_exports(outcome.output)
        workspace.export(variables)
        self.logger.info(f"환경 변수 {len(variables)}개 적용: {sorted(variables)}")

        return ActionOutcome(success=True, output=outcome.output, data={"exported": variables})

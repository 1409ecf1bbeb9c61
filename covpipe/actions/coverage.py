"""
커버리지 액션

프로세스 내부에서 LCOV 파일을 읽어 요약하거나 Coveralls로 업로드
"""
from pathlib import Path
from typing import Iterable

from covpipe.core.config import get_config
from covpipe.core.exceptions import CoverageError, StageExecutionFailure
from covpipe.core.interfaces import CONTEXT_ENV, ActionOutcome, StageAction, Workspace
from covpipe.core.logger import get_logger
from covpipe.coverage.filtering import CoverageFilter, DEFAULT_EXCLUDE_PATTERNS
from covpipe.coverage.lcov import load_lcov
from covpipe.coverage.summary import summarize
from covpipe.publish.coveralls import CoverallsClient


class LcovSummaryAction(StageAction):
    """LCOV 파일 요약 출력 (lcov --summary 대체)"""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path or get_config().get("coverage.lcov_path", "coverage.lcov"))

    def describe(self) -> str:
        return f"lcov summary {self.path}"

    def execute(self, workspace: Workspace) -> ActionOutcome:
        lcov_path = workspace.resolve(self.path)
        if not lcov_path.exists():
            raise StageExecutionFailure(f"커버리지 파일이 없습니다: {lcov_path}")

        try:
            report = load_lcov(lcov_path)
        except CoverageError as e:
            raise StageExecutionFailure(f"커버리지 파일 파싱 실패: {e}") from e

        summary = summarize(report)
        return ActionOutcome(success=True, output=summary.render(), data=summary.to_dict())


class CoverallsUploadAction(StageAction):
    """
    LCOV 파일을 필터링한 뒤 Coveralls로 업로드

    토큰은 작업 환경 변수에서 읽음 (publish.token_env 목록 순서)
    """

    def __init__(
        self,
        path: Path | str | None = None,
        patterns: Iterable[str] | None = None,
        client: CoverallsClient | None = None,
    ):
        config = get_config()
        self.logger = get_logger(self.__class__.__name__)
        self.path = Path(path or config.get("coverage.lcov_path", "coverage.lcov"))
        if patterns is None:
            patterns = config.get("coverage.exclude_patterns") or DEFAULT_EXCLUDE_PATTERNS
        self.coverage_filter = CoverageFilter(tuple(patterns))
        token_envs = config.get("publish.token_env", ["COVERALLS_REPO_TOKEN", "GITHUB_TOKEN"])
        if isinstance(token_envs, str):
            # COVPIPE_PUBLISH_TOKEN_ENV=A,B
            token_envs = [name.strip() for name in token_envs.split(",") if name.strip()]
        self.token_envs = list(token_envs)
        self._client = client

    def describe(self) -> str:
        return f"coveralls upload {self.path}"

    def _token(self, workspace: Workspace) -> str | None:
        for name in self.token_envs:
            if workspace.env.get(name):
                return workspace.env[name]
        return None

    def execute(self, workspace: Workspace) -> ActionOutcome:
        lcov_path = workspace.resolve(self.path)
        report = load_lcov(lcov_path)

        filtered = self.coverage_filter.apply(report)
        dropped = len(report) - len(filtered)
        self.logger.info(f"업로드 대상 {len(filtered)}개 파일 (제외 {dropped}개)")

        client = self._client or CoverallsClient()

        payload = client.build_payload(
            filtered,
            root=workspace.cwd,
            env=workspace.env,
            flag_name=workspace.env.get(CONTEXT_ENV, ""),
            repo_token=client.repo_token or self._token(workspace),
        )
        body = client.upload(payload)

        return ActionOutcome(
            success=True,
            output=str(body.get("url") or body.get("message") or ""),
            data={"files": filtered.source_files, "excluded": dropped},
        )

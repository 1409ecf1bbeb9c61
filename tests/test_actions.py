"""
단계 액션 테스트

외부 명령은 subprocess.run을 mock, 업로드는 CoverallsClient를 mock
"""
import subprocess
import pytest
from unittest.mock import MagicMock, patch

from covpipe.actions.command import CommandAction, ExportEnvAction, parse_exports
from covpipe.actions.coverage import CoverallsUploadAction, LcovSummaryAction
from covpipe.core.exceptions import PublishError, StageExecutionFailure
from covpipe.core.interfaces import Workspace


LCOV_TEXT = (
    "SF:src/lib.rs\nDA:1,1\nDA:2,0\nend_of_record\n"
    "SF:bench/foo.rs\nDA:1,1\nend_of_record\n"
    "SF:integration/bar.rs\nDA:1,1\nend_of_record\n"
)


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestCommandAction:
    """CommandAction 테스트"""

    def test_string_command_is_split(self):
        action = CommandAction("cargo llvm-cov report --lcov")
        assert action.argv == ["cargo", "llvm-cov", "report", "--lcov"]
        assert action.describe() == "cargo llvm-cov report --lcov"

    def test_empty_command(self):
        with pytest.raises(ValueError):
            CommandAction([])

    @patch("covpipe.actions.command.subprocess.run")
    def test_execute_success(self, mock_run, tmp_path):
        """작업 디렉토리/환경 상속, 출력 캡처"""
        mock_run.return_value = _completed(0, stdout="Compiling iggy\n", stderr="warning: unused\n")
        workspace = Workspace(cwd=tmp_path, env={"RUSTFLAGS": "-C instrument-coverage"})

        outcome = CommandAction(["cargo", "build"]).execute(workspace)

        assert outcome.success is True
        assert outcome.output == "Compiling iggy\nwarning: unused"
        assert outcome.data == {"returncode": 0}
        _, kwargs = mock_run.call_args
        assert kwargs["cwd"] == tmp_path
        assert kwargs["env"]["RUSTFLAGS"] == "-C instrument-coverage"
        assert "shell" not in kwargs

    @patch("covpipe.actions.command.subprocess.run")
    def test_execute_nonzero_exit(self, mock_run, tmp_path):
        mock_run.return_value = _completed(101, stderr="test failed")

        outcome = CommandAction(["cargo", "test"]).execute(Workspace(cwd=tmp_path))

        assert outcome.success is False
        assert "test failed" in outcome.output
        assert outcome.data["returncode"] == 101

    @patch("covpipe.actions.command.subprocess.run")
    def test_missing_executable(self, mock_run, tmp_path):
        """실행 파일 없음은 실패로 반환"""
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'cargo'")

        outcome = CommandAction(["cargo", "build"]).execute(Workspace(cwd=tmp_path))

        assert outcome.success is False
        assert "cargo" in outcome.output


class TestExportEnv:
    """환경 변수 export 테스트"""

    def test_parse_exports(self):
        """show-env --export-prefix 출력 파싱"""
        text = "\n".join([
            "export RUSTFLAGS='-C instrument-coverage --cfg=coverage'",
            'export LLVM_PROFILE_FILE="/work/target/iggy-%p-%m.profraw"',
            "export CARGO_LLVM_COV=1",
            "CARGO_INCREMENTAL=0",
            "# comment",
            "warning: something",
            "",
        ])

        variables = parse_exports(text)

        assert variables == {
            "RUSTFLAGS": "-C instrument-coverage --cfg=coverage",
            "LLVM_PROFILE_FILE": "/work/target/iggy-%p-%m.profraw",
            "CARGO_LLVM_COV": "1",
            "CARGO_INCREMENTAL": "0",
        }

    @patch("covpipe.actions.command.subprocess.run")
    def test_export_into_workspace(self, mock_run, tmp_path):
        """출력된 변수가 Workspace에 누적"""
        mock_run.return_value = _completed(0, stdout="export CARGO_LLVM_COV=1\n")
        workspace = Workspace(cwd=tmp_path, env={"PATH": "/usr/bin"})

        outcome = ExportEnvAction(["cargo", "llvm-cov", "show-env", "--export-prefix"]).execute(workspace)

        assert outcome.success is True
        assert outcome.data["exported"] == {"CARGO_LLVM_COV": "1"}
        assert workspace.env == {"PATH": "/usr/bin", "CARGO_LLVM_COV": "1"}

    @patch("covpipe.actions.command.subprocess.run")
    def test_export_failure_leaves_env(self, mock_run, tmp_path):
        mock_run.return_value = _completed(1, stdout="export A=1\n")
        workspace = Workspace(cwd=tmp_path, env={})

        outcome = ExportEnvAction("cargo llvm-cov show-env").execute(workspace)

        assert outcome.success is False
        assert workspace.env == {}


class TestLcovSummaryAction:
    """LcovSummaryAction 테스트"""

    def test_summary_output(self, tmp_path):
        (tmp_path / "coverage.lcov").write_text(LCOV_TEXT, encoding="utf-8")

        outcome = LcovSummaryAction("coverage.lcov").execute(Workspace(cwd=tmp_path))

        assert outcome.success is True
        assert "lines......: 75.0% (3 of 4 lines)" in outcome.output
        assert outcome.data["files"] == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(StageExecutionFailure) as exc_info:
            LcovSummaryAction("coverage.lcov").execute(Workspace(cwd=tmp_path))
        assert "coverage.lcov" in exc_info.value.message
        assert exc_info.value.stage_name is None

    def test_malformed_file(self, tmp_path):
        (tmp_path / "coverage.lcov").write_text("DA:1,1\n", encoding="utf-8")

        with pytest.raises(StageExecutionFailure):
            LcovSummaryAction("coverage.lcov").execute(Workspace(cwd=tmp_path))


class TestCoverallsUploadAction:
    """CoverallsUploadAction 테스트"""

    def _client(self, token=None):
        client = MagicMock()
        client.repo_token = token
        client.build_payload.return_value = {"source_files": []}
        client.upload.return_value = {"message": "Job #1.1", "url": "https://coveralls.io/jobs/1"}
        return client

    def test_upload_filters_excluded_paths(self, tmp_path):
        """제외 경로를 뺀 리포트 업로드"""
        (tmp_path / "coverage.lcov").write_text(LCOV_TEXT, encoding="utf-8")
        client = self._client()
        workspace = Workspace(
            cwd=tmp_path,
            env={"GITHUB_TOKEN": "ghs_token", "GITHUB_BOT_CONTEXT_STRING": "coveralls coverage reporting job"},
        )

        outcome = CoverallsUploadAction("coverage.lcov", client=client).execute(workspace)

        assert outcome.success is True
        assert outcome.output == "https://coveralls.io/jobs/1"
        assert outcome.data == {"files": ["src/lib.rs"], "excluded": 2}
        assert client.build_payload.call_args.kwargs["repo_token"] == "ghs_token"
        assert client.repo_token is None

        report = client.build_payload.call_args.args[0]
        assert report.source_files == ["src/lib.rs"]
        assert client.build_payload.call_args.kwargs["flag_name"] == "coveralls coverage reporting job"

    def test_token_priority(self, tmp_path):
        """COVERALLS_REPO_TOKEN 우선"""
        (tmp_path / "coverage.lcov").write_text(LCOV_TEXT, encoding="utf-8")
        client = self._client()
        workspace = Workspace(cwd=tmp_path, env={"GITHUB_TOKEN": "gh", "COVERALLS_REPO_TOKEN": "cv"})

        CoverallsUploadAction("coverage.lcov", client=client).execute(workspace)

        assert client.build_payload.call_args.kwargs["repo_token"] == "cv"

    def test_token_env_from_environment(self, monkeypatch):
        """COVPIPE_PUBLISH_TOKEN_ENV로 토큰 변수 목록 지정"""
        from covpipe.core.config import Config

        monkeypatch.setenv("COVPIPE_PUBLISH_TOKEN_ENV", "CUSTOM_TOKEN,GITHUB_TOKEN")
        Config.reset()
        try:
            action = CoverallsUploadAction("coverage.lcov", client=self._client())
        finally:
            Config.reset()

        assert action.token_envs == ["CUSTOM_TOKEN", "GITHUB_TOKEN"]

    def test_client_token_preferred(self, tmp_path):
        """클라이언트에 지정된 토큰 우선, 클라이언트 상태는 그대로"""
        (tmp_path / "coverage.lcov").write_text(LCOV_TEXT, encoding="utf-8")
        client = self._client(token="preset")
        workspace = Workspace(cwd=tmp_path, env={"GITHUB_TOKEN": "gh"})

        CoverallsUploadAction("coverage.lcov", client=client).execute(workspace)

        assert client.build_payload.call_args.kwargs["repo_token"] == "preset"
        assert client.repo_token == "preset"

    def test_upload_error_propagates(self, tmp_path):
        """업로드 실패는 예외 (Runner가 실패로 기록)"""
        (tmp_path / "coverage.lcov").write_text(LCOV_TEXT, encoding="utf-8")
        client = self._client(token="t")
        client.upload.side_effect = PublishError("Coveralls 응답 오류: 503", status_code=503)

        with pytest.raises(PublishError):
            CoverallsUploadAction("coverage.lcov", client=client).execute(Workspace(cwd=tmp_path))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Core 모듈 단위 테스트
"""
from pathlib import Path

import pytest


class TestConfig:
    """Config 모듈 테스트"""

    def setup_method(self):
        """각 테스트 전 Config 리셋"""
        from covpipe.core.config import Config
        Config.reset()

    def teardown_method(self):
        """각 테스트 후 Config 리셋"""
        from covpipe.core.config import Config
        Config.reset()

    def test_config_load_success(self):
        """설정 파일 로드 성공"""
        from covpipe.core.config import Config

        config = Config()
        assert config.get("app.name") == "covpipe"

    def test_config_singleton(self):
        """싱글톤 패턴 확인"""
        from covpipe.core.config import Config

        config1 = Config()
        config2 = Config()
        assert config1 is config2

    def test_config_get_nested(self):
        """중첩 설정 조회"""
        from covpipe.core.config import Config

        config = Config()
        assert config.get("coverage.lcov_path") == "coverage.lcov"
        assert "tpc/" in config.get("coverage.exclude_patterns")

    def test_config_get_default(self):
        """존재하지 않는 키 기본값 반환"""
        from covpipe.core.config import Config

        config = Config()
        value = config.get("non.existent.key", default="default_value")
        assert value == "default_value"

    def test_config_get_section(self):
        """섹션 전체 조회"""
        from covpipe.core.config import Config

        config = Config()
        publish = config.get_section("publish")
        assert isinstance(publish, dict)
        assert "endpoint" in publish

    def test_config_get_required_missing(self):
        """필수 값 누락 시 예외"""
        from covpipe.core.config import Config
        from covpipe.core.exceptions import ConfigValidationError

        config = Config()
        with pytest.raises(ConfigValidationError):
            config.get_required("publish.missing_key")

    def test_config_env_override(self, monkeypatch):
        """COVPIPE_ 환경 변수 오버라이드"""
        from covpipe.core.config import Config

        monkeypatch.setenv("COVPIPE_PUBLISH_TIMEOUT", "5")
        config = Config()
        assert config.get("publish.timeout") == 5

    def test_config_env_override_underscore_key(self, monkeypatch):
        """밑줄이 들어간 기존 키도 오버라이드 (coverage.lcov_path)"""
        from covpipe.core.config import Config

        monkeypatch.setenv("COVPIPE_COVERAGE_LCOV_PATH", "target/cov.lcov")
        monkeypatch.setenv("COVPIPE_PUBLISH_SERVICE_NAME", "local")
        config = Config()
        assert config.get("coverage.lcov_path") == "target/cov.lcov"
        assert config.get("publish.service_name") == "local"
        assert "lcov" not in config.get_section("coverage")

    def test_config_env_override_new_key(self, monkeypatch):
        """없는 키는 밑줄마다 한 단계씩"""
        from covpipe.core.config import Config

        monkeypatch.setenv("COVPIPE_EXTRA_DRY_RUN", "true")
        config = Config()
        assert config.get("extra.dry.run") is True

    def test_config_bundled_in_package(self, monkeypatch):
        """기본 설정은 패키지 안에 포함"""
        import covpipe
        from covpipe.core.config import DEFAULT_CONFIG_DIR, Config

        monkeypatch.delenv("COVPIPE_CONFIG_DIR", raising=False)
        config = Config()
        assert config.config_dir == DEFAULT_CONFIG_DIR
        assert DEFAULT_CONFIG_DIR.parent == Path(covpipe.__file__).parent
        assert (DEFAULT_CONFIG_DIR / "coverage.yaml").exists()

    def test_config_dir_from_env(self, monkeypatch, tmp_path):
        """COVPIPE_CONFIG_DIR로 설정 디렉토리 지정"""
        from covpipe.core.config import Config

        (tmp_path / "settings.yaml").write_text("app:\n  name: custom\n", encoding="utf-8")
        monkeypatch.setenv("COVPIPE_CONFIG_DIR", str(tmp_path))
        config = Config()
        assert config.config_dir == tmp_path
        assert config.get("app.name") == "custom"
        assert config.get("config") is None

    def test_config_env_file_merge(self, tmp_path):
        """환경별 설정 병합"""
        from covpipe.core.config import Config

        (tmp_path / "settings.yaml").write_text(
            "logging:\n  level: INFO\n  file:\n    enabled: false\n", encoding="utf-8"
        )
        (tmp_path / "settings.ci.yaml").write_text(
            "logging:\n  file:\n    enabled: true\n", encoding="utf-8"
        )

        config = Config(env="ci", config_dir=tmp_path)
        assert config.is_ci
        assert config.get("logging.level") == "INFO"
        assert config.get("logging.file.enabled") is True

    def test_config_not_found(self, tmp_path):
        """기본 설정 파일 없음"""
        from covpipe.core.config import Config
        from covpipe.core.exceptions import ConfigNotFoundError

        with pytest.raises(ConfigNotFoundError):
            Config(config_dir=tmp_path)


class TestLogger:
    """Logger 모듈 테스트"""

    def setup_method(self):
        """각 테스트 전 Logger 리셋"""
        from covpipe.core.logger import LoggerService
        LoggerService.reset()

    def teardown_method(self):
        """각 테스트 후 Logger 리셋"""
        from covpipe.core.logger import LoggerService
        LoggerService.reset()

    def test_logger_configure(self):
        """로거 설정 성공"""
        from covpipe.core.logger import LoggerService

        LoggerService.configure(level="DEBUG", file_enabled=False)
        assert LoggerService._configured is True

    def test_logger_file_sink(self, tmp_path):
        """파일 로그 생성"""
        from covpipe.core.logger import LoggerService, get_logger

        LoggerService.configure(level="DEBUG", log_dir=str(tmp_path), file_enabled=True)
        get_logger("test").info("파일 로그 메시지")

        assert (tmp_path / "pipeline.log").exists()

    def test_logger_log_message(self):
        """로그 메시지 출력"""
        from covpipe.core.logger import get_logger, LoggerService

        LoggerService.configure(level="DEBUG", file_enabled=False, colorize=False)
        logger = get_logger("test")
        logger.info("테스트 메시지")
        # 예외 없이 실행되면 성공


class TestExceptions:
    """Exception 모듈 테스트"""

    def test_base_error(self):
        """BaseError 테스트"""
        from covpipe.core.exceptions import BaseError

        error = BaseError("테스트 오류", {"key": "value"})
        assert error.message == "테스트 오류"
        assert error.details == {"key": "value"}
        assert "Details:" in str(error)

    def test_pipeline_aborted(self):
        """PipelineAborted 단계 이름 보존"""
        from covpipe.core.exceptions import PipelineAborted, PipelineError

        error = PipelineAborted("build", "exit 101")
        assert isinstance(error, PipelineError)
        assert error.stage_name == "build"
        assert "exit 101" in error.message

    def test_lcov_parse_error_line(self):
        """LcovParseError 라인 번호"""
        from covpipe.core.exceptions import LcovParseError

        error = LcovParseError("잘못된 DA", line_no=7)
        assert error.line_no == 7
        assert error.details["line"] == 7


class TestInterfaces:
    """Interfaces 모듈 테스트"""

    def test_event_kind_parse(self):
        """EventKind 변환"""
        from covpipe.core.interfaces import EventKind

        assert EventKind.parse("manual") is EventKind.MANUAL
        assert EventKind.parse(" Upstream_Call ") is EventKind.UPSTREAM_CALL
        with pytest.raises(ValueError):
            EventKind.parse("push")

    def test_trigger_context_is_read_only(self):
        """TriggerContext 불변"""
        from dataclasses import FrozenInstanceError
        from covpipe.core.interfaces import EventKind, TriggerContext

        env = {"A": "1"}
        trigger = TriggerContext(event_kind="manual", env=env)
        env["A"] = "2"

        assert trigger.event_kind is EventKind.MANUAL
        assert trigger.env["A"] == "1"
        with pytest.raises(TypeError):
            trigger.env["B"] = "x"
        with pytest.raises(FrozenInstanceError):
            trigger.event_kind = EventKind.UPSTREAM_CALL

    def test_trigger_context_ambient_env(self):
        """색상 플래그/목적 문자열"""
        from covpipe.core.interfaces import TriggerContext

        trigger = TriggerContext.from_environ(
            "upstream_call",
            {"CARGO_TERM_COLOR": "always", "GITHUB_BOT_CONTEXT_STRING": "coveralls coverage reporting job"},
        )
        assert trigger.color_enabled is True
        assert trigger.context_label == "coveralls coverage reporting job"

        plain = TriggerContext.from_environ("manual", {})
        assert plain.color_enabled is None
        assert plain.context_label == ""

    def test_workspace_export_and_resolve(self, tmp_path):
        """Workspace 환경 누적 및 경로 해석"""
        from covpipe.core.interfaces import TriggerContext, Workspace

        trigger = TriggerContext.from_environ("manual", {"PATH": "/usr/bin"})
        workspace = Workspace.from_trigger(trigger, tmp_path)
        workspace.export({"RUSTFLAGS": "-C instrument-coverage"})

        assert workspace.env["PATH"] == "/usr/bin"
        assert workspace.env["RUSTFLAGS"] == "-C instrument-coverage"
        assert "RUSTFLAGS" not in trigger.env
        assert workspace.resolve("coverage.lcov") == tmp_path / "coverage.lcov"
        assert workspace.resolve(Path("/abs/file")) == Path("/abs/file")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

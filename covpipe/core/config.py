"""
설정 관리 모듈

YAML 기반 설정 파일 로드 및 환경별 설정 분리
"""
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from covpipe.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError


ENV_PREFIX = "COVPIPE_"

# 패키지에 포함된 기본 설정 (settings.yaml, coverage.yaml)
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "config"

# 설정 키가 아닌 제어용 환경 변수
CONTROL_ENVS = {f"{ENV_PREFIX}ENV", f"{ENV_PREFIX}CONFIG_DIR"}


class Config:
    """
    설정 관리자

    사용법:
        config = Config()  # 기본: development 환경
        config = Config(env="ci")

        # 설정 값 접근
        lcov_path = config.get("coverage.lcov_path")
        timeout = config.get("publish.timeout", default=30)
    """

    _instance: "Config | None" = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs) -> "Config":
        """싱글톤 패턴"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, env: str | None = None, config_dir: Path | None = None):
        if Config._initialized:
            return

        # .env 파일 로드
        load_dotenv()

        # 환경 결정: 인자 > 환경변수 > 기본값
        self.env = env or os.getenv(f"{ENV_PREFIX}ENV", "development")

        # 설정 디렉토리: 인자 > COVPIPE_CONFIG_DIR > 패키지 기본값
        config_dir = config_dir or os.getenv(f"{ENV_PREFIX}CONFIG_DIR")
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

        self._config: dict[str, Any] = {}
        self._load_config()

        Config._initialized = True

    def _load_config(self) -> None:
        """설정 파일 로드 (기본 + 환경별)"""
        # 1. 기본 설정 로드
        base_config_path = self.config_dir / "settings.yaml"
        if base_config_path.exists():
            self._config = self._load_yaml(base_config_path)
        else:
            raise ConfigNotFoundError(
                f"기본 설정 파일을 찾을 수 없습니다: {base_config_path}"
            )

        # 2. 환경별 설정 오버라이드
        env_config_path = self.config_dir / f"settings.{self.env}.yaml"
        if env_config_path.exists():
            env_config = self._load_yaml(env_config_path)
            self._deep_merge(self._config, env_config)

        # 3. 환경 변수로 오버라이드
        self._apply_env_overrides()

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """YAML 파일 로드"""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML 파싱 오류: {path}", {"error": str(e)})

    def _deep_merge(self, base: dict, override: dict) -> None:
        """딕셔너리 깊은 병합 (override가 base를 덮어씀)"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self) -> None:
        """환경 변수로 설정 오버라이드 (COVPIPE_ 접두사)"""
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX) and key not in CONTROL_ENVS:
                keys = self._env_key_path(key[len(ENV_PREFIX):])
                self._set_nested(keys, self._parse_scalar(value))

    def _env_key_path(self, name: str) -> list[str]:
        """
        환경 변수 이름 -> 설정 키 경로

        각 단계에서 이미 있는 키 중 가장 긴 것을 우선 선택하고,
        없으면 "_"마다 한 단계씩 내려간다.

            PUBLISH_TIMEOUT     -> ["publish", "timeout"]
            COVERAGE_LCOV_PATH  -> ["coverage", "lcov_path"]
        """
        parts = name.lower().split("_")
        keys: list[str] = []
        current: Any = self._config
        start = 0

        while start < len(parts):
            for end in range(len(parts), start, -1):
                candidate = "_".join(parts[start:end])
                if isinstance(current, dict) and candidate in current:
                    break
            else:
                end = start + 1
                candidate = parts[start]

            keys.append(candidate)
            current = current.get(candidate) if isinstance(current, dict) else None
            start = end

        return keys

    @staticmethod
    def _parse_scalar(value: str) -> Any:
        """문자열 값 변환 ("30" -> 30, "true" -> True, 파싱 불가하면 그대로)"""
        try:
            parsed = yaml.safe_load(value)
        except yaml.YAMLError:
            return value
        return value if parsed is None or isinstance(parsed, (dict, list)) else parsed

    def _set_nested(self, keys: list[str], value: Any) -> None:
        """키 경로로 중첩 설정 값 설정"""
        current = self._config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        설정 값 조회 (점 표기법 지원)

        Args:
            key: 설정 키 (예: "coverage.lcov_path", "publish.endpoint")
            default: 기본값

        Returns:
            설정 값 또는 기본값
        """
        keys = key.split(".")
        current = self._config

        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default

        return current

    def get_required(self, key: str) -> Any:
        """
        필수 설정 값 조회 (없으면 예외 발생)

        Raises:
            ConfigValidationError: 설정 값이 없는 경우
        """
        value = self.get(key)
        if value is None:
            raise ConfigValidationError(f"필수 설정 값이 없습니다: {key}")
        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """섹션 전체 조회"""
        return self.get(section, {})

    @property
    def is_ci(self) -> bool:
        """CI 환경 여부"""
        return self.env == "ci"

    @classmethod
    def reset(cls) -> None:
        """싱글톤 인스턴스 리셋 (테스트용)"""
        cls._instance = None
        cls._initialized = False


def get_config() -> Config:
    """Config 인스턴스 반환 (편의 함수)"""
    return Config()

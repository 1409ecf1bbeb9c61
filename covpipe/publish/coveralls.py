"""
Coveralls 업로드 클라이언트

LCOV 리포트를 Coveralls job API 형식(source_files)으로 변환하여 전송
"""
import hashlib
import json
from pathlib import Path
from typing import Any, Mapping

import requests

from covpipe.core.config import get_config
from covpipe.core.exceptions import PublishError
from covpipe.core.logger import get_logger
from covpipe.coverage.lcov import FileCoverage, LcovReport


DEFAULT_ENDPOINT = "https://coveralls.io/api/v1/jobs"


def line_coverage_array(record: FileCoverage) -> list[int | None]:
    """
    라인별 hit 배열 (Coveralls coverage 필드)

    인덱스 i는 (i+1)번째 라인, 측정 대상이 아닌 라인은 None
    """
    if not record.lines:
        return []
    coverage: list[int | None] = [None] * max(record.lines)
    for line, hits in record.lines.items():
        if line >= 1:
            coverage[line - 1] = hits
    return coverage


def source_digest(path: Path) -> str | None:
    """소스 파일 MD5 (읽을 수 없으면 None)"""
    try:
        return hashlib.md5(path.read_bytes()).hexdigest()
    except OSError:
        return None


class CoverallsClient:
    """
    Coveralls job API 클라이언트

    사용법:
        client = CoverallsClient(repo_token="...")
        payload = client.build_payload(report, root=Path("."), env=os.environ)
        response = client.upload(payload)
    """

    def __init__(
        self,
        repo_token: str | None = None,
        endpoint: str | None = None,
        service_name: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.logger = get_logger(self.__class__.__name__)
        config = get_config()

        self.repo_token = repo_token
        self.endpoint = endpoint or config.get("publish.endpoint", DEFAULT_ENDPOINT)
        self.service_name = service_name or config.get("publish.service_name", "github")
        self.timeout = timeout or config.get("publish.timeout", 30)
        self.session = session or requests.Session()

    def build_payload(
        self,
        report: LcovReport,
        root: Path,
        env: Mapping[str, str] | None = None,
        flag_name: str = "",
        repo_token: str | None = None,
    ) -> dict[str, Any]:
        """
        업로드 JSON 생성

        Args:
            report: (필터링된) LCOV 리포트
            root: 소스 경로 기준 디렉토리 (source_digest 계산용)
            env: CI 환경 변수 (GITHUB_RUN_ID, GITHUB_SHA 등)
            flag_name: 리포트 구분 라벨
            repo_token: 이번 업로드에 쓸 토큰 (없으면 클라이언트 기본값)

        Returns:
            Coveralls job JSON
        """
        env = env or {}
        source_files = []

        for record in report:
            path = Path(record.source_file)
            if path.is_absolute():
                try:
                    name = path.relative_to(root).as_posix()
                except ValueError:
                    name = path.as_posix()
            else:
                name = path.as_posix()
                path = root / path

            entry: dict[str, Any] = {
                "name": name,
                "coverage": line_coverage_array(record),
            }
            digest = source_digest(path)
            if digest:
                entry["source_digest"] = digest
            else:
                self.logger.debug(f"소스 파일 없음, digest 생략: {name}")
            source_files.append(entry)

        payload: dict[str, Any] = {
            "repo_token": repo_token or self.repo_token,
            "service_name": self.service_name,
            "source_files": source_files,
        }

        run_id = env.get("GITHUB_RUN_ID")
        if run_id:
            payload["service_job_id"] = run_id
            payload["service_number"] = run_id
        if flag_name:
            payload["flag_name"] = flag_name

        sha = env.get("GITHUB_SHA")
        if sha:
            payload["git"] = {
                "head": {"id": sha},
                "branch": env.get("GITHUB_HEAD_REF") or env.get("GITHUB_REF_NAME", ""),
            }

        return payload

    def upload(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Coveralls로 전송 (재시도 없음)

        Raises:
            PublishError: 토큰 없음, 네트워크 오류, 2xx 외 응답
        """
        if not payload.get("repo_token"):
            raise PublishError("Coveralls repo token이 없습니다")

        files = {"json_file": ("coverage.json", json.dumps(payload), "application/json")}

        try:
            response = self.session.post(self.endpoint, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise PublishError(f"Coveralls 요청 실패: {e}") from e

        if not 200 <= response.status_code < 300:
            raise PublishError(
                f"Coveralls 응답 오류: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}

        self.logger.info(f"Coveralls 업로드 완료: {body.get('url', body.get('message', ''))}")
        return body

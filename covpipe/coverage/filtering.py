"""
커버리지 경로 제외 필터

벤치마크, 통합 테스트, 도구, 외부(vendor) 디렉토리의 레코드를 리포트에서 제거
"""
import re
from dataclasses import dataclass, field
from typing import Iterable

from covpipe.coverage.lcov import FileCoverage, LcovReport


DEFAULT_EXCLUDE_PATTERNS = ("bench/", "integration/", "tools/", "tpc/")


@dataclass
class CoverageFilter:
    """
    경로 조각 기반 제외 필터

    사용법:
        coverage_filter = CoverageFilter()
        kept = coverage_filter.apply(report)
    """
    patterns: tuple[str, ...] = field(default=DEFAULT_EXCLUDE_PATTERNS)

    def __post_init__(self):
        self.patterns = tuple(p.replace("\\", "/") for p in self.patterns if p)

    def is_excluded(self, source_file: str) -> bool:
        """소스 경로가 제외 패턴 중 하나를 포함하는지"""
        path = source_file.replace("\\", "/")
        return any(pattern in path for pattern in self.patterns)

    def apply(self, report: LcovReport) -> LcovReport:
        """제외 패턴에 걸리지 않은 레코드만 남긴 새 리포트"""
        return LcovReport(records=[r for r in report if not self.is_excluded(r.source_file)])

    def excluded(self, report: LcovReport) -> list[FileCoverage]:
        return [r for r in report if self.is_excluded(r.source_file)]

    def to_regex(self) -> str:
        """llvm-cov --ignore-filename-regex 형식 ('(bench\\/|integration\\/)')"""
        return "(" + "|".join(re.escape(p).replace("/", "\\/") for p in self.patterns) + ")"


def filter_report(report: LcovReport, patterns: Iterable[str] | None = None) -> LcovReport:
    """편의 함수: 기본 패턴(또는 지정 패턴)으로 필터링"""
    coverage_filter = CoverageFilter(tuple(patterns)) if patterns is not None else CoverageFilter()
    return coverage_filter.apply(report)

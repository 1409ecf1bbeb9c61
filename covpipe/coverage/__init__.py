"""
Coverage: LCOV 커버리지 데이터 처리

- lcov: 파서/라이터
- filtering: 경로 제외 필터
- summary: lcov --summary 형식 요약
"""
from covpipe.coverage.lcov import (
    BranchHit,
    FileCoverage,
    LcovReport,
    parse_lcov,
    load_lcov,
    dump_lcov,
    save_lcov,
)
from covpipe.coverage.filtering import CoverageFilter, DEFAULT_EXCLUDE_PATTERNS, filter_report
from covpipe.coverage.summary import CoverageRate, CoverageSummary, summarize

__all__ = [
    "BranchHit",
    "FileCoverage",
    "LcovReport",
    "parse_lcov",
    "load_lcov",
    "dump_lcov",
    "save_lcov",
    "CoverageFilter",
    "DEFAULT_EXCLUDE_PATTERNS",
    "filter_report",
    "CoverageRate",
    "CoverageSummary",
    "summarize",
]

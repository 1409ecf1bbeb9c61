"""
커버리지 요약

`lcov --summary` 형식의 사람이 읽기 쉬운 요약 생성
"""
from dataclasses import dataclass

from covpipe.coverage.lcov import LcovReport


@dataclass
class CoverageRate:
    """항목별 커버리지 (lines/functions/branches)"""
    kind: str
    hit: int
    found: int

    @property
    def percent(self) -> float | None:
        if self.found == 0:
            return None
        return self.hit / self.found * 100

    def render(self) -> str:
        label = f"{self.kind}".ljust(11, ".")
        if self.percent is None:
            return f"  {label}: no data found"
        return f"  {label}: {self.percent:.1f}% ({self.hit} of {self.found} {self.kind})"


@dataclass
class CoverageSummary:
    """리포트 전체 요약"""
    files: int
    lines: CoverageRate
    functions: CoverageRate
    branches: CoverageRate

    def render(self) -> str:
        return "\n".join([
            "Summary coverage rate:",
            f"  source files: {self.files}",
            self.lines.render(),
            self.functions.render(),
            self.branches.render(),
        ])

    def to_dict(self) -> dict:
        return {
            "files": self.files,
            **{
                rate.kind: {"hit": rate.hit, "found": rate.found, "percent": rate.percent}
                for rate in (self.lines, self.functions, self.branches)
            },
        }


def summarize(report: LcovReport) -> CoverageSummary:
    """LcovReport 집계"""
    return CoverageSummary(
        files=len(report),
        lines=CoverageRate("lines", sum(r.lines_hit for r in report), sum(r.lines_found for r in report)),
        functions=CoverageRate(
            "functions", sum(r.functions_hit for r in report), sum(r.functions_found for r in report)
        ),
        branches=CoverageRate(
            "branches", sum(r.branches_hit for r in report), sum(r.branches_found for r in report)
        ),
    )

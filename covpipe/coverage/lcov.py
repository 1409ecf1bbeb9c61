"""
LCOV 파서/라이터

line-coverage 교환 포맷 (geninfo tracefile)을 읽고 쓴다.
지원 태그: TN, SF, FN, FNDA, FNF, FNH, DA, BRDA, BRF, BRH, LF, LH, end_of_record
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from covpipe.core.exceptions import LcovParseError


@dataclass
class BranchHit:
    """분기 커버리지 (BRDA)"""
    line: int
    block: int
    branch: str
    taken: int | None  # None = 실행되지 않음 ("-")


@dataclass
class FileCoverage:
    """소스 파일 1개의 커버리지 레코드 (SF ~ end_of_record)"""
    source_file: str
    test_name: str = ""
    lines: dict[int, int] = field(default_factory=dict)
    function_lines: dict[str, int] = field(default_factory=dict)
    function_hits: dict[str, int] = field(default_factory=dict)
    branches: list[BranchHit] = field(default_factory=list)

    # 요약 태그 값 (상세 데이터가 없을 때만 사용)
    declared: dict[str, int] = field(default_factory=dict)

    @property
    def lines_found(self) -> int:
        return len(self.lines) if self.lines else self.declared.get("LF", 0)

    @property
    def lines_hit(self) -> int:
        if self.lines:
            return sum(1 for hits in self.lines.values() if hits > 0)
        return self.declared.get("LH", 0)

    @property
    def functions_found(self) -> int:
        names = set(self.function_lines) | set(self.function_hits)
        return len(names) if names else self.declared.get("FNF", 0)

    @property
    def functions_hit(self) -> int:
        if self.function_lines or self.function_hits:
            return sum(1 for hits in self.function_hits.values() if hits > 0)
        return self.declared.get("FNH", 0)

    @property
    def branches_found(self) -> int:
        return len(self.branches) if self.branches else self.declared.get("BRF", 0)

    @property
    def branches_hit(self) -> int:
        if self.branches:
            return sum(1 for b in self.branches if b.taken)
        return self.declared.get("BRH", 0)

    def add_line(self, line: int, hits: int) -> None:
        # 같은 라인이 여러 번 나오면 합산
        self.lines[line] = self.lines.get(line, 0) + hits

    def merge(self, other: "FileCoverage") -> None:
        """
        같은 SF의 다른 레코드를 병합 (TN별로 나뉜 tracefile)

        라인/함수 히트는 합산, 함수 정의와 분기는 합집합
        """
        for line, hits in other.lines.items():
            self.add_line(line, hits)

        for name, line in other.function_lines.items():
            self.function_lines.setdefault(name, line)
        for name, hits in other.function_hits.items():
            self.function_hits[name] = self.function_hits.get(name, 0) + hits

        known = {(b.line, b.block, b.branch): b for b in self.branches}
        for branch in other.branches:
            key = (branch.line, branch.block, branch.branch)
            if key not in known:
                known[key] = BranchHit(branch.line, branch.block, branch.branch, branch.taken)
                self.branches.append(known[key])
            elif branch.taken is not None:
                known[key].taken = (known[key].taken or 0) + branch.taken

        for tag, value in other.declared.items():
            self.declared[tag] = max(self.declared.get(tag, 0), value)


@dataclass
class LcovReport:
    """LCOV tracefile 전체"""
    records: list[FileCoverage] = field(default_factory=list)

    def __iter__(self) -> Iterator[FileCoverage]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def source_files(self) -> list[str]:
        return [r.source_file for r in self.records]

    def get(self, source_file: str) -> FileCoverage | None:
        for record in self.records:
            if record.source_file == source_file:
                return record
        return None


# SF 레코드 안에서만 유효한 태그
DATA_TAGS = frozenset({"DA", "FN", "FNDA", "BRDA", "LF", "LH", "FNF", "FNH", "BRF", "BRH"})


def _ints(value: str, count: int, line_no: int, tag: str) -> list[int]:
    parts = value.split(",")
    if len(parts) < count:
        raise LcovParseError(f"{tag} 필드 수 부족: {value!r}", line_no)
    try:
        return [int(p) for p in parts[:count]]
    except ValueError:
        raise LcovParseError(f"{tag} 숫자 형식 오류: {value!r}", line_no) from None


def parse_lcov(lines: Iterable[str]) -> LcovReport:
    """
    LCOV 텍스트 파싱

    같은 SF가 여러 레코드에 나오면 하나로 병합하고, 알 수 없는 태그 (VER 등)는 무시

    Args:
        lines: tracefile 라인들

    Returns:
        LcovReport

    Raises:
        LcovParseError: SF 없이 데이터가 나오거나 숫자 필드가 잘못된 경우
    """
    report = LcovReport()
    by_file: dict[str, FileCoverage] = {}
    current: FileCoverage | None = None
    test_name = ""

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if line == "end_of_record":
            if current is None:
                raise LcovParseError("SF 없이 end_of_record가 나왔습니다", line_no)
            existing = by_file.get(current.source_file)
            if existing is None:
                by_file[current.source_file] = current
                report.records.append(current)
            else:
                existing.merge(current)
            current = None
            continue

        tag, sep, value = line.partition(":")
        if not sep:
            raise LcovParseError(f"알 수 없는 라인: {line!r}", line_no)

        if tag == "TN":
            test_name = value
            continue
        if tag == "SF":
            if current is not None:
                raise LcovParseError(f"end_of_record 없이 새 SF: {value}", line_no)
            current = FileCoverage(source_file=value, test_name=test_name)
            continue

        if tag not in DATA_TAGS:
            continue
        if current is None:
            raise LcovParseError(f"SF 이전에 {tag} 데이터가 나왔습니다", line_no)

        if tag == "DA":
            line_number, hits = _ints(value, 2, line_no, tag)
            current.add_line(line_number, hits)
        elif tag == "FN":
            # FN:<line>,<name> 또는 FN:<start>,<end>,<name>
            parts = value.split(",")
            if len(parts) < 2:
                raise LcovParseError(f"FN 필드 수 부족: {value!r}", line_no)
            current.function_lines[parts[-1]] = _ints(parts[0], 1, line_no, tag)[0]
        elif tag == "FNDA":
            count, _, name = value.partition(",")
            hits = _ints(count, 1, line_no, tag)[0]
            current.function_hits[name] = current.function_hits.get(name, 0) + hits
        elif tag == "BRDA":
            parts = value.split(",")
            if len(parts) != 4:
                raise LcovParseError(f"BRDA 필드 수 오류: {value!r}", line_no)
            line_number, block = _ints(",".join(parts[:2]), 2, line_no, tag)
            taken = None if parts[3] == "-" else _ints(parts[3], 1, line_no, tag)[0]
            current.branches.append(BranchHit(line_number, block, parts[2], taken))
        elif tag in ("LF", "LH", "FNF", "FNH", "BRF", "BRH"):
            current.declared[tag] = _ints(value, 1, line_no, tag)[0]

    if current is not None:
        raise LcovParseError(f"end_of_record 누락: {current.source_file}")

    return report


def load_lcov(path: Path | str) -> LcovReport:
    """LCOV 파일 로드"""
    with open(path, "r", encoding="utf-8") as f:
        return parse_lcov(f)


def dump_lcov(report: LcovReport) -> str:
    """LcovReport를 LCOV 텍스트로 직렬화"""
    out: list[str] = []
    for record in report:
        out.append(f"TN:{record.test_name}")
        out.append(f"SF:{record.source_file}")

        for name, line in sorted(record.function_lines.items(), key=lambda kv: (kv[1], kv[0])):
            out.append(f"FN:{line},{name}")
        for name, hits in record.function_hits.items():
            out.append(f"FNDA:{hits},{name}")
        out.append(f"FNF:{record.functions_found}")
        out.append(f"FNH:{record.functions_hit}")

        for b in record.branches:
            taken = "-" if b.taken is None else str(b.taken)
            out.append(f"BRDA:{b.line},{b.block},{b.branch},{taken}")
        if record.branches or "BRF" in record.declared:
            out.append(f"BRF:{record.branches_found}")
            out.append(f"BRH:{record.branches_hit}")

        for line, hits in sorted(record.lines.items()):
            out.append(f"DA:{line},{hits}")
        out.append(f"LF:{record.lines_found}")
        out.append(f"LH:{record.lines_hit}")
        out.append("end_of_record")

    return "\n".join(out) + ("\n" if out else "")


def save_lcov(report: LcovReport, path: Path | str) -> None:
    """LCOV 파일 저장"""
    Path(path).write_text(dump_lcov(report), encoding="utf-8")

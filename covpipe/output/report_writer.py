"""
리포트 출력

PipelineReport를 콘솔 텍스트와 JSON 파일로 저장
"""
import json
from datetime import datetime
from pathlib import Path

from covpipe.core.logger import get_logger
from covpipe.orchestrator.pipeline import PipelineReport
from covpipe.orchestrator.stage_runner import StageStatus


STATUS_MARKS = {
    StageStatus.SUCCESS: "✓",
    StageStatus.FAILURE: "✗",
    StageStatus.SKIPPED: "-",
}


class ReportWriter:
    """
    파이프라인 결과 출력기

    사용법:
        writer = ReportWriter(output_dir="./reports")
        print(writer.format_text(report))
        path = writer.save_json(report)
    """

    def __init__(self, output_dir: Path | str = "./reports"):
        self.logger = get_logger(self.__class__.__name__)
        self.output_dir = Path(output_dir)

    def format_text(self, report: PipelineReport, show_output: bool = False) -> str:
        """단계별 결과 텍스트"""
        lines = [
            "=" * 50,
            f"Pipeline {report.status.value.upper()} "
            f"(event: {report.event_kind.value}, {report.duration_seconds:.1f}s)",
        ]
        if report.label:
            lines.append(f"  {report.label}")
        lines.append("-" * 50)

        for result in report.stage_results:
            mark = STATUS_MARKS[result.status]
            line = f"  {mark} {result.stage_name:<16} {result.status.value}"
            if result.tolerated:
                line += " (tolerated)"
            elif result.skip_reason:
                line += f" ({result.skip_reason})"
            elif result.status != StageStatus.SKIPPED:
                line += f" [{result.duration_seconds:.1f}s]"
            lines.append(line)

            if result.error:
                lines.append(f"      error: {result.error}")
            if show_output and result.output:
                lines.extend(f"      | {out}" for out in result.output.splitlines())

        if report.aborted_by:
            lines.append(f"  aborted by: {report.aborted_by}")
        lines.append("=" * 50)
        return "\n".join(lines)

    def to_dict(self, report: PipelineReport) -> dict:
        data = report.to_summary()
        data["started_at"] = report.started_at.isoformat()
        data["completed_at"] = report.completed_at.isoformat() if report.completed_at else None
        for stage_dict, result in zip(data["stages"], report.stage_results):
            stage_dict["output"] = result.output
        return data

    def save_json(self, report: PipelineReport, filename: str | None = None) -> Path:
        """JSON 저장 후 경로 반환"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if filename is None:
            filename = f"pipeline_{datetime.now():%Y%m%d_%H%M%S}.json"

        path = self.output_dir / filename
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(report), f, ensure_ascii=False, indent=2)

        self.logger.info(f"리포트 저장: {path}")
        return path

"""
커맨드라인 실행:
    python -m covpipe [--event manual|upstream_call] [--workflow PATH] [--cwd DIR]

예시:
    python -m covpipe --event upstream_call --report-dir ./reports

종료 코드: 0 = passed, 1 = failed, 2 = 정의/설정 오류
"""
import argparse
import sys
from pathlib import Path

from covpipe.core.config import get_config
from covpipe.core.exceptions import ConfigError, PipelineDefinitionError
from covpipe.core.interfaces import EventKind, TriggerContext, Workspace
from covpipe.core.logger import get_logger, setup_logger_from_config
from covpipe.orchestrator.pipeline import Pipeline
from covpipe.output.report_writer import ReportWriter
from covpipe.workflow import load_workflow


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="covpipe", description="커버리지 파이프라인 실행")
    parser.add_argument(
        "--event",
        choices=[k.value for k in EventKind],
        default=EventKind.MANUAL.value,
        help="트리거 종류 (기본: manual)",
    )
    parser.add_argument("--workflow", type=Path, default=None, help="workflow YAML 경로")
    parser.add_argument("--cwd", type=Path, default=None, help="작업 디렉토리 (기본: 현재 디렉토리)")
    parser.add_argument("--report-dir", type=Path, default=None, help="JSON 리포트 저장 디렉토리")
    parser.add_argument("--show-output", action="store_true", help="단계별 출력 표시")
    return parser


def resolve_workflow_path(arg: Path | None) -> Path:
    """인자 > 설정(pipeline.workflow, config 디렉토리 기준)"""
    if arg is not None:
        return arg
    config = get_config()
    path = Path(config.get("pipeline.workflow", "coverage.yaml"))
    return path if path.is_absolute() else config.config_dir / path


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    trigger = TriggerContext.from_environ(args.event)
    setup_logger_from_config(colorize=trigger.color_enabled)
    logger = get_logger("covpipe")

    try:
        workflow = load_workflow(resolve_workflow_path(args.workflow))
        pipeline = Pipeline(workflow.stages)
    except (PipelineDefinitionError, ConfigError) as e:
        logger.error(f"파이프라인 정의 오류: {e}")
        return 2

    workspace = Workspace.from_trigger(trigger, args.cwd)
    report = pipeline.run(trigger, workspace)

    writer = ReportWriter(args.report_dir or get_config().get("output.report_dir", "./reports"))
    print(writer.format_text(report, show_output=args.show_output))
    if args.report_dir is not None:
        writer.save_json(report)

    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())

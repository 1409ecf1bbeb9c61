"""
Output: 파이프라인 결과 출력
"""
from covpipe.output.report_writer import ReportWriter

__all__ = ["ReportWriter"]

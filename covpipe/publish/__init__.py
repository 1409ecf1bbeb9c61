"""
Publish: 외부 커버리지 서비스 업로드
"""
from covpipe.publish.coveralls import CoverallsClient, line_coverage_array

__all__ = [
    "CoverallsClient",
    "line_coverage_array",
]

"""
covpipe: 커버리지 파이프라인 실행기

계측 빌드 → 테스트 → LCOV 생성 → 요약 → (상위 호출 시) Coveralls 업로드
"""
__version__ = "0.1.0"

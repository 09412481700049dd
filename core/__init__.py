# core/__init__.py
"""
core - CloudWatch 메트릭 수집기 인프라

아키텍처:
    core/
    ├── auth/           # boto3 Session / client 핸들
    ├── parallel/       # 병렬 처리 (fan-out, rate limiter, client)
    ├── metrics/        # 발견 -> 매칭 -> 배치 -> 조회 파이프라인
    ├── config.py       # 중앙 설정 (상수, 버전)
    └── exceptions.py   # 통합 예외 계층

Usage:
    from core.metrics import MetricsPipeline, load_config
    from core.exceptions import MetricsError
"""

from core import auth, config, exceptions, metrics, parallel

__all__: list[str] = [
    # 서브패키지
    "auth",
    "metrics",
    "parallel",
    # 모듈
    "config",
    "exceptions",
]

"""
core/parallel - 병렬 처리 모듈

파이프라인 단계별 fan-out / join 과 API 호출 속도 제한을 제공합니다.

주요 구성 요소:
- fan_out: 작업 단위별 병렬 실행 + barrier join
- ResultAccumulator: lock으로 보호되는 결과 누적기
- TokenBucketRateLimiter: API 쓰로틀링 방지
- get_client: 전송 계층 재시도가 설정된 boto3 client

Example:
    from core.parallel import create_rate_limiter, fan_out

    limiter = create_rate_limiter("get_metric_data")
    rows = fan_out(fetch_batch, batches, rate_limiter=limiter)
"""

from .client import get_client
from .executor import ParallelConfig, ResultAccumulator, fan_out
from .rate_limiter import (
    SERVICE_RATE_LIMITS,
    RateLimiterConfig,
    TokenBucketRateLimiter,
    create_rate_limiter,
)

__all__: list[str] = [
    # Executor
    "ParallelConfig",
    "ResultAccumulator",
    "fan_out",
    # Client (retry 적용)
    "get_client",
    # Rate Limiter
    "SERVICE_RATE_LIMITS",
    "RateLimiterConfig",
    "TokenBucketRateLimiter",
    "create_rate_limiter",
]

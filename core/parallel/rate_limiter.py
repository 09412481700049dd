"""
core/parallel/rate_limiter.py - API 호출 속도 제한

토큰 버킷 방식으로 초당 호출 수를 제한합니다.
하나의 인스턴스를 여러 스레드가 공유하며, 모든 호출자가 같은 간격으로 통과합니다.

burst_size=1 (기본값)이면 버스트 없이 1/requests_per_second 초 간격으로만 허용됩니다.

Example:
    limiter = create_rate_limiter("list_metrics")  # 25 req/s

    def worker(name):
        limiter.acquire()  # 허용될 때까지 대기
        cloudwatch.list_metrics(...)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from core.config import MAX_RATE_LIMIT_GET_METRIC_DATA, MAX_RATE_LIMIT_LIST_METRICS

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Rate limiter 설정

    Attributes:
        requests_per_second: 초당 허용 호출 수 (> 0)
        burst_size: 버킷 최대 토큰 수 (1이면 버스트 없음)
        wait_timeout: acquire() 최대 대기 시간 (초, None이면 무제한)
    """

    requests_per_second: float = 10.0
    burst_size: int = 1
    wait_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {self.requests_per_second}")
        if self.burst_size < 1:
            raise ValueError(f"burst_size must be >= 1, got {self.burst_size}")

    @property
    def interval(self) -> float:
        """토큰 1개가 채워지는 간격 (초)"""
        return 1.0 / self.requests_per_second


# 작업별 호출 한도
SERVICE_RATE_LIMITS: dict[str, RateLimiterConfig] = {
    "list_metrics": RateLimiterConfig(requests_per_second=MAX_RATE_LIMIT_LIST_METRICS),
    "get_metric_data": RateLimiterConfig(requests_per_second=MAX_RATE_LIMIT_GET_METRIC_DATA),
    "default": RateLimiterConfig(),
}


class TokenBucketRateLimiter:
    """스레드 세이프 토큰 버킷 Rate limiter

    토큰은 requests_per_second 속도로 채워지고 burst_size를 넘지 않습니다.
    """

    def __init__(self, config: RateLimiterConfig | None = None):
        self.config = config or RateLimiterConfig()
        self._tokens = float(self.config.burst_size)
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        """경과 시간만큼 토큰 보충 (lock 보유 상태에서 호출)"""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._last_refill = now
        self._tokens = min(
            float(self.config.burst_size),
            self._tokens + elapsed * self.config.requests_per_second,
        )

    @property
    def available_tokens(self) -> float:
        """현재 사용 가능한 토큰 수"""
        with self._lock:
            self._refill()
            return self._tokens

    def try_acquire(self, tokens: int = 1) -> bool:
        """대기 없이 토큰 획득 시도

        Returns:
            획득 성공 시 True
        """
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def acquire(self, tokens: int = 1) -> bool:
        """토큰을 획득할 때까지 대기

        wait_timeout이 None이면 항상 True를 반환합니다 (지연만 발생).

        Returns:
            획득 성공 시 True, 타임아웃 시 False
        """
        timeout = self.config.wait_timeout
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return True
                wait = (tokens - self._tokens) / self.config.requests_per_second

            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.debug("Rate limiter 대기 시간 초과")
                    return False
                wait = min(wait, remaining)

            time.sleep(wait)


def create_rate_limiter(operation: str) -> TokenBucketRateLimiter:
    """작업 이름에 맞는 새 Rate limiter 생성

    알 수 없는 작업은 default 설정을 사용합니다.
    """
    config = SERVICE_RATE_LIMITS.get(operation, SERVICE_RATE_LIMITS["default"])
    return TokenBucketRateLimiter(
        RateLimiterConfig(
            requests_per_second=config.requests_per_second,
            burst_size=config.burst_size,
            wait_timeout=config.wait_timeout,
        )
    )

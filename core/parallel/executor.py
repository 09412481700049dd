"""
core/parallel/executor.py - 단계별 병렬 실행기

작업 단위(메트릭 이름, 쿼리 배치)마다 스레드 1개를 할당해 병렬 실행하고,
모든 작업이 끝날 때까지 기다린 뒤(barrier) 결과를 반환합니다.

특징:
- ThreadPoolExecutor 기반 fan-out / join
- 각 작업은 API 호출 전에 Rate limiter를 통과
- 결과는 공유 리스트에 lock을 잡고 append (완료 순서 = 결과 순서)
- 하나라도 실패하면 남은 작업을 취소하고 첫 예외를 그대로 전파 (부분 결과 없음)

Example:
    from core.parallel import ParallelConfig, fan_out

    rows = fan_out(fetch_batch, batches, rate_limiter=limiter, label="get_metric_data")
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Generic, TypeVar

from .rate_limiter import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ParallelConfig:
    """병렬 실행 설정

    Attributes:
        max_workers: 최대 동시 스레드 수 (1~100)
    """

    max_workers: int = 20

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > 100:
            self.max_workers = 100


class ResultAccumulator(Generic[R]):
    """스레드 세이프 결과 누적기

    여러 워커 스레드가 동시에 결과를 추가합니다.
    lock은 append 직후 바로 해제됩니다.
    """

    def __init__(self) -> None:
        self._items: list[R] = []
        self._lock = threading.Lock()

    def extend(self, items: Iterable[R]) -> None:
        with self._lock:
            self._items.extend(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def snapshot(self) -> list[R]:
        """현재까지 누적된 결과 복사본"""
        with self._lock:
            return list(self._items)


def fan_out(
    func: Callable[[T], Iterable[R]],
    items: Sequence[T],
    rate_limiter: TokenBucketRateLimiter | None = None,
    config: ParallelConfig | None = None,
    label: str = "task",
) -> list[R]:
    """작업 목록을 병렬 실행하고 결과를 하나의 리스트로 병합

    Args:
        func: item -> 결과 iterable
        items: 작업 단위 목록 (항목 1개 = 작업 1개)
        rate_limiter: 각 작업이 func 호출 전에 통과할 limiter
        config: 병렬 실행 설정
        label: 로깅용 작업 이름

    Returns:
        모든 작업 결과를 완료 순서대로 이어 붙인 리스트

    Raises:
        작업 중 처음 발생한 예외 (남은 작업은 취소됨)
    """
    if not items:
        return []

    config = config or ParallelConfig()
    accumulator: ResultAccumulator[R] = ResultAccumulator()
    max_workers = min(config.max_workers, len(items))

    def run_one(item: T) -> None:
        if rate_limiter is not None:
            rate_limiter.acquire()
        accumulator.extend(func(item))

    logger.debug(f"병렬 실행 시작 [{label}]: {len(items)}개 작업, max_workers={max_workers}")
    start_time = time.monotonic()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(run_one, item) for item in items]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

        errors = [f.exception() for f in futures if f in done and f.exception() is not None]
        if errors:
            # 아직 시작하지 않은 작업 취소 (실행 중인 작업은 종료까지 대기)
            for future in not_done:
                future.cancel()
            logger.error(f"병렬 실행 실패 [{label}]: {errors[0]}")
            raise errors[0]  # type: ignore[misc]

    total_time = (time.monotonic() - start_time) * 1000
    logger.debug(f"병렬 실행 완료 [{label}]: 결과 {len(accumulator)}건, 총 {total_time:.0f}ms")

    return accumulator.snapshot()

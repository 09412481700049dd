"""
core/metrics/planner.py - GetMetricData 배치 구성

리소스 1개는 메트릭 수만큼 MetricDataQuery를 만들므로,
batch_size = MAX_METRIC_DATA_QUERY // len(metrics) 개씩 순서대로 묶습니다.
마지막 배치는 더 작을 수 있습니다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TypeVar

from core.exceptions import DataShapeError

from .types import MAX_METRIC_DATA_QUERY, QueryBatch, Resource, ServiceSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _chunks(lst: Sequence[T], n: int) -> Iterator[Sequence[T]]:
    """리스트를 n개씩 분할"""
    for i in range(0, len(lst), n):
        yield lst[i : i + n]


def batch_size(service: ServiceSpec, max_queries: int = MAX_METRIC_DATA_QUERY) -> int:
    """요청 1회에 담을 수 있는 리소스 수

    Raises:
        DataShapeError: 메트릭 수가 요청당 쿼리 한도를 넘는 경우
    """
    metric_count = len(service.metrics)
    if metric_count == 0:
        raise DataShapeError(service.namespace, "메트릭이 없습니다")

    size = max_queries // metric_count
    if size < 1:
        raise DataShapeError(
            service.namespace,
            f"메트릭 {metric_count}개가 요청당 쿼리 한도 {max_queries}개를 초과합니다",
        )
    return size


def plan(
    service: ServiceSpec,
    resources: Sequence[Resource],
    max_queries: int = MAX_METRIC_DATA_QUERY,
) -> list[QueryBatch]:
    """리소스 목록을 GetMetricData 배치로 분할

    Args:
        service: 대상 서비스 정의
        resources: 매칭된 리소스 목록 (순서 유지)
        max_queries: 요청당 최대 쿼리 수

    Returns:
        QueryBatch 목록 (각 배치의 쿼리 수 <= max_queries)
    """
    size = batch_size(service, max_queries)
    batches = [QueryBatch(resources=list(chunk)) for chunk in _chunks(resources, size)]

    logger.debug(f"{service.namespace}: 리소스 {len(resources)}개 -> 배치 {len(batches)}개 (배치당 {size}개)")
    return batches

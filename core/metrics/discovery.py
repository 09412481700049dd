"""
core/metrics/discovery.py - 메트릭/차원 조합 발견

ListMetrics를 메트릭 이름별로 병렬 호출하여, 현재 메트릭을 내보내는
(메트릭 이름, 차원 목록) 조합을 모두 수집합니다.

- NextToken이 없어질 때까지 페이지를 따라갑니다.
- 페이지 호출마다 ListMetrics용 Rate limiter를 통과합니다.
- 차원이 없는 결과(서비스 전체 집계 메트릭)는 리소스 단위가 아니므로 제외합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import APICallError
from core.parallel import ParallelConfig, TokenBucketRateLimiter, fan_out

from .types import Dimension, DiscoveredMetric, ServiceSpec

logger = logging.getLogger(__name__)


def list_metrics(
    cloudwatch_client: Any,
    namespace: str,
    metric_name: str,
    rate_limiter: TokenBucketRateLimiter | None = None,
) -> list[DiscoveredMetric]:
    """ListMetrics 결과를 모든 페이지에 걸쳐 수집

    Args:
        cloudwatch_client: boto3 CloudWatch client
        namespace: CloudWatch 네임스페이스
        metric_name: 메트릭 이름
        rate_limiter: 페이지 호출마다 통과할 limiter

    Returns:
        차원이 1개 이상인 DiscoveredMetric 목록

    Raises:
        APICallError: ListMetrics 호출 실패
    """
    results: list[DiscoveredMetric] = []
    params: dict[str, Any] = {"Namespace": namespace, "MetricName": metric_name}
    next_token = None
    pages = 0

    while True:
        if next_token:
            params["NextToken"] = next_token
        if rate_limiter is not None:
            rate_limiter.acquire()

        try:
            response = cloudwatch_client.list_metrics(**params)
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error("cloudwatch", "list_metrics", e) from e
        pages += 1

        for metric in response.get("Metrics", []):
            dimensions = metric.get("Dimensions") or []
            # 차원 없는 메트릭은 제외
            if not dimensions:
                continue
            results.append(
                DiscoveredMetric(
                    metric_name=metric.get("MetricName", metric_name),
                    dimensions=tuple(Dimension.from_api(d) for d in dimensions),
                )
            )

        next_token = response.get("NextToken")
        if not next_token:
            break

    logger.debug(f"ListMetrics {namespace}/{metric_name}: {pages}페이지, {len(results)}건")
    return results


def discover(
    cloudwatch_client: Any,
    service: ServiceSpec,
    metric_names: Sequence[str] | None = None,
    rate_limiter: TokenBucketRateLimiter | None = None,
    config: ParallelConfig | None = None,
) -> list[DiscoveredMetric]:
    """메트릭 이름별 ListMetrics를 병렬 실행하여 결과 병합

    Args:
        cloudwatch_client: boto3 CloudWatch client
        service: 대상 서비스 정의
        metric_names: 조회할 메트릭 이름 목록 (None이면 service.metric_names)
        rate_limiter: ListMetrics용 limiter (모든 작업이 공유)
        config: 병렬 실행 설정

    Returns:
        모든 메트릭 이름의 DiscoveredMetric (완료 순서)
    """
    names = list(dict.fromkeys(metric_names if metric_names is not None else service.metric_names))

    discovered = fan_out(
        lambda name: list_metrics(cloudwatch_client, service.namespace, name, rate_limiter),
        names,
        config=config,
        label=f"list_metrics:{service.namespace}",
    )

    logger.info(f"{service.namespace}: 메트릭 {len(names)}종, 발견 {len(discovered)}건")
    return discovered

"""
core/metrics/pipeline.py - 메트릭 수집 파이프라인

서비스별로 다음 단계를 순서대로 실행합니다 (단계 간 겹침 없음):

    discover -> (inventory) -> match -> plan -> retrieve

각 단계의 전체 출력이 다음 단계의 입력입니다.
라벨 전용 모드에서는 retrieve를 생략합니다.

Example:
    from core.auth import create_clients
    from core.metrics import MetricsPipeline, load_config

    pipeline = MetricsPipeline(create_clients(profile, region))
    for result in pipeline.run(load_config("config.yml")):
        for row in result.rows:
            print(*row.as_fields())
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from core.parallel import ParallelConfig, TokenBucketRateLimiter, create_rate_limiter

from .discovery import discover
from .inventory import InstanceInventory, load_instance_inventory
from .matcher import match, needs_inventory
from .planner import batch_size, plan
from .retriever import retrieve
from .types import MAX_METRIC_DATA_QUERY, MetricRow, ServiceSpec

if TYPE_CHECKING:
    from core.auth.session import AwsClients

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """서비스 1개 처리 결과

    Attributes:
        service: 처리한 서비스 정의
        labels: 매칭/중복 제거된 리소스 라벨
        rows: 조회된 메트릭 행 (라벨 전용 모드에서는 빈 리스트)
        batch_count: 발행한 GetMetricData 배치 수
        duration_ms: 처리 시간
    """

    service: ServiceSpec
    labels: list[str] = field(default_factory=list)
    rows: list[MetricRow] = field(default_factory=list)
    batch_count: int = 0
    duration_ms: float = 0.0


class MetricsPipeline:
    """메트릭 수집 파이프라인

    AWS client 핸들과 두 개의 Rate limiter(ListMetrics, GetMetricData)를 소유하고
    각 단계에 명시적으로 전달합니다.
    """

    def __init__(
        self,
        clients: AwsClients,
        list_limiter: TokenBucketRateLimiter | None = None,
        data_limiter: TokenBucketRateLimiter | None = None,
        parallel_config: ParallelConfig | None = None,
        max_queries: int = MAX_METRIC_DATA_QUERY,
    ):
        self.clients = clients
        self.list_limiter = list_limiter or create_rate_limiter("list_metrics")
        self.data_limiter = data_limiter or create_rate_limiter("get_metric_data")
        self.parallel_config = parallel_config or ParallelConfig()
        self.max_queries = max_queries

    def load_inventory(self) -> InstanceInventory:
        """EC2 인벤토리 조회 (서비스 처리 1회당 1번)"""
        return load_instance_inventory(self.clients.ec2)

    def run_service(self, service: ServiceSpec, label_only: bool = False) -> ServiceResult:
        """서비스 1개에 대해 파이프라인 실행

        Raises:
            DataShapeError: 메트릭 수가 요청당 쿼리 한도를 넘는 경우 (API 호출 전)
            APICallError: API 호출 실패
        """
        start_time = time.monotonic()

        # 쿼리 발행 전에 배치 크기 검증
        if not label_only:
            batch_size(service, self.max_queries)

        discovered = discover(
            self.clients.cloudwatch,
            service,
            rate_limiter=self.list_limiter,
            config=self.parallel_config,
        )

        inventory = self.load_inventory() if needs_inventory(discovered) else None
        matched = match(service, discovered, inventory)

        result = ServiceResult(service=service, labels=matched.labels)
        if not label_only:
            batches = plan(service, matched.resources, self.max_queries)
            result.batch_count = len(batches)
            result.rows = retrieve(
                self.clients.cloudwatch,
                service,
                batches,
                rate_limiter=self.data_limiter,
                config=self.parallel_config,
            )

        result.duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            f"{service.namespace}: 완료 (리소스 {len(result.labels)}, 배치 {result.batch_count}, "
            f"행 {len(result.rows)}, {result.duration_ms:.0f}ms)"
        )
        return result

    def run(self, services: Iterable[ServiceSpec], label_only: bool = False) -> Iterator[ServiceResult]:
        """설정된 서비스를 순서대로 처리하며 결과를 서비스 단위로 반환"""
        for service in services:
            yield self.run_service(service, label_only=label_only)

"""
core/metrics/retriever.py - GetMetricData 배치 조회

배치 1개당 GetMetricData 1회 (최대 100개 MetricDataQuery)를 호출하고,
응답을 (라벨, 메트릭 이름, unix 시각, 값) 행으로 펼칩니다.

쿼리 ID는 응답에 그대로 돌아오므로, 쿼리 생성 시 만든 ID 맵으로
결과를 원래 리소스/메트릭에 연결합니다.

예시:
    EC2 250대 x 메트릭 1개 = 배치 3개 (100/100/50) = API 3회
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import APICallError
from core.parallel import ParallelConfig, TokenBucketRateLimiter, fan_out

from .types import DimensionSet, MetricRow, MetricSpec, QueryBatch, ServiceSpec

logger = logging.getLogger(__name__)

# MetricDataQuery Id 최대 길이는 255자, 접미사 공간 확보를 위해 200자로 제한
MAX_ID_BASE_LENGTH = 200


@dataclass(frozen=True)
class MetricQuery:
    """CloudWatch 메트릭 쿼리 정의

    Attributes:
        id: 쿼리 식별자 (결과 매핑용, 영문/숫자/_ 만 허용)
        label: 결과 행에 기록할 리소스 라벨
        metric: 메트릭 정의 (이름, 통계)
        namespace: AWS 네임스페이스 (예: "AWS/EC2")
        dimensions: 차원 목록 (ListMetrics 응답 순서)
        period: 집계 주기 (초)
    """

    id: str
    label: str
    metric: MetricSpec
    namespace: str
    dimensions: DimensionSet
    period: int

    def to_api(self) -> dict[str, Any]:
        return {
            "Id": self.id,
            "MetricStat": {
                "Metric": {
                    "Namespace": self.namespace,
                    "MetricName": self.metric.name,
                    "Dimensions": [d.to_api() for d in self.dimensions],
                },
                "Period": self.period,
                "Stat": self.metric.statistic,
            },
        }


def sanitize_query_id(label: str) -> str:
    """AWS MetricDataQuery ID 규칙에 맞게 변환

    AWS 제약:
    - 소문자로 시작
    - 영숫자, `_`만 허용
    - 최대 255자

    Example:
        sanitize_query_id("i-0123abcd")     # "i0123abcd"
        sanitize_query_id("web-server.1")   # "webserver1"
        sanitize_query_id("WebServer")      # "mWebServer"
    """
    # 구분 문자 제거
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", label)

    # 소문자로 시작하지 않으면 prefix 추가 (빈 문자열 포함)
    if not sanitized or not ("a" <= sanitized[0] <= "z"):
        sanitized = f"m{sanitized}"

    return sanitized[:MAX_ID_BASE_LENGTH]


def build_queries(service: ServiceSpec, batch: QueryBatch) -> list[MetricQuery]:
    """배치의 (리소스, 메트릭) 조합마다 MetricQuery 생성

    ID 형식: <정리된 라벨>_<배치 내 리소스 순번>_<메트릭 순번>
    정리 후 라벨이 같아지는 리소스가 있어도 순번으로 배치 내 유일성을 보장합니다.
    """
    queries = []
    for resource_idx, resource in enumerate(batch.resources):
        base = sanitize_query_id(resource.label)
        for metric_idx, metric in enumerate(service.metrics):
            queries.append(
                MetricQuery(
                    id=f"{base}_{resource_idx}_{metric_idx}",
                    label=resource.label,
                    metric=metric,
                    namespace=service.namespace,
                    dimensions=resource.dimensions,
                    period=service.period_seconds,
                )
            )
    return queries


def time_window(service: ServiceSpec, now: datetime | None = None) -> tuple[datetime, datetime]:
    """조회 구간 [now - start_offset, now - end_offset]"""
    now = now or datetime.now(timezone.utc)
    start_time = now - timedelta(seconds=service.start_offset_seconds)
    end_time = now - timedelta(seconds=service.end_offset_seconds)
    return start_time, end_time


def format_value(value: float) -> str:
    """메트릭 값을 문자열로 변환 (정수 값은 소수점 없이)"""
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _to_epoch(timestamp: datetime) -> int:
    return int(timestamp.timestamp())


def get_batch(
    cloudwatch_client: Any,
    service: ServiceSpec,
    batch: QueryBatch,
    rate_limiter: TokenBucketRateLimiter | None = None,
    now: datetime | None = None,
) -> list[MetricRow]:
    """배치 1개에 대해 GetMetricData 호출 후 결과 행 생성

    Args:
        cloudwatch_client: boto3 CloudWatch client
        service: 대상 서비스 정의
        batch: 조회할 리소스 묶음
        rate_limiter: GetMetricData용 limiter (페이지 호출마다 통과)
        now: 기준 시각 (None이면 현재, 배치당 1회 계산)

    Returns:
        MetricRow 목록 (데이터 없는 시계열은 행 없음)

    Raises:
        APICallError: GetMetricData 호출 실패
    """
    queries = build_queries(service, batch)
    if not queries:
        return []

    # 쿼리 ID -> (라벨, 메트릭) 매핑
    id_map = {q.id: q for q in queries}
    start_time, end_time = time_window(service, now)

    params: dict[str, Any] = {
        "MetricDataQueries": [q.to_api() for q in queries],
        "StartTime": start_time,
        "EndTime": end_time,
    }

    rows: list[MetricRow] = []
    next_token = None

    # Pagination loop
    while True:
        if next_token:
            params["NextToken"] = next_token
        if rate_limiter is not None:
            rate_limiter.acquire()

        try:
            response = cloudwatch_client.get_metric_data(**params)
        except (ClientError, BotoCoreError) as e:
            raise APICallError.from_client_error("cloudwatch", "get_metric_data", e) from e

        for result in response.get("MetricDataResults", []):
            query = id_map.get(result.get("Id", ""))
            if query is None:
                logger.warning(f"알 수 없는 쿼리 ID 응답: {result.get('Id')}")
                continue

            timestamps = result.get("Timestamps", [])
            values = result.get("Values", [])
            for timestamp, value in zip(timestamps, values):
                rows.append(
                    MetricRow(
                        resource_label=query.label,
                        metric_name=query.metric.name,
                        timestamp=_to_epoch(timestamp),
                        value=format_value(value),
                    )
                )

        # 다음 페이지 확인
        next_token = response.get("NextToken")
        if not next_token:
            break

    return rows


def retrieve(
    cloudwatch_client: Any,
    service: ServiceSpec,
    batches: Sequence[QueryBatch],
    rate_limiter: TokenBucketRateLimiter | None = None,
    config: ParallelConfig | None = None,
) -> list[MetricRow]:
    """배치별 GetMetricData를 병렬 실행하여 결과 병합

    Returns:
        모든 배치의 MetricRow (완료 순서, 배치 간 순서 보장 없음)
    """
    rows = fan_out(
        lambda batch: get_batch(cloudwatch_client, service, batch, rate_limiter),
        batches,
        config=config,
        label=f"get_metric_data:{service.namespace}",
    )

    logger.info(f"{service.namespace}: 배치 {len(batches)}개, 결과 {len(rows)}행")
    return rows

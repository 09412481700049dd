"""
core/metrics/types.py - 메트릭 수집 타입 정의

설정에서 로드되는 ServiceSpec/MetricSpec (실행 중 불변)과
서비스 1회 처리 동안 생성/폐기되는 Dimension, Resource, QueryBatch,
그리고 최종 산출물인 MetricRow를 정의합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.config import MAX_METRIC_DATA_QUERY

__all__ = [
    "MAX_METRIC_DATA_QUERY",
    "Dimension",
    "DimensionSet",
    "DiscoveredMetric",
    "MetricRow",
    "MetricSpec",
    "QueryBatch",
    "Resource",
    "ServiceSpec",
]


@dataclass(frozen=True)
class MetricSpec:
    """조회할 메트릭 정의

    Attributes:
        name: 메트릭 이름 (예: "CPUUtilization")
        statistic: 통계 타입 (Average, Sum, Maximum, Minimum, SampleCount 등)
    """

    name: str
    statistic: str = "Average"


@dataclass(frozen=True)
class ServiceSpec:
    """서비스(네임스페이스)별 수집 정의

    Attributes:
        namespace: CloudWatch 네임스페이스 (예: "AWS/EC2")
        dimension_names: 리소스를 식별하는 차원 이름 목록 (매칭 시 순서 무시)
        metrics: 조회할 메트릭 목록
        start_offset_seconds: 조회 시작 시각 = now - start_offset
        end_offset_seconds: 조회 종료 시각 = now - end_offset
        period_seconds: 집계 주기 (초)
    """

    namespace: str
    dimension_names: tuple[str, ...]
    metrics: tuple[MetricSpec, ...]
    start_offset_seconds: int = 3600
    end_offset_seconds: int = 0
    period_seconds: int = 300

    @property
    def metric_names(self) -> list[str]:
        """메트릭 이름 목록 (중복 제거, 선언 순서 유지)"""
        return list(dict.fromkeys(m.name for m in self.metrics))


@dataclass(frozen=True)
class Dimension:
    """CloudWatch 차원 (name/value)"""

    name: str
    value: str

    def to_api(self) -> dict[str, str]:
        return {"Name": self.name, "Value": self.value}

    @classmethod
    def from_api(cls, data: dict) -> Dimension:
        return cls(name=data["Name"], value=data["Value"])


# 발견된 리소스 1개를 나타내는 차원 목록 (API 응답 순서 유지)
DimensionSet = tuple[Dimension, ...]


@dataclass(frozen=True)
class DiscoveredMetric:
    """ListMetrics 결과 1건 (메트릭 이름 + 차원 목록)"""

    metric_name: str
    dimensions: DimensionSet


@dataclass(frozen=True)
class Resource:
    """매칭/중복 제거를 통과한 조회 대상 리소스

    Attributes:
        label: 출력용 리소스 라벨 (중복 제거 키)
        dimensions: GetMetricData 쿼리에 사용할 차원 목록
    """

    label: str
    dimensions: DimensionSet


@dataclass
class QueryBatch:
    """GetMetricData 요청 1회에 담기는 리소스 묶음"""

    resources: list[Resource] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.resources)

    def query_count(self, service: ServiceSpec) -> int:
        """이 배치가 만들어내는 MetricDataQuery 수"""
        return len(self.resources) * len(service.metrics)


@dataclass(frozen=True)
class MetricRow:
    """출력 행 1건

    Attributes:
        resource_label: 리소스 라벨
        metric_name: 메트릭 이름
        timestamp: unix epoch (초)
        value: 값 (문자열 표현)
    """

    resource_label: str
    metric_name: str
    timestamp: int
    value: str

    def as_fields(self) -> tuple[str, str, str, str]:
        """출력 필드 순서: 라벨, 메트릭 이름, 타임스탬프, 값"""
        return (self.resource_label, self.metric_name, str(self.timestamp), self.value)

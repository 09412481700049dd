"""
core/metrics - CloudWatch 메트릭 수집 파이프라인

메트릭을 내보내는 리소스를 ListMetrics로 발견하고, EC2 인벤토리로 걸러낸 뒤
GetMetricData 배치 조회로 시계열 값을 가져옵니다.

Usage:
    from core.metrics import MetricsPipeline, load_config

    services = load_config("config.yml")
    pipeline = MetricsPipeline(clients)
    for result in pipeline.run(services):
        ...
"""

from .config import default_config_text, load_config, parse_config
from .discovery import discover, list_metrics
from .inventory import RESOURCE_ID_DIMENSIONS, InstanceInventory, load_instance_inventory
from .matcher import MatchResult, match, resource_label
from .pipeline import MetricsPipeline, ServiceResult
from .planner import batch_size, plan
from .retriever import MetricQuery, build_queries, get_batch, retrieve, sanitize_query_id
from .types import (
    MAX_METRIC_DATA_QUERY,
    Dimension,
    DimensionSet,
    DiscoveredMetric,
    MetricRow,
    MetricSpec,
    QueryBatch,
    Resource,
    ServiceSpec,
)

__all__ = [
    # config
    "default_config_text",
    "load_config",
    "parse_config",
    # discovery
    "discover",
    "list_metrics",
    # inventory
    "RESOURCE_ID_DIMENSIONS",
    "InstanceInventory",
    "load_instance_inventory",
    # matcher
    "MatchResult",
    "match",
    "resource_label",
    # planner
    "batch_size",
    "plan",
    # retriever
    "MetricQuery",
    "build_queries",
    "get_batch",
    "retrieve",
    "sanitize_query_id",
    # pipeline
    "MetricsPipeline",
    "ServiceResult",
    # types
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

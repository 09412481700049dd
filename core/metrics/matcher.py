"""
core/metrics/matcher.py - 차원 매칭 및 중복 제거

발견된 차원 목록 중 서비스에 선언된 차원 이름 집합과 정확히 일치하는 것만 남기고,
리소스 라벨 기준으로 중복을 제거합니다.

처리 순서 (발견 순서대로):
    1. 차원 이름/값 추출 (쌍 유지)
    2. 첫 차원이 리소스 ID(InstanceId)이면 인벤토리로 상태 확인, running이 아니면 제외
    3. 정렬한 차원 이름 목록 == 정렬한 service.dimension_names 인 경우만 유지
    4. 라벨 = 차원 값을 원래 순서대로 "-"로 연결 (리소스 ID면 Name 태그로 대체)
    5. 라벨 중복이면 먼저 나온 것만 유지

Note:
    이름 비교는 정렬 후 수행하지만 라벨은 원래 순서의 값으로 만듭니다.
    같은 리소스가 서로 다른 차원 순서로 응답되면 라벨이 달라질 수 있습니다 (알려진 제약).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from core.exceptions import ConfigError

from .inventory import RESOURCE_ID_DIMENSIONS, InstanceInventory
from .types import DimensionSet, DiscoveredMetric, Resource, ServiceSpec

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """매칭 결과

    Attributes:
        labels: 유지된 리소스 라벨 (중복 없음, 발견 순서)
        resources: 조회 대상 리소스 (labels와 같은 순서)
        skipped_inactive: running이 아니어서 제외된 건수
        skipped_mismatch: 차원 구성이 달라 제외된 건수
        skipped_duplicate: 라벨 중복으로 제외된 건수
    """

    labels: list[str] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    skipped_inactive: int = 0
    skipped_mismatch: int = 0
    skipped_duplicate: int = 0


def join_dimension_values(dimensions: DimensionSet) -> str:
    """차원 값을 원래 순서대로 "-"로 연결"""
    return "-".join(d.value for d in dimensions)


def is_resource_id_keyed(dimensions: DimensionSet) -> bool:
    """첫 차원이 인벤토리 조회 대상 리소스 ID인지 확인"""
    return bool(dimensions) and dimensions[0].name in RESOURCE_ID_DIMENSIONS


def needs_inventory(discovered: Iterable[DiscoveredMetric]) -> bool:
    """발견 결과 중 인벤토리 조회가 필요한 항목이 있는지 확인"""
    return any(is_resource_id_keyed(m.dimensions) for m in discovered)


def resource_label(dimensions: DimensionSet, inventory: InstanceInventory | None = None) -> str:
    """리소스 라벨 생성

    첫 차원이 리소스 ID이면 인벤토리의 Name 태그 (없으면 ID 자체)를 사용합니다.
    """
    if inventory is not None and is_resource_id_keyed(dimensions):
        return inventory.resolve_name(dimensions[0].value)
    return join_dimension_values(dimensions)


def match(
    service: ServiceSpec,
    discovered: Iterable[DiscoveredMetric],
    inventory: InstanceInventory | None = None,
) -> MatchResult:
    """발견된 차원 목록을 서비스 정의와 매칭하고 라벨 기준 중복 제거

    Args:
        service: 대상 서비스 정의
        discovered: discover() 결과
        inventory: 리소스 ID 차원의 상태/이름 조회기

    Returns:
        MatchResult

    Raises:
        ConfigError: 리소스 ID 차원이 발견되었는데 inventory가 없는 경우
    """
    result = MatchResult()
    expected = sorted(service.dimension_names)
    if not expected:
        logger.warning(f"{service.namespace}: 선언된 dimensions가 없어 매칭 결과가 비어 있습니다")
        return result

    seen: set[str] = set()

    for metric in discovered:
        dimensions = metric.dimensions
        names = [d.name for d in dimensions]

        # running 상태가 아닌 인스턴스는 제외
        if is_resource_id_keyed(dimensions):
            if inventory is None:
                raise ConfigError(service.namespace, f"{names[0]} 차원 조회에 인벤토리가 필요합니다")
            if not inventory.is_running(dimensions[0].value):
                result.skipped_inactive += 1
                continue

        # 차원 구성 요소가 일치하는 경우만 (순서 무시)
        if sorted(names) != expected:
            result.skipped_mismatch += 1
            continue

        label = resource_label(dimensions, inventory)
        if label in seen:
            result.skipped_duplicate += 1
            continue

        seen.add(label)
        result.labels.append(label)
        result.resources.append(Resource(label=label, dimensions=dimensions))

    logger.info(
        f"{service.namespace}: 대상 리소스 {len(result.resources)}개 "
        f"(비활성 {result.skipped_inactive}, 차원 불일치 {result.skipped_mismatch}, "
        f"중복 {result.skipped_duplicate})"
    )
    return result

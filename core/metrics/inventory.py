"""
core/metrics/inventory.py - 리소스 인벤토리 조회

발견된 차원 값(리소스 ID)을 생존 상태와 표시 이름으로 변환합니다.
DescribeInstances 1회 수집 결과로 (id -> state), (id -> Name 태그) 맵을 만들어
서비스 1회 처리 동안 재사용합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import APICallError

logger = logging.getLogger(__name__)

# 인벤토리로 상태/이름을 조회하는 차원 이름
RESOURCE_ID_DIMENSIONS = frozenset({"InstanceId"})

RUNNING_STATE = "running"
UNKNOWN_STATE = "unknown"


@dataclass(frozen=True)
class InstanceInventory:
    """EC2 인스턴스 상태/이름 조회기

    Attributes:
        states: instance_id -> 상태 (running, stopped 등)
        names: instance_id -> Name 태그 값 (빈 이름은 포함하지 않음)
    """

    states: dict[str, str] = field(default_factory=dict)
    names: dict[str, str] = field(default_factory=dict)

    def resolve_state(self, instance_id: str, default: str = UNKNOWN_STATE) -> str:
        """인스턴스 상태 (모르는 ID는 default)"""
        return self.states.get(instance_id, default)

    def resolve_name(self, instance_id: str) -> str:
        """Name 태그 값 (없으면 ID 그대로)"""
        return self.names.get(instance_id, instance_id)

    def is_running(self, instance_id: str) -> bool:
        return self.resolve_state(instance_id) == RUNNING_STATE


def _name_tag(tags: list | None) -> str:
    for tag in tags or []:
        if tag.get("Key") == "Name":
            return str(tag.get("Value") or "")
    return ""


def load_instance_inventory(ec2_client: Any) -> InstanceInventory:
    """DescribeInstances로 인스턴스 상태/이름 맵 생성

    Args:
        ec2_client: boto3 EC2 client

    Returns:
        InstanceInventory

    Raises:
        APICallError: DescribeInstances 호출 실패
    """
    states: dict[str, str] = {}
    names: dict[str, str] = {}

    try:
        paginator = ec2_client.get_paginator("describe_instances")
        for page in paginator.paginate():
            for reservation in page.get("Reservations", []):
                for inst in reservation.get("Instances", []):
                    instance_id = inst["InstanceId"]
                    states[instance_id] = inst.get("State", {}).get("Name", UNKNOWN_STATE)
                    name = _name_tag(inst.get("Tags"))
                    if name:
                        names[instance_id] = name
    except (ClientError, BotoCoreError) as e:
        raise APICallError.from_client_error("ec2", "describe_instances", e) from e

    logger.debug(f"EC2 인벤토리: 인스턴스 {len(states)}개, 이름 {len(names)}개")
    return InstanceInventory(states=states, names=names)

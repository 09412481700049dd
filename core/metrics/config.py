"""
core/metrics/config.py - 수집 설정 로드

YAML 설정 파일을 읽어 ServiceSpec 목록으로 변환합니다.
파일이 없으면 패키지에 포함된 기본 설정(data/config.yml)을 사용합니다.

설정 형식:
    default:
      start_time: 3600      # 현재 - 3600초 부터
      end_time: 0           # 현재 - 0초 까지
      period: 300
      metrics:
        - name: CPUUtilization
          statistics: Average
    services:
      - namespace: AWS/EC2
        dimensions: [InstanceId]
        metrics: [...]      # 생략 시 default.metrics

서비스 항목에서 0 또는 생략된 값은 default 값으로 채워집니다.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from core.exceptions import ConfigError

from .types import MetricSpec, ServiceSpec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_RESOURCE = "data/config.yml"


def default_config_text() -> str:
    """패키지에 포함된 기본 설정 YAML 원문"""
    return resources.files("core.metrics").joinpath(DEFAULT_CONFIG_RESOURCE).read_text(encoding="utf-8")


def load_config(path: str | Path | None) -> list[ServiceSpec]:
    """설정 파일 로드

    Args:
        path: 설정 파일 경로 (None이거나 존재하지 않으면 기본 설정 사용)

    Returns:
        기본값이 적용된 ServiceSpec 목록

    Raises:
        ConfigError: 파일을 읽을 수 없거나 형식이 잘못된 경우
    """
    if path is not None and Path(path).exists():
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(str(path), "설정 파일을 읽을 수 없습니다", cause=e) from e
        source = str(path)
    else:
        if path is not None:
            logger.info(f"설정 파일 없음 ({path}), 기본 설정 사용")
        text = default_config_text()
        source = DEFAULT_CONFIG_RESOURCE

    return parse_config(text, source=source)


def parse_config(text: str, source: str = "<string>") -> list[ServiceSpec]:
    """YAML 문자열을 ServiceSpec 목록으로 변환"""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(source, "YAML 형식 오류", cause=e) from e

    if not isinstance(data, dict):
        raise ConfigError(source, "최상위 항목은 매핑이어야 합니다")

    defaults = data.get("default") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("default", "매핑이어야 합니다")

    services = data.get("services")
    if not services:
        raise ConfigError("services", "서비스가 하나도 정의되지 않았습니다")
    if not isinstance(services, list):
        raise ConfigError("services", "리스트여야 합니다")

    default_metrics = _parse_metrics(defaults.get("metrics"), "default.metrics")

    specs = []
    for idx, raw in enumerate(services):
        specs.append(_build_service(raw, defaults, default_metrics, f"services[{idx}]"))

    logger.debug(f"설정 로드 완료 ({source}): 서비스 {len(specs)}개")
    return specs


def _build_service(
    raw: Any,
    defaults: dict[str, Any],
    default_metrics: tuple[MetricSpec, ...],
    key: str,
) -> ServiceSpec:
    """서비스 항목 1개에 기본값을 적용하여 ServiceSpec 생성"""
    if not isinstance(raw, dict):
        raise ConfigError(key, "매핑이어야 합니다")

    namespace = raw.get("namespace")
    if not namespace or not isinstance(namespace, str):
        raise ConfigError(f"{key}.namespace", "네임스페이스가 필요합니다")

    dimensions = raw.get("dimensions") or []
    if isinstance(dimensions, str):
        dimensions = [dimensions]
    if not isinstance(dimensions, list) or not all(isinstance(d, str) for d in dimensions):
        raise ConfigError(f"{key}.dimensions", "문자열 리스트여야 합니다")
    if not dimensions:
        # 치명적 오류는 아님: 매칭되는 리소스가 없어 결과가 비게 됨
        logger.warning(f"{namespace}: dimensions가 비어 있어 수집 대상이 없습니다")

    metrics = _parse_metrics(raw.get("metrics"), f"{key}.metrics") or default_metrics
    if not metrics:
        raise ConfigError(f"{key}.metrics", "메트릭이 없습니다 (default.metrics도 비어 있음)")

    start = _as_int(raw.get("start_time"), f"{key}.start_time") or _as_int(
        defaults.get("start_time"), "default.start_time"
    )
    end = _as_int(raw.get("end_time"), f"{key}.end_time") or _as_int(defaults.get("end_time"), "default.end_time")
    period = _as_int(raw.get("period"), f"{key}.period") or _as_int(defaults.get("period"), "default.period")

    if period <= 0:
        raise ConfigError(f"{key}.period", f"0보다 커야 합니다 (현재 {period})")
    if start <= end:
        raise ConfigError(
            f"{key}.start_time",
            f"start_time({start})은 end_time({end})보다 커야 합니다",
        )

    return ServiceSpec(
        namespace=namespace,
        dimension_names=tuple(dimensions),
        metrics=metrics,
        start_offset_seconds=start,
        end_offset_seconds=end,
        period_seconds=period,
    )


def _parse_metrics(raw: Any, key: str) -> tuple[MetricSpec, ...]:
    if not raw:
        return ()
    if not isinstance(raw, list):
        raise ConfigError(key, "리스트여야 합니다")

    metrics = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("name"):
            raise ConfigError(f"{key}[{idx}]", "name이 필요합니다")
        statistic = item.get("statistics") or item.get("statistic") or "Average"
        metrics.append(MetricSpec(name=str(item["name"]), statistic=str(statistic)))
    return tuple(metrics)


def _as_int(value: Any, key: str) -> int:
    """정수 변환 (None은 0으로 취급)"""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ConfigError(key, f"정수여야 합니다 (현재 {value!r})")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(key, f"정수여야 합니다 (현재 {value!r})", cause=e) from e

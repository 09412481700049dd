"""
cli/output.py - 결과 출력

메트릭 행은 "라벨 메트릭이름 unix시각 값" 형식으로 한 줄씩,
라벨 전용 모드에서는 라벨을 한 줄에 하나씩 stdout에 출력합니다.
"""

from collections.abc import Iterable

import click

from core.metrics import MetricRow


def format_row(row: MetricRow) -> str:
    """행 1건을 공백 구분 문자열로 변환"""
    return " ".join(row.as_fields())


def echo_rows(rows: Iterable[MetricRow]) -> int:
    """메트릭 행 출력

    Returns:
        출력한 행 수
    """
    count = 0
    for row in rows:
        click.echo(format_row(row))
        count += 1
    return count


def echo_labels(labels: Iterable[str]) -> int:
    """라벨 출력 (한 줄에 하나)"""
    count = 0
    for label in labels:
        click.echo(label)
        count += 1
    return count

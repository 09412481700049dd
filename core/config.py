"""
core/config.py - 중앙 설정 관리

프로세스 전역 상수와 버전 정보를 제공합니다.

CloudWatch 제한 참고:
    https://docs.aws.amazon.com/AmazonCloudWatch/latest/monitoring/cloudwatch_limits.html
"""

from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "cw-metrics-collector"

# GetMetricData 요청 1회에 담을 수 있는 MetricDataQuery 수 (고정)
MAX_METRIC_DATA_QUERY = 100

# API 제한 (초당 최대 호출 수)
MAX_RATE_LIMIT_LIST_METRICS = 25
MAX_RATE_LIMIT_GET_METRIC_DATA = 50

DEFAULT_REGION = "ap-northeast-1"
DEFAULT_CONFIG_PATH = "config.yml"

# 전송 계층 재시도 횟수 (파이프라인 레벨 재시도는 없음)
DEFAULT_MAX_ATTEMPTS = 10


def get_version() -> str:
    """설치된 패키지 버전 반환 (미설치 시 개발 버전)"""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "0.0.0"
"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(fake_cloudwatch, mock_ec2_client):
        # fake_cloudwatch: ListMetrics/GetMetricData 가짜 구현 (호출 기록)
        # mock_ec2_client: describe_instances 페이지네이터 모킹
        pass
"""

import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.auth.session import AwsClients  # noqa: E402
from core.metrics.types import MetricSpec, ServiceSpec  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-1")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# 테스트 데이터 헬퍼
# =============================================================================

SAMPLE_TIMESTAMP = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
SAMPLE_EPOCH = 1704067200


def make_service(
    namespace: str = "AWS/EC2",
    dimension_names=("InstanceId",),
    metrics=(("CPUUtilization", "Average"),),
    start: int = 3600,
    end: int = 0,
    period: int = 300,
) -> ServiceSpec:
    """테스트용 ServiceSpec 생성"""
    return ServiceSpec(
        namespace=namespace,
        dimension_names=tuple(dimension_names),
        metrics=tuple(MetricSpec(name=n, statistic=s) for n, s in metrics),
        start_offset_seconds=start,
        end_offset_seconds=end,
        period_seconds=period,
    )


def api_metric(metric_name: str, *dims: tuple) -> Dict[str, Any]:
    """ListMetrics 응답의 Metrics 항목 생성"""
    return {
        "Namespace": "AWS/EC2",
        "MetricName": metric_name,
        "Dimensions": [{"Name": n, "Value": v} for n, v in dims],
    }


def ec2_instance(instance_id: str, state: str = "running", name: Optional[str] = None) -> Dict[str, Any]:
    """describe_instances 응답의 Instances 항목 생성"""
    inst: Dict[str, Any] = {"InstanceId": instance_id, "State": {"Name": state}}
    if name is not None:
        inst["Tags"] = [{"Key": "Name", "Value": name}]
    return inst


class FakeCloudWatch:
    """CloudWatch client 가짜 구현

    Attributes:
        pages: MetricName -> ListMetrics 페이지 목록 (각 페이지는 Metrics 리스트)
        values: (MetricName, 첫 차원 값) -> [(timestamp, value), ...]
        list_calls / data_calls: 호출 인자 기록 (스레드 세이프)
    """

    def __init__(self, pages: Optional[Dict[str, List[List[dict]]]] = None, values: Optional[dict] = None):
        self.pages = pages or {}
        self.values = values or {}
        self.list_calls: List[dict] = []
        self.data_calls: List[dict] = []
        self._lock = threading.Lock()

    def list_metrics(self, **kwargs):
        with self._lock:
            self.list_calls.append(dict(kwargs))
        pages = self.pages.get(kwargs["MetricName"], [[]])
        index = int(kwargs.get("NextToken", "0"))
        response: Dict[str, Any] = {"Metrics": pages[index]}
        if index + 1 < len(pages):
            response["NextToken"] = str(index + 1)
        return response

    def get_metric_data(self, **kwargs):
        with self._lock:
            self.data_calls.append(dict(kwargs))
        results = []
        for query in kwargs["MetricDataQueries"]:
            metric = query["MetricStat"]["Metric"]
            key = (metric["MetricName"], metric["Dimensions"][0]["Value"])
            points = self.values.get(key, [])
            results.append(
                {
                    "Id": query["Id"],
                    "Label": metric["MetricName"],
                    "Timestamps": [ts for ts, _ in points],
                    "Values": [v for _, v in points],
                    "StatusCode": "Complete",
                }
            )
        return {"MetricDataResults": results}

    @property
    def total_queries(self) -> int:
        return sum(len(c["MetricDataQueries"]) for c in self.data_calls)


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def fake_cloudwatch():
    """빈 CloudWatch 가짜 client (테스트에서 pages/values 설정)"""
    return FakeCloudWatch()


def make_ec2_client(instances: List[Dict[str, Any]]) -> MagicMock:
    """describe_instances 페이지네이터가 설정된 EC2 client 모킹"""
    mock_client = MagicMock()
    mock_paginator = MagicMock()
    mock_paginator.paginate.return_value = [{"Reservations": [{"Instances": instances}]}]
    mock_client.get_paginator.return_value = mock_paginator
    return mock_client


@pytest.fixture
def mock_ec2_client():
    """EC2 클라이언트 모킹 (running 1대, stopped 1대)"""
    yield make_ec2_client(
        [
            ec2_instance("i-aaa", "running", "web-a"),
            ec2_instance("i-bbb", "stopped", "web-b"),
        ]
    )


@pytest.fixture
def aws_clients(fake_cloudwatch, mock_ec2_client):
    """가짜 client로 구성된 AwsClients"""
    return AwsClients(cloudwatch=fake_cloudwatch, ec2=mock_ec2_client, region="ap-northeast-1")


# =============================================================================
# moto 통합 (선택적)
# =============================================================================

try:
    import moto

    @pytest.fixture
    def aws_credentials():
        """moto 사용 시 AWS 자격 증명 설정"""
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
        os.environ["AWS_DEFAULT_REGION"] = "ap-northeast-1"

    @pytest.fixture
    def moto_ec2(aws_credentials):
        """moto를 사용한 EC2 모킹"""
        with moto.mock_aws():
            import boto3

            ec2 = boto3.client("ec2", region_name="ap-northeast-1")
            yield ec2

except ImportError:
    # moto가 설치되지 않은 경우 더미 픽스처
    @pytest.fixture
    def moto_ec2():
        pytest.skip("moto not installed")


# =============================================================================
# 헬퍼 픽스처 (테스트 모듈에서 conftest를 직접 import하지 않도록 함수 자체를 제공)
# =============================================================================


@pytest.fixture(name="make_service")
def make_service_fixture():
    """ServiceSpec 생성 함수"""
    return make_service


@pytest.fixture(name="api_metric")
def api_metric_fixture():
    """ListMetrics Metrics 항목 생성 함수"""
    return api_metric


@pytest.fixture(name="ec2_instance")
def ec2_instance_fixture():
    """describe_instances Instances 항목 생성 함수"""
    return ec2_instance


@pytest.fixture(name="make_ec2_client")
def make_ec2_client_fixture():
    """EC2 client 모킹 생성 함수"""
    return make_ec2_client


@pytest.fixture
def sample_timestamp():
    """(datetime, epoch) 샘플 시각"""
    return SAMPLE_TIMESTAMP, SAMPLE_EPOCH

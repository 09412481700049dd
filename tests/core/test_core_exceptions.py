"""
tests/core/test_core_exceptions.py - core/exceptions.py 테스트
"""

from botocore.exceptions import ClientError

from core.exceptions import (
    APICallError,
    ConfigError,
    DataShapeError,
    MetricsError,
    format_error_for_user,
    is_access_denied,
    is_throttling,
)


def _client_error(code: str, message: str = "msg", operation: str = "ListMetrics") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class TestHierarchy:
    """예외 계층 구조"""

    def test_all_inherit_base(self):
        assert issubclass(ConfigError, MetricsError)
        assert issubclass(APICallError, MetricsError)
        assert issubclass(DataShapeError, MetricsError)

    def test_distinct_classes(self):
        """세 가지 오류 분류는 서로 구분됨"""
        assert not issubclass(ConfigError, APICallError)
        assert not issubclass(DataShapeError, ConfigError)


class TestConfigError:
    def test_message_and_key(self):
        e = ConfigError("services[0].namespace", "네임스페이스가 필요합니다")

        assert "services[0].namespace" in str(e)
        assert e.config_key == "services[0].namespace"
        assert e.to_dict()["details"]["config_key"] == "services[0].namespace"

    def test_cause_appended(self):
        e = ConfigError("config.yml", "YAML 형식 오류", cause=ValueError("bad"))

        assert str(e).endswith(": bad")


class TestAPICallError:
    def test_from_client_error(self):
        e = APICallError.from_client_error("cloudwatch", "list_metrics", _client_error("Throttling", "Rate exceeded"))

        assert e.service == "cloudwatch"
        assert e.operation == "list_metrics"
        assert e.error_code == "Throttling"
        assert "cloudwatch.list_metrics" in str(e)
        assert "Rate exceeded" in str(e)

    def test_from_non_client_error(self):
        e = APICallError.from_client_error("cloudwatch", "get_metric_data", RuntimeError("connection reset"))

        assert e.error_code is None
        assert "connection reset" in str(e)


class TestDataShapeError:
    def test_namespace_in_message(self):
        e = DataShapeError("AWS/EC2", "메트릭 101개가 한도를 초과합니다")

        assert "AWS/EC2" in str(e)
        assert e.details["namespace"] == "AWS/EC2"


class TestHelpers:
    def test_is_throttling(self):
        assert is_throttling(_client_error("Throttling"))
        assert is_throttling(APICallError("cloudwatch", "list_metrics", error_code="RequestLimitExceeded"))
        assert not is_throttling(_client_error("AccessDenied"))

    def test_is_access_denied(self):
        assert is_access_denied(_client_error("UnauthorizedOperation"))
        assert not is_access_denied(ValueError("x"))

    def test_format_error_for_user_hint(self):
        e = APICallError("ec2", "describe_instances", error_code="UnauthorizedOperation")

        assert "IAM" in format_error_for_user(e)

    def test_format_error_for_user_plain(self):
        e = ConfigError("services", "서비스가 하나도 정의되지 않았습니다")

        assert format_error_for_user(e) == str(e)

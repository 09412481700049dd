"""
tests/test_core_config.py - core/config.py 테스트
"""

from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

from core.config import (
    DEFAULT_REGION,
    MAX_METRIC_DATA_QUERY,
    MAX_RATE_LIMIT_GET_METRIC_DATA,
    MAX_RATE_LIMIT_LIST_METRICS,
    get_version,
)


class TestConstants:
    """API 제한 상수"""

    def test_api_limits(self):
        assert MAX_METRIC_DATA_QUERY == 100
        assert MAX_RATE_LIMIT_LIST_METRICS == 25
        assert MAX_RATE_LIMIT_GET_METRIC_DATA == 50

    def test_default_region(self):
        assert DEFAULT_REGION == "ap-northeast-1"


class TestGetVersion:
    def test_returns_string(self):
        version = get_version()

        assert isinstance(version, str)
        assert version

    def test_not_installed(self):
        """패키지 미설치 시 개발 버전"""
        with patch("core.config.version", side_effect=PackageNotFoundError):
            assert get_version() == "0.0.0"

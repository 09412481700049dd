"""
tests/core/metrics/test_metrics_retriever.py - core/metrics/retriever.py 테스트
"""

import re
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.exceptions import APICallError
from core.metrics.retriever import (
    build_queries,
    format_value,
    get_batch,
    retrieve,
    sanitize_query_id,
    time_window,
)
from core.metrics.types import Dimension, MetricRow, QueryBatch, Resource

ID_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9_]*$")


def _batch(*labels, dim="InstanceId"):
    return QueryBatch(resources=[Resource(label=label, dimensions=(Dimension(dim, f"id-{label}"),)) for label in labels])


class TestSanitizeQueryId:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("i-0123abcd", "i0123abcd"),
            ("web-server.1", "webserver1"),
            ("WebServer", "mWebServer"),
            ("123", "m123"),
            ("", "m"),
            ("app/my-lb/50dc6c495c0c9188", "appmylb50dc6c495c0c9188"),
        ],
    )
    def test_sanitize(self, label, expected):
        assert sanitize_query_id(label) == expected

    def test_length_capped(self):
        assert len(sanitize_query_id("a" * 500)) == 200


class TestBuildQueries:
    def test_ids_valid_and_unique(self, make_service):
        service = make_service(metrics=(("CPUUtilization", "Average"), ("NetworkIn", "Sum")))
        # 정리 후 같은 문자열이 되는 라벨
        batch = _batch("web-1", "web.1", "Web1")

        queries = build_queries(service, batch)

        ids = [q.id for q in queries]
        assert len(ids) == 6
        assert len(set(ids)) == 6
        assert all(ID_PATTERN.match(i) for i in ids)

    def test_query_shape(self, make_service):
        service = make_service(metrics=(("NetworkIn", "Sum"),), period=60)

        (query,) = build_queries(service, _batch("web"))

        assert query.to_api() == {
            "Id": "web_0_0",
            "MetricStat": {
                "Metric": {
                    "Namespace": "AWS/EC2",
                    "MetricName": "NetworkIn",
                    "Dimensions": [{"Name": "InstanceId", "Value": "id-web"}],
                },
                "Period": 60,
                "Stat": "Sum",
            },
        }


class TestTimeWindow:
    def test_offsets(self, make_service):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        start, end = time_window(make_service(start=3600, end=300), now)

        assert start == now - timedelta(hours=1)
        assert end == now - timedelta(minutes=5)

    def test_defaults_to_utc_now(self, make_service):
        start, end = time_window(make_service())

        assert end.tzinfo is not None
        assert end - start == timedelta(seconds=3600)


class TestFormatValue:
    @pytest.mark.parametrize(
        "value, expected",
        [(42.0, "42"), (0.0, "0"), (-3.0, "-3"), (12.5, "12.5"), (0.1, "0.1"), (1e22, "1e+22")],
    )
    def test_format(self, value, expected):
        assert format_value(value) == expected


class TestGetBatch:
    def test_rows_from_results(self, fake_cloudwatch, make_service, sample_timestamp):
        ts, epoch = sample_timestamp
        fake_cloudwatch.values[("CPUUtilization", "id-web")] = [(ts, 12.5), (ts + timedelta(minutes=5), 20.0)]
        service = make_service()

        rows = get_batch(fake_cloudwatch, service, _batch("web", "db"))

        assert rows == [
            MetricRow("web", "CPUUtilization", epoch, "12.5"),
            MetricRow("web", "CPUUtilization", epoch + 300, "20"),
        ]

    def test_request_window(self, fake_cloudwatch, make_service):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        get_batch(fake_cloudwatch, make_service(start=600, end=60), _batch("web"), now=now)

        call = fake_cloudwatch.data_calls[0]
        assert call["StartTime"] == now - timedelta(seconds=600)
        assert call["EndTime"] == now - timedelta(seconds=60)

    def test_empty_batch_no_call(self, fake_cloudwatch, make_service):
        assert get_batch(fake_cloudwatch, make_service(), QueryBatch()) == []
        assert fake_cloudwatch.data_calls == []

    def test_pagination(self, make_service, sample_timestamp):
        ts, epoch = sample_timestamp
        client = MagicMock()
        client.get_metric_data.side_effect = [
            {
                "MetricDataResults": [{"Id": "web_0_0", "Timestamps": [ts], "Values": [1.0]}],
                "NextToken": "next",
            },
            {"MetricDataResults": [{"Id": "web_0_0", "Timestamps": [ts + timedelta(minutes=5)], "Values": [2.0]}]},
        ]
        limiter = MagicMock()

        rows = get_batch(client, make_service(), _batch("web"), rate_limiter=limiter)

        assert [r.value for r in rows] == ["1", "2"]
        assert client.get_metric_data.call_count == 2
        assert client.get_metric_data.call_args_list[1].kwargs["NextToken"] == "next"
        assert limiter.acquire.call_count == 2

    def test_unknown_id_ignored(self, make_service, sample_timestamp):
        ts, _ = sample_timestamp
        client = MagicMock()
        client.get_metric_data.return_value = {
            "MetricDataResults": [{"Id": "bogus", "Timestamps": [ts], "Values": [1.0]}]
        }

        assert get_batch(client, make_service(), _batch("web")) == []

    def test_client_error_wrapped(self, make_service):
        client = MagicMock()
        client.get_metric_data.side_effect = ClientError(
            {"Error": {"Code": "InvalidParameterValue", "Message": "bad id"}}, "GetMetricData"
        )

        with pytest.raises(APICallError) as exc_info:
            get_batch(client, make_service(), _batch("web"))

        assert exc_info.value.operation == "get_metric_data"


class TestRetrieve:
    def test_one_call_per_batch(self, fake_cloudwatch, make_service, sample_timestamp):
        ts, _ = sample_timestamp
        for label in ("a", "b", "c"):
            fake_cloudwatch.values[("CPUUtilization", f"id-{label}")] = [(ts, 1.0)]
        batches = [_batch("a", "b"), _batch("c")]

        rows = retrieve(fake_cloudwatch, make_service(), batches)

        assert len(fake_cloudwatch.data_calls) == 2
        assert sorted(r.resource_label for r in rows) == ["a", "b", "c"]

    def test_no_batches(self, fake_cloudwatch, make_service):
        assert retrieve(fake_cloudwatch, make_service(), []) == []
        assert fake_cloudwatch.data_calls == []

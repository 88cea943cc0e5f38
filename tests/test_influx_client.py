"""Tests for the InfluxDB query client."""

import json
from unittest.mock import patch

import pytest
import requests

from pet_health.exceptions import StoreConfigError, StoreResponseError, StoreTransportError
from pet_health.influx_client import InfluxClient
from tests.conftest import COLUMNS, make_response


@pytest.fixture
def client():
    return InfluxClient()


class TestConfiguration:
    @pytest.mark.unit
    def test_missing_url_is_config_error(self):
        with pytest.raises(StoreConfigError, match="INFLUX_URL"):
            InfluxClient(base_url="   ")

    @pytest.mark.unit
    def test_token_header_only_when_set(self):
        assert InfluxClient().headers["Authorization"] == "Token secret-token"
        assert "Authorization" not in InfluxClient(token="").headers

    @pytest.mark.unit
    def test_trailing_slash_is_trimmed(self, client):
        assert client.base_url == "https://store.example.com/influx"

    @pytest.mark.unit
    def test_measurement_must_be_identifier(self, client):
        with pytest.raises(StoreConfigError):
            client.build_query(measurement='pet"; DROP')


class TestQuerySeries:
    @pytest.mark.unit
    def test_tracker_id_is_bound_not_interpolated(self, client, influx_payload):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, influx_payload)
            client.query_series("221")

        args, kwargs = mock_get.call_args
        assert args[0] == "https://store.example.com/influx/query"
        assert kwargs["timeout"] == 10.0
        params = kwargs["params"]
        assert params["db"] == "pet_health"
        assert "$tracker_id" in params["q"]
        assert "221" not in params["q"]
        assert json.loads(params["params"]) == {"tracker_id": "221"}

    @pytest.mark.unit
    def test_returns_first_series(self, client, influx_payload):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, influx_payload)
            series = client.query_series("221")

        assert series.columns == COLUMNS
        assert len(series.values) == 7
        assert series.name == "pet_activity"

    @pytest.mark.unit
    def test_unknown_tracker_never_reaches_store(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            with pytest.raises(StoreConfigError, match="999"):
                client.query_series("999")
        mock_get.assert_not_called()

    @pytest.mark.unit
    def test_timeout(self, client):
        with patch("pet_health.influx_client.requests.get", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(StoreTransportError, match="timed out after 10s"):
                client.query_series("221")

    @pytest.mark.unit
    def test_connection_error(self, client):
        error = requests.exceptions.ConnectionError("refused")
        with patch("pet_health.influx_client.requests.get", side_effect=error):
            with pytest.raises(StoreTransportError, match="unreachable"):
                client.query_series("221")

    @pytest.mark.unit
    def test_http_500(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(500, text="internal error", content_type="text/plain")
            with pytest.raises(StoreTransportError) as exc_info:
                client.query_series("221")

        assert exc_info.value.status_code == 500
        assert "HTTP 500" in str(exc_info.value)


class TestParseBody:
    @pytest.mark.unit
    def test_html_is_routing_error(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, text="<!doctype html><html></html>", content_type="text/html")
            with pytest.raises(StoreResponseError) as exc_info:
                client.query_series("221")

        assert exc_info.value.routing is True

    @pytest.mark.unit
    def test_html_without_content_type(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, text="  <html>", content_type="")
            with pytest.raises(StoreResponseError) as exc_info:
                client.query_series("221")

        assert exc_info.value.routing is True

    @pytest.mark.unit
    def test_invalid_json(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, text="{not json")
            with pytest.raises(StoreResponseError, match="not valid JSON") as exc_info:
                client.query_series("221")

        assert exc_info.value.routing is False

    @pytest.mark.unit
    def test_missing_results(self, client):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, {"data": []})
            with pytest.raises(StoreResponseError, match="results"):
                client.query_series("221")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [
            {"error": "error parsing query"},
            {"results": [{"statement_id": 0, "error": "database not found: pet_health"}]},
        ],
    )
    def test_rejected_query(self, client, body):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, body)
            with pytest.raises(StoreResponseError, match="rejected"):
                client.query_series("221")

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [{"results": []}, {"results": [{"statement_id": 0}]}])
    def test_no_series_is_none(self, client, body):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, body)
            assert client.query_series("221") is None

    @pytest.mark.unit
    def test_series_without_values_is_empty(self, client):
        body = {"results": [{"statement_id": 0, "series": [{"name": "pet_activity", "columns": ["time", "step"]}]}]}
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, body)
            series = client.query_series("221")

        assert series is not None
        assert series.is_empty

    @pytest.mark.unit
    def test_series_without_columns(self, client):
        body = {"results": [{"series": [{"name": "pet_activity", "values": [[1]]}]}]}
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, body)
            with pytest.raises(StoreResponseError, match="columns"):
                client.query_series("221")

    @pytest.mark.unit
    @pytest.mark.parametrize("entry", [[], "series", None])
    def test_non_object_result_entry_is_malformed(self, client, entry):
        with patch("pet_health.influx_client.requests.get") as mock_get:
            mock_get.return_value = make_response(200, {"results": [entry]})
            with pytest.raises(StoreResponseError, match="not an object"):
                client.query_series("221")

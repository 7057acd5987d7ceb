"""Tests for the shared HTTP helpers."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from badge_api.common.http_client import get_json, robust_get
from badge_api.errors import PackageNotFoundError, UpstreamError


def _response(status_code=200, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.side_effect = lambda: json.loads(text)
    return response


class TestRobustGet:
    """Test retrying GET."""

    @patch("badge_api.common.http_client.requests.get")
    def test_success_first_attempt(self, mock_get):
        mock_get.return_value = _response(200, "ok")

        response = robust_get("https://example.org/x", headers={"Accept": "*/*"})

        assert response.status_code == 200
        assert mock_get.call_count == 1
        assert mock_get.call_args[1]["headers"] == {"Accept": "*/*"}

    @patch("badge_api.common.http_client.requests.get")
    def test_retries_server_errors(self, mock_get):
        mock_get.side_effect = [_response(502), _response(200, "ok")]
        assert robust_get("https://example.org/x").status_code == 200
        assert mock_get.call_count == 2

    @patch("badge_api.common.http_client.requests.get")
    def test_last_server_error_is_returned(self, mock_get):
        mock_get.return_value = _response(503, "busy")
        assert robust_get("https://example.org/x").status_code == 503
        assert mock_get.call_count == 3

    @patch("badge_api.common.http_client.requests.get")
    def test_client_error_not_retried(self, mock_get):
        mock_get.return_value = _response(404)
        assert robust_get("https://example.org/x").status_code == 404
        assert mock_get.call_count == 1

    @patch("badge_api.common.http_client.requests.get")
    def test_transport_failure_after_retries(self, mock_get):
        mock_get.side_effect = requests.Timeout("slow")
        with pytest.raises(UpstreamError, match="failed after 3 attempts: timeout") as excinfo:
            robust_get("https://example.org/x?token=secret")
        assert excinfo.value.status_code is None
        assert "secret" not in str(excinfo.value)

    @patch("badge_api.common.http_client.requests.get")
    def test_recovers_after_connection_error(self, mock_get):
        mock_get.side_effect = [requests.ConnectionError("refused"), _response(200, "ok")]
        assert robust_get("https://example.org/x").status_code == 200


class TestGetJson:
    """Test status mapping and JSON decoding."""

    @patch("badge_api.common.http_client.requests.get")
    def test_parses_json(self, mock_get):
        mock_get.return_value = _response(200, '{"versions": ["1.0.0"]}')
        assert get_json("https://example.org/x") == {"versions": ["1.0.0"]}

    @patch("badge_api.common.http_client.requests.get")
    def test_not_found(self, mock_get):
        mock_get.return_value = _response(404, '{"error": "nope"}')
        with pytest.raises(PackageNotFoundError) as excinfo:
            get_json("https://example.org/x")
        assert excinfo.value.status_code == 404

    @patch("badge_api.common.http_client.requests.get")
    def test_other_status_keeps_code(self, mock_get):
        mock_get.return_value = _response(401)
        with pytest.raises(UpstreamError) as excinfo:
            get_json("https://example.org/x")
        assert excinfo.value.status_code == 401
        assert not isinstance(excinfo.value, PackageNotFoundError)

    @patch("badge_api.common.http_client.requests.get")
    def test_invalid_json(self, mock_get):
        mock_get.return_value = _response(200, "<html>")
        with pytest.raises(UpstreamError, match="invalid JSON"):
            get_json("https://example.org/x")

    @patch("badge_api.common.http_client.requests.get")
    def test_transport_error_propagates(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(UpstreamError, match="refused"):
            get_json("https://example.org/x")

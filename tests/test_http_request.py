"""Tests for the HttpRequest collaborator."""

import asyncio
import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from blip_utils.errors import InvalidMethodError
from blip_utils.http_request import (
    HTTP_METHODS,
    HttpRequest,
    HttpRequestOptions,
    HttpResponse,
)


def _mock_response(status=200, text="", headers=None):
    response = MagicMock()
    response.status_code = status
    response.text = text
    response.headers = headers or {}
    return response


class TestHttpRequestOptions:
    """Tests for option validation."""

    def test_defaults(self):
        options = HttpRequestOptions()
        assert options.method == "GET"
        assert options.headers == {}
        assert options.body is None

    @pytest.mark.parametrize("method", HTTP_METHODS)
    def test_valid_methods(self, method):
        assert HttpRequestOptions(method=method).method == method

    @pytest.mark.parametrize("method", ["get", "FETCH", "CONNECT", " GET"])
    def test_invalid_methods(self, method):
        """Only the exact upper-case verbs are accepted."""
        with pytest.raises(InvalidMethodError, match="is not a valid method"):
            HttpRequestOptions(method=method)

    def test_body_ignored_for_get(self):
        options = HttpRequestOptions(method="GET", body={"a": 1})
        assert options.has_body() is False
        assert options.serialized_body() is None

    def test_body_serialized_for_post(self):
        options = HttpRequestOptions(method="POST", body={"a": 1})
        assert options.serialized_body() == json.dumps({"a": 1})

    @pytest.mark.parametrize("body, expected", [({}, "{}"), ([], "[]")])
    def test_empty_container_body_sent(self, body, expected):
        """An empty object or list is still a supplied body."""
        options = HttpRequestOptions(method="POST", body=body)
        assert options.has_body() is True
        assert options.serialized_body() == expected

    @pytest.mark.parametrize("body", [None, "", 0, False])
    def test_empty_scalar_body_not_sent(self, body):
        assert HttpRequestOptions(method="PUT", body=body).has_body() is False


class TestFetchAsync:
    """Tests for HttpRequest.fetch_async."""

    def test_successful_json_response(self):
        """A 2xx JSON response is parsed."""
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response(
                200, '{"ok": true}', {"Content-Type": "application/json"}
            )
            response = asyncio.run(HttpRequest().fetch_async("https://example.test/api"))

        assert response.status == 200
        assert response.success is True
        assert response.json == {"ok": True}
        assert response.body == '{"ok": true}'
        assert response.headers == {"Content-Type": "application/json"}
        assert response.error is None
        assert asyncio.run(response.json_async()) == {"ok": True}

    def test_get_sends_no_body(self):
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response()
            asyncio.run(HttpRequest(timeout=5).fetch_async("https://example.test", body={"x": 1}))

        mock_request.assert_called_once_with(
            "GET", "https://example.test", headers={}, data=None, timeout=5
        )

    def test_post_sends_json_body(self):
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response(201, "")
            response = asyncio.run(
                HttpRequest().fetch_async(
                    "https://example.test",
                    method="POST",
                    headers={"Authorization": "Key abc"},
                    body={"name": "Ana"},
                )
            )

        _, kwargs = mock_request.call_args
        assert kwargs["data"] == '{"name": "Ana"}'
        assert kwargs["headers"] == {"Authorization": "Key abc"}
        assert response.success is True
        assert response.json is None

    def test_malformed_json_is_absent(self):
        """A non-JSON body never raises."""
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response(200, "<html>oops</html>")
            response = asyncio.run(HttpRequest().fetch_async("https://example.test"))

        assert response.json is None
        assert response.body == "<html>oops</html>"
        assert asyncio.run(response.json_async()) is None

    def test_non_2xx_not_successful(self):
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response(404, '{"error": "missing"}')
            response = asyncio.run(HttpRequest().fetch_async("https://example.test"))

        assert response.success is False
        assert response.status == 404
        assert response.json == {"error": "missing"}

    def test_invalid_method_raises(self):
        """Invalid methods raise before any request is made."""
        with patch("blip_utils.http_request.requests.request") as mock_request:
            with pytest.raises(InvalidMethodError):
                asyncio.run(HttpRequest().fetch_async("https://example.test", method="BREW"))
        mock_request.assert_not_called()

    def test_transport_failure_degrades(self, caplog):
        """Network errors return a degraded response instead of raising."""
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.side_effect = requests.ConnectionError("connection refused")
            with caplog.at_level(logging.WARNING):
                response = asyncio.run(HttpRequest().fetch_async("https://example.test"))

        assert response.status == 0
        assert response.success is False
        assert response.headers == {}
        assert response.body is None
        assert response.json is None
        assert "connection refused" in response.error
        assert asyncio.run(response.json_async()) is None
        assert "Request failed" in caplog.text
        assert caplog.records[-1].levelno == logging.WARNING

    def test_post_sends_empty_object(self):
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.return_value = _mock_response()
            asyncio.run(HttpRequest().fetch_async("https://example.test", method="POST", body={}))

        _, kwargs = mock_request.call_args
        assert kwargs["data"] == "{}"

    def test_timeout_degrades(self):
        with patch("blip_utils.http_request.requests.request") as mock_request:
            mock_request.side_effect = requests.Timeout("timed out")
            response = asyncio.run(HttpRequest(timeout=0.1).fetch_async("https://example.test"))

        assert response.status == 0
        assert response.error == "timed out"


class TestHttpResponse:
    """Tests for HttpResponse constructors."""

    def test_failed(self):
        response = HttpResponse.failed("boom")
        assert (response.status, response.success, response.error) == (0, False, "boom")

    def test_empty_body_has_no_json(self):
        response = HttpResponse.from_response(_mock_response(204, ""))
        assert response.json is None
        assert response.success is True

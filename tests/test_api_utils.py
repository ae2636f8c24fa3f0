import re

import httpx
import pytest

from uigen.lib.api_utils import (
    API_ENDPOINTS,
    build_api_headers,
    build_api_url,
    format_api_error,
    generate_request_id,
    is_api_success,
    replace_url_params,
)


def test_build_api_url():
    assert build_api_url("/projects", base_url="http://host:3001/") == "http://host:3001/api/v1/projects"
    assert build_api_url("ai/chat", version="v2", base_url="http://h") == "http://h/api/v2/ai/chat"


def test_build_api_url_from_environment(monkeypatch):
    monkeypatch.setenv("UIGEN_API_BASE_URL", "https://api.example.com")
    assert build_api_url("/projects") == "https://api.example.com/api/v1/projects"


def test_request_id_format():
    request_id = generate_request_id()
    assert re.fullmatch(r"req_\d+_[a-z0-9]{9}", request_id)
    assert generate_request_id() != request_id


def test_headers():
    headers = build_api_headers({"Authorization": "Bearer t"})
    assert headers["Content-Type"] == "application/json"
    assert headers["X-API-Version"] == "v1"
    assert headers["X-Request-ID"].startswith("req_")
    assert headers["Authorization"] == "Bearer t"


def test_replace_url_params():
    url = replace_url_params(API_ENDPOINTS["FILES"]["GET"], {"projectId": "p1", "fileId": 7})
    assert url == "/projects/p1/files/7"


@pytest.mark.parametrize("status,expected", [(200, True), (201, True), (299, True), (304, False), (404, False)])
def test_is_api_success(status, expected):
    assert is_api_success(status) is expected


def _status_error(response: httpx.Response) -> httpx.HTTPStatusError:
    response.request = httpx.Request("GET", "http://test/x")
    return httpx.HTTPStatusError("failed", request=response.request, response=response)


def test_format_api_error_prefers_server_message():
    error = _status_error(httpx.Response(404, json={"message": "Project not found"}))
    assert format_api_error(error) == "Project not found"


def test_format_api_error_without_json():
    error = _status_error(httpx.Response(502, text="<html>bad gateway</html>"))
    assert format_api_error(error) == "failed"


def test_format_api_error_fallback():
    assert format_api_error(None) == "An unknown error occurred, please try again later"
    assert format_api_error(RuntimeError("boom")) == "boom"

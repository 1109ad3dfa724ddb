"""Tests for wr.platform.http module."""

from __future__ import annotations

from wr.core.result import Err, Ok
from wr.platform.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

URL = "https://gitlab.example.com/api/v4/projects/1/jobs/7"


class TestHttpError:
    def test_str_with_status(self) -> None:
        err = HttpError(url=URL, status=404, message="Not Found")
        assert str(err) == f"HTTP 404: Not Found ({URL})"

    def test_str_network_error(self) -> None:
        err = HttpError(url=URL, status=0, message="Connection refused")
        assert str(err) == f"Connection refused ({URL})"


class TestMockHttpClient:
    def test_implements_protocol(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)
        assert isinstance(RealHttpClient(), HttpClient)

    def test_unknown_url_is_404(self) -> None:
        http = MockHttpClient()
        result = http.request_json("GET", URL)
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_responses_are_consumed_then_last_repeats(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", URL, {"n": 1}, {"n": 2})

        assert http.request_json("GET", URL) == Ok({"n": 1})
        assert http.request_json("GET", URL) == Ok({"n": 2})
        assert http.request_json("GET", URL) == Ok({"n": 2})
        assert http.count("GET", URL) == 3

    def test_http_error_response(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", URL, HttpError(url=URL, status=403, message="Forbidden"))
        result = http.request_json("post", URL)
        assert isinstance(result, Err)
        assert result.error.status == 403

    def test_records_headers(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", URL, None)
        http.request_json("GET", URL, headers={"PRIVATE-TOKEN": "t"})
        assert http.calls == [("GET", URL)]
        assert http.headers == [{"PRIVATE-TOKEN": "t"}]


def test_real_client_reports_invalid_url() -> None:
    result = RealHttpClient(timeout=1.0).request_json("GET", "not a url")
    assert isinstance(result, Err)
    assert result.error.status == 0

"""Unit tests for virtual endpoint interception."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest
import requests

from ops_config.interceptor import (
    InterceptedResponse,
    InterceptingHTTPAdapter,
    InterceptRoute,
    RequestInterceptor,
)

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _handler(label: str, calls: list[tuple[str, str]]):
    async def handle(url: str) -> str:
        calls.append((label, url))
        return f"{label}:{url}"

    return handle


@pytest.fixture
def calls() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def interceptor(calls: list[tuple[str, str]]) -> RequestInterceptor:
    return RequestInterceptor(
        [
            InterceptRoute("https://ops/a/", _handler("a", calls)),
            InterceptRoute("https://ops/", _handler("catch-all", calls)),
            InterceptRoute("https://ops/a/b/", _handler("never", calls)),
        ]
    )


def test_unmatched_url_is_declined(
    interceptor: RequestInterceptor, calls: list[tuple[str, str]]
) -> None:
    assert asyncio.run(interceptor.intercept_http_request("https://example.com/ops/")) is None
    assert calls == []


def test_first_registered_prefix_wins(
    interceptor: RequestInterceptor, calls: list[tuple[str, str]]
) -> None:
    url = "https://ops/a/b/c?x=1"

    response = asyncio.run(interceptor.intercept_http_request(url))

    assert response == InterceptedResponse(url=url, text=f"a:{url}", status_code=200)
    assert calls == [("a", url)], "expected only the earliest matching route to run"


def test_later_route_handles_urls_outside_earlier_prefixes(
    interceptor: RequestInterceptor, calls: list[tuple[str, str]]
) -> None:
    response = asyncio.run(interceptor.intercept_http_request("https://ops/z"))

    assert response is not None
    assert response.text == "catch-all:https://ops/z"


def test_request_objects_are_accepted(interceptor: RequestInterceptor) -> None:
    prepared = requests.Request("GET", "https://ops/a/thing").prepare()

    response = asyncio.run(interceptor.intercept_http_request(prepared))

    assert response is not None
    assert response.url == "https://ops/a/thing"


def test_prefix_match_is_case_sensitive(interceptor: RequestInterceptor) -> None:
    assert interceptor.match("HTTPS://OPS/a/") is None


def test_intercepted_response_converts_to_requests_response() -> None:
    response = InterceptedResponse(url="https://ops/a/", text='{"é": 1}').to_requests_response()

    assert response.status_code == 200
    assert response.ok
    assert response.json() == {"é": 1}
    assert response.url == "https://ops/a/"


def test_intercepting_adapter_serves_session_requests(
    interceptor: RequestInterceptor, calls: list[tuple[str, str]]
) -> None:
    session = requests.Session()
    session.mount("https://ops/", InterceptingHTTPAdapter(interceptor))

    response = session.get("https://ops/a/doc")

    assert response.text == "a:https://ops/a/doc"
    assert calls == [("a", "https://ops/a/doc")]
    session.close()


def test_intercepting_adapter_falls_back_to_network_send(mocker: MockerFixture) -> None:
    declining = RequestInterceptor([])
    adapter = InterceptingHTTPAdapter(declining)
    sentinel = requests.Response()
    send = mocker.patch(
        "requests.adapters.HTTPAdapter.send", autospec=True, return_value=sentinel
    )
    request = requests.Request("GET", "https://ops/unknown").prepare()

    assert adapter.send(request, timeout=1) is sentinel
    send.assert_called_once_with(adapter, request, timeout=1)


def test_intercepting_adapter_works_inside_running_event_loop(
    interceptor: RequestInterceptor, calls: list[tuple[str, str]]
) -> None:
    """A mounted session stays usable from code already running on asyncio."""
    session = requests.Session()
    session.mount("https://ops/", InterceptingHTTPAdapter(interceptor))

    async def run() -> str:
        return session.get("https://ops/a/doc").text

    try:
        body = asyncio.run(run())
    finally:
        session.close()

    assert body == "a:https://ops/a/doc"
    assert calls == [("a", "https://ops/a/doc")], "expected exactly one handler call"

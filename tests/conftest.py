"""Shared fixtures for OPS adapter tests."""

from __future__ import annotations

import typing as typ

import pytest
import requests

from ops_config.diagnostics import ErrorLog
from ops_config.fetcher import RemoteFetcher
from ops_config.settings import OpsEnvironment

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


class FakeSession:
    """Route ``session.get`` calls to canned responses keyed by URL.

    Values may be a response mock, or an exception instance to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, mocker: MockerFixture) -> None:
        self._mocker = mocker
        self.routes: dict[str, object] = {}
        self.session = mocker.Mock(spec=requests.Session)
        self.session.get.side_effect = self._get

    def respond(
        self,
        url: str,
        text: str = "",
        *,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        response = self._mocker.Mock()
        response.status_code = status_code
        response.text = text
        response.headers = headers or {}
        self.routes[url] = response

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    @property
    def requested_urls(self) -> list[str]:
        return [call.args[0] for call in self.session.get.call_args_list]

    def headers_for(self, url: str) -> dict[str, str]:
        for call in self.session.get.call_args_list:
            if call.args[0] == url:
                return call.kwargs["headers"]
        msg = f"{url} was never requested"
        raise AssertionError(msg)

    def _get(self, url: str, **_: typ.Any) -> object:
        target = self.routes.get(url)
        if isinstance(target, Exception):
            raise target
        if target is None:
            self.respond(url, status_code=404)
            target = self.routes.pop(url)
        return target


@pytest.fixture
def fake_session(mocker: MockerFixture) -> FakeSession:
    return FakeSession(mocker)


@pytest.fixture
def error_log() -> ErrorLog:
    return ErrorLog()


@pytest.fixture
def prod_env() -> OpsEnvironment:
    return OpsEnvironment(is_production=True, ops_token="ops-token")


@pytest.fixture
def sandbox_env() -> OpsEnvironment:
    return OpsEnvironment(is_production=False, ops_token="ops-token")


@pytest.fixture
def fetcher(fake_session: FakeSession, error_log: ErrorLog) -> RemoteFetcher:
    return RemoteFetcher(fake_session.session, error_log)

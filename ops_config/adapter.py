"""Facade wiring the OPS components around one shared HTTP session.

:class:`OpsConfigAdapter` is what the build pipeline holds for the duration
of a build. It owns a ``requests.Session`` exclusively and closes it when
the adapter is closed or its ``with`` / ``async with`` block exits, on every
exit path.

Example
-------
>>> import asyncio
>>> from ops_config.adapter import OpsConfigAdapter
>>> from ops_config.settings import OpsEnvironment
>>> env = OpsEnvironment(is_production=False, ops_token="token")
>>> with OpsConfigAdapter(env) as adapter:  # doctest: +SKIP
...     response = asyncio.run(
...         adapter.intercept_http_request("https://ops/monikerDefinition/"))
>>> response.status_code  # doctest: +SKIP
200
"""

from __future__ import annotations

import typing as typ

import requests

from ._constants import (
    MARKDOWN_VALIDATION_RULES_API,
    METADATA_SCHEMA_API,
    MONIKER_DEFINITION_API,
)
from .diagnostics import ErrorLog
from .fetcher import RemoteFetcher
from .hostnames import HostnameResolver
from .interceptor import InterceptingHTTPAdapter, InterceptRoute, RequestInterceptor
from .resolver import ConfigResolver
from .schema import generate_json_schema
from .settings import OpsEnvironment
from .validation import SchemaConverter, ValidationRuleGateway

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    import collections.abc as cabc
    from types import TracebackType

    from .interceptor import HasUrl, InterceptedResponse
    from .models import ConfigResult


class OpsConfigAdapter:
    """Resolve build configuration and serve virtual OPS endpoints."""

    def __init__(
        self,
        environment: OpsEnvironment,
        error_log: ErrorLog | None = None,
        *,
        session: requests.Session | None = None,
        converter: SchemaConverter = generate_json_schema,
        timeout: float | None = None,
    ) -> None:
        """Initialise the adapter and its components.

        Parameters
        ----------
        environment : OpsEnvironment
            Resolved environment selecting endpoints and the build token.
        error_log : ErrorLog | None, optional
            Diagnostic sink; a fresh :class:`ErrorLog` when omitted.
        session : requests.Session | None, optional
            Transport to use. The adapter takes ownership and closes it.
        converter : SchemaConverter, optional
            Rules/allowlists to JSON Schema converter.
        timeout : float | None, optional
            Per-request timeout in seconds passed to the fetcher.
        """
        self.environment = environment
        self.error_log = ErrorLog() if error_log is None else error_log
        self._session = session or requests.Session()
        self.fetcher = RemoteFetcher(self._session, self.error_log, timeout=timeout)
        self.hostnames = HostnameResolver(environment)
        self.validation = ValidationRuleGateway(
            self.fetcher, environment, self.error_log, converter=converter
        )
        self.resolver = ConfigResolver(
            self.fetcher, environment, hostnames=self.hostnames
        )
        self.interceptor = RequestInterceptor(self._routes())

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None, **kwargs: typ.Any
    ) -> OpsConfigAdapter:
        return cls(OpsEnvironment.from_env(environ), **kwargs)

    def _routes(self) -> list[InterceptRoute]:
        return [
            InterceptRoute(MONIKER_DEFINITION_API, self.get_moniker_definition),
            InterceptRoute(METADATA_SCHEMA_API, self.validation.get_metadata_schema),
            InterceptRoute(
                MARKDOWN_VALIDATION_RULES_API,
                self.validation.get_markdown_validation_rules,
            ),
        ]

    async def get_build_config(
        self, name: str | None, repository: str | None, branch: str
    ) -> ConfigResult:
        return await self.resolver.get_build_config(name, repository, branch)

    async def intercept_http_request(
        self, request: str | HasUrl
    ) -> InterceptedResponse | None:
        return await self.interceptor.intercept_http_request(request)

    async def get_moniker_definition(self, url: str) -> str:  # noqa: ARG002
        endpoint = self.environment.build_service_endpoint
        return await self.fetcher.fetch(
            f"{endpoint}/v2/monikertrees/allfamiliesproductsmonikers",
            self.environment.ops_headers,
        )

    def mount(self, session: requests.Session) -> None:
        """Route virtual ``https://ops/`` requests on ``session`` to this adapter."""
        session.mount("https://ops/", InterceptingHTTPAdapter(self.interceptor))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> OpsConfigAdapter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> OpsConfigAdapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["OpsConfigAdapter"]

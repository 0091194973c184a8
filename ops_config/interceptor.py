"""Serve virtual ``https://ops/`` requests without touching the network.

:class:`RequestInterceptor` holds an ordered table of ``(prefix, handler)``
routes. A request whose URL starts with a registered prefix is answered by
the first such route; any other request is declined with ``None`` and the
caller sends it for real. :class:`InterceptingHTTPAdapter` plugs the
interceptor into a ``requests.Session`` for pipelines that fetch through
``requests``.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import concurrent.futures
import dataclasses as dc
import logging
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

RouteHandler = cabc.Callable[[str], cabc.Awaitable[str]]


class HasUrl(typ.Protocol):
    url: str | None


@dc.dataclass(frozen=True, slots=True)
class InterceptRoute:
    """Dispatch requests under ``url_prefix`` to ``handler``."""

    url_prefix: str
    handler: RouteHandler

    def matches(self, url: str) -> bool:
        return url.startswith(self.url_prefix)


@dc.dataclass(frozen=True, slots=True)
class InterceptedResponse:
    """Synthesized successful response for an intercepted request."""

    url: str
    text: str
    status_code: int = HTTPStatus.OK

    def to_requests_response(
        self, request: requests.PreparedRequest | None = None
    ) -> requests.Response:
        response = requests.Response()
        response.status_code = self.status_code
        response.reason = HTTPStatus(self.status_code).phrase
        response.url = self.url
        response.encoding = "utf-8"
        response._content = self.text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain; charset=utf-8"
        response.request = request
        return response


def _request_url(request: str | HasUrl) -> str:
    if isinstance(request, str):
        return request
    return request.url or ""


class RequestInterceptor:
    """Route matching requests to local handlers in registration order."""

    def __init__(self, routes: cabc.Iterable[InterceptRoute]) -> None:
        self.routes: tuple[InterceptRoute, ...] = tuple(routes)

    def match(self, url: str) -> InterceptRoute | None:
        return next((route for route in self.routes if route.matches(url)), None)

    async def intercept_http_request(
        self, request: str | HasUrl
    ) -> InterceptedResponse | None:
        """Answer ``request`` locally, or return ``None`` to let it through.

        Parameters
        ----------
        request : str | HasUrl
            Request URL, or any request object exposing ``url`` (for example
            ``requests.PreparedRequest``).

        Returns
        -------
        InterceptedResponse | None
            The handler's text wrapped as a 200 response, or ``None`` when no
            registered prefix matches.
        """
        url = _request_url(request)
        route = self.match(url)
        if route is None:
            return None
        logger.debug("Intercepted '%s' via '%s'", url, route.url_prefix)
        return InterceptedResponse(url=url, text=await route.handler(url))


class InterceptingHTTPAdapter(HTTPAdapter):
    """Transport adapter answering intercepted URLs from a local interceptor.

    Each intercepted request runs the interceptor on a fresh event loop. When
    the calling thread already runs a loop, that fresh loop lives on a worker
    thread and the caller blocks until it finishes.
    """

    def __init__(self, interceptor: RequestInterceptor, **kwargs: typ.Any) -> None:
        super().__init__(**kwargs)
        self.interceptor = interceptor

    def send(
        self, request: requests.PreparedRequest, **kwargs: typ.Any
    ) -> requests.Response:
        intercepted = self._intercept(request)
        if intercepted is None:
            return super().send(request, **kwargs)
        return intercepted.to_requests_response(request)

    def _intercept(
        self, request: requests.PreparedRequest
    ) -> InterceptedResponse | None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.interceptor.intercept_http_request(request))
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(
                lambda: asyncio.run(self.interceptor.intercept_http_request(request))
            )
            return future.result()


__all__ = [
    "InterceptRoute",
    "InterceptedResponse",
    "InterceptingHTTPAdapter",
    "RequestInterceptor",
    "RouteHandler",
]

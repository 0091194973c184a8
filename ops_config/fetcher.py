r"""Single-request GET helper shared by the OPS adapter components.

:class:`RemoteFetcher` issues one GET through a shared ``requests.Session``,
reports the metadata ruleset version when the service announces one, lets
callers react to HTTP 404 before the generic status check, and converts
every other failure into :class:`OpsFetchError`. The blocking request runs
on a worker thread so callers can ``await`` it and overlap several fetches.

Example
-------
>>> import asyncio, requests
>>> from ops_config.diagnostics import ErrorLog
>>> from ops_config.fetcher import RemoteFetcher
>>> fetcher = RemoteFetcher(requests.Session(), ErrorLog())  # doctest: +SKIP
>>> asyncio.run(fetcher.fetch("https://example.invalid/"))  # doctest: +SKIP
'<!doctype html>...'
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import logging
import typing as typ
from http import HTTPStatus

import requests

from ._constants import METADATA_VERSION_HEADER
from .diagnostics import metadata_validation_ruleset
from .perf import perf_scope

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .diagnostics import ErrorLog

logger = logging.getLogger(__name__)


class OpsFetchError(RuntimeError):
    """Raised when an OPS service request cannot be completed."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RemoteFetcher:
    """Fetch text bodies from OPS services over a shared session."""

    def __init__(
        self,
        session: requests.Session,
        error_log: ErrorLog,
        *,
        timeout: float | None = None,
    ) -> None:
        """Initialise the fetcher.

        Parameters
        ----------
        session : requests.Session
            Transport shared by every request; owned by the caller.
        error_log : ErrorLog
            Sink receiving the ruleset version diagnostic.
        timeout : float | None, optional
            Per-request timeout in seconds. ``None`` (default) keeps the
            transport's own behaviour.
        """
        self._session = session
        self._error_log = error_log
        self.timeout = timeout

    async def fetch(
        self,
        url: str,
        headers: cabc.Mapping[str, str] | None = None,
        on_404: cabc.Callable[[], None] | None = None,
    ) -> str:
        """Return the body of ``GET url`` as text.

        Parameters
        ----------
        url : str
            Absolute URL to request.
        headers : Mapping[str, str] | None, optional
            Extra request headers, attached verbatim.
        on_404 : Callable[[], None] | None, optional
            Hook invoked when the service answers HTTP 404. It may raise to
            abort the fetch; if it returns, the 404 is reported as an
            :class:`OpsFetchError` like any other failing status.

        Raises
        ------
        OpsFetchError
            If the request cannot be sent or the status is not successful.
        """
        with perf_scope(f"[RemoteFetcher] Fetching '{url}'"):
            request_headers = dict(headers) if headers else {}
            try:
                response = await asyncio.to_thread(
                    self._session.get,
                    url,
                    headers=request_headers,
                    timeout=self.timeout,
                )
            except (requests.RequestException, UnicodeEncodeError) as exc:
                msg = f"Failed to reach '{url}': {exc}"
                raise OpsFetchError(msg, url=url) from exc

            metadata_version = response.headers.get(METADATA_VERSION_HEADER)
            if metadata_version:
                self._error_log.write(metadata_validation_ruleset(metadata_version))

            if response.status_code == HTTPStatus.NOT_FOUND and on_404 is not None:
                on_404()

            if not HTTPStatus.OK <= response.status_code < HTTPStatus.MULTIPLE_CHOICES:
                msg = f"Request to '{url}' failed with status {response.status_code}"
                raise OpsFetchError(msg, url=url, status_code=response.status_code)

            logger.debug("Fetched '%s' (%s)", url, response.status_code)
            return response.text


__all__ = ["OpsFetchError", "RemoteFetcher"]

"""Fail-soft access to the content validation metadata service.

:class:`ValidationRuleGateway` loads markdown validation rules and the
metadata JSON Schema for a repository/branch pair. The pair travels inside
the virtual request URL as ``repository_url`` and ``branch`` query
parameters and is forwarded to the service as headers. Any failure is
logged, reported once as a ``validation-incomplete`` warning, and replaced
by an empty JSON object so the build carries on with permissive
validation.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import logging
import typing as typ
from urllib.parse import parse_qs, urlsplit

from ._constants import REPOSITORY_BRANCH_HEADER, REPOSITORY_URL_HEADER
from .diagnostics import validation_incomplete
from .schema import generate_json_schema

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .diagnostics import ErrorLog
    from .fetcher import RemoteFetcher
    from .settings import OpsEnvironment

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT = "{}"

SchemaConverter = cabc.Callable[[str, str], str]


def validation_headers(request_url: str) -> dict[str, str]:
    """Return validation service headers derived from ``request_url``."""
    query = parse_qs(urlsplit(request_url).query)
    return {
        REPOSITORY_URL_HEADER: _first(query, "repository_url"),
        REPOSITORY_BRANCH_HEADER: _first(query, "branch"),
    }


def _first(query: dict[str, list[str]], key: str) -> str:
    values = query.get(key)
    return values[0] if values else ""


class ValidationRuleGateway:
    """Retrieve validation rules and metadata schema without failing builds."""

    def __init__(
        self,
        fetcher: RemoteFetcher,
        environment: OpsEnvironment,
        error_log: ErrorLog,
        *,
        converter: SchemaConverter = generate_json_schema,
    ) -> None:
        self._fetcher = fetcher
        self._environment = environment
        self._error_log = error_log
        self._converter = converter

    async def get_markdown_validation_rules(self, request_url: str) -> str:
        try:
            headers = validation_headers(request_url)
            endpoint = self._environment.validation_service_endpoint
            return await self._fetcher.fetch(f"{endpoint}/rules/content", headers)
        except Exception:
            return self._degrade("markdown validation rules")

    async def get_metadata_schema(self, request_url: str) -> str:
        """Fetch rules and allowlists concurrently and merge them.

        Both requests are in flight before either is awaited; the converter
        runs once both bodies are available.
        """
        try:
            headers = validation_headers(request_url)
            endpoint = self._environment.validation_service_endpoint
            rules, allowlists = await asyncio.gather(
                self._fetcher.fetch(f"{endpoint}/rules", headers),
                self._fetcher.fetch(f"{endpoint}/allowlists", headers),
            )
            return self._converter(rules, allowlists)
        except Exception:
            return self._degrade("metadata schema")

    def _degrade(self, what: str) -> str:
        logger.exception("Failed to load %s", what)
        self._error_log.write(validation_incomplete())
        return EMPTY_DOCUMENT


__all__ = [
    "EMPTY_DOCUMENT",
    "SchemaConverter",
    "ValidationRuleGateway",
    "validation_headers",
]

r"""Resolve a docset's build configuration from the OPS registry.

:class:`ConfigResolver` asks the build service which docsets are registered
for a repository, picks the one whose name matches (ignoring case), and
derives the :class:`~ops_config.models.BuildConfig` from it. Validation and
schema URLs point at virtual ``https://ops/`` endpoints carrying the
repository and branch as URL-encoded query parameters; the request
interceptor recovers them later in the build.

Example
-------
>>> import asyncio
>>> from ops_config.adapter import OpsConfigAdapter
>>> with OpsConfigAdapter.from_env() as adapter:  # doctest: +SKIP
...     result = asyncio.run(adapter.get_build_config(
...         "azure-docs", "https://github.com/MicrosoftDocs/azure-docs", "live"))
>>> result.config.host_name  # doctest: +SKIP
'docs.microsoft.com'
"""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path
from urllib.parse import quote_plus

from ._constants import (
    DOCSET_QUERY_STATUS,
    MARKDOWN_VALIDATION_RULES_API,
    METADATA_SCHEMA_API,
    MONIKER_DEFINITION_API,
    OPS_METADATA_SCHEMA_PATH,
)
from .diagnostics import DiagnosticError, docset_not_provisioned
from .hostnames import HostnameResolver
from .models import BuildConfig, ConfigResult, DocsetInfo, parse_docsets

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .fetcher import RemoteFetcher
    from .settings import OpsEnvironment

logger = logging.getLogger(__name__)


def metadata_service_query(repository: str, branch: str) -> str:
    """Return the ``?repository_url=...&branch=...`` suffix with encoded values."""
    return f"?repository_url={quote_plus(repository)}&branch={quote_plus(branch)}"


def find_docset(docsets: typ.Iterable[DocsetInfo], name: str) -> DocsetInfo | None:
    """Return the first docset whose name matches ``name`` case-insensitively."""
    wanted = name.casefold()
    return next((d for d in docsets if d.name.casefold() == wanted), None)


class ConfigResolver:
    """Turn (docset name, repository, branch) into a build configuration."""

    def __init__(
        self,
        fetcher: RemoteFetcher,
        environment: OpsEnvironment,
        *,
        hostnames: HostnameResolver | None = None,
        schema_path: Path = OPS_METADATA_SCHEMA_PATH,
    ) -> None:
        self._fetcher = fetcher
        self._environment = environment
        self._hostnames = hostnames or HostnameResolver(environment)
        self._schema_path = schema_path

    async def get_build_config(
        self, name: str | None, repository: str | None, branch: str
    ) -> ConfigResult:
        """Look up ``name`` in the registry and build its configuration.

        Parameters
        ----------
        name : str | None
            Docset name as written in the repository's config.
        repository : str | None
            Git remote URL of the repository being built.
        branch : str
            Branch being built; selects the xref host.

        Returns
        -------
        ConfigResult
            Empty when ``name`` or ``repository`` is empty; carries a
            ``docset-not-provisioned`` warning when the registry answers 404
            or lists no docset with that name; otherwise holds the config.

        Raises
        ------
        OpsFetchError
            If the registry request fails for any other reason.
        """
        if not name or not repository:
            return ConfigResult()

        try:
            docset = await self._find_registered_docset(name, repository)
        except DiagnosticError as exc:
            return ConfigResult(diagnostic=exc.diagnostic)

        return ConfigResult(config=self._build_config(docset, repository, branch))

    async def _find_registered_docset(self, name: str, repository: str) -> DocsetInfo:
        def not_provisioned() -> typ.NoReturn:
            raise DiagnosticError(docset_not_provisioned(name))

        url = (
            f"{self._environment.build_service_endpoint}/v2/Queries/Docsets"
            f"?git_repo_url={repository}&docset_query_status={DOCSET_QUERY_STATUS}"
        )
        body = await self._fetcher.fetch(
            url, self._environment.ops_headers, on_404=not_provisioned
        )
        docset = find_docset(parse_docsets(json.loads(body)), name)
        if docset is None:
            logger.debug("No docset named '%s' registered for %s", name, repository)
            not_provisioned()
        return docset

    def _build_config(self, docset: DocsetInfo, repository: str, branch: str) -> BuildConfig:
        query = metadata_service_query(repository, branch)
        site_name = docset.site_name
        return BuildConfig(
            product=docset.product_name,
            site_name=site_name,
            host_name=self._hostnames.get_host_name(site_name),
            base_path=docset.base_path,
            xref_host_name=self._hostnames.get_xref_host_name(site_name, branch),
            default_locale=self._hostnames.get_default_locale(site_name),
            moniker_definition=MONIKER_DEFINITION_API,
            markdown_validation_rules=f"{MARKDOWN_VALIDATION_RULES_API}{query}",
            metadata_schema=(str(self._schema_path), f"{METADATA_SCHEMA_API}{query}"),
        )


__all__ = ["ConfigResolver", "find_docset", "metadata_service_query"]

"""Cyclopts CLI entrypoint for inspecting OPS build configuration.

The ``ops-config`` console script resolves the build configuration of a
docset exactly as a build would, and replays virtual ``https://ops/``
requests through the interceptor so the served rules and schema can be
inspected. Diagnostics collected along the way are printed after the
command output.

Examples
--------
Resolve the configuration of a docset on a review branch:

>>> from ops_config.cli import app
>>> app.run(
...     ["resolve", "--name", "azure-docs", "--repository",
...      "https://github.com/MicrosoftDocs/azure-docs", "--branch", "main"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .adapter import OpsConfigAdapter
from .diagnostics import Diagnostic, DiagnosticLevel
from .fetcher import OpsFetchError
from .models import ConfigResult
from .settings import DEFAULT_CONFIG_PATH, resolve_environment

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .diagnostics import ErrorLog

app = App(name="ops-config", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path,
    Parameter(help="Path to the OPS config TOML", env_var="OPS_CONFIG_FILE"),
]
EnvironmentOption = typ.Annotated[
    str | None,
    Parameter(
        help="OPS environment name (falls back to DOCS_ENVIRONMENT)",
        env_var="INPUT_ENVIRONMENT",
    ),
]
VerboseOption = typ.Annotated[bool, Parameter(help="Log debug output to stderr")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fetch_failed(error_log: ErrorLog, exc: OpsFetchError) -> None:
    error_log.write(
        Diagnostic(code="fetch-failed", message=str(exc), level=DiagnosticLevel.ERROR)
    )


def _report(error_log: ErrorLog) -> None:
    for diagnostic in error_log.diagnostics:
        print(diagnostic, file=sys.stderr)


@app.command(help="Resolve the build configuration for a docset.")
def resolve(
    *,
    name: typ.Annotated[str, Parameter(help="Docset name", env_var="INPUT_NAME")],
    repository: typ.Annotated[
        str, Parameter(help="Git repository URL", env_var="INPUT_REPOSITORY")
    ],
    branch: typ.Annotated[
        str, Parameter(help="Branch being built", env_var="INPUT_BRANCH")
    ] = "live",
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    environment: EnvironmentOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the resolved build configuration as JSON.

    Parameters
    ----------
    name : str
        Docset name registered in OPS.
    repository : str
        Git remote URL of the repository.
    branch : str, optional
        Branch being built; defaults to ``live``.
    config : Path, optional
        TOML file with an optional ``[ops]`` table.
    environment : str or None, optional
        Environment name overriding ``DOCS_ENVIRONMENT``.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when an error-level diagnostic was recorded.
    """
    _configure_logging(verbose)
    env = resolve_environment(config_path=config, environment=environment)
    with OpsConfigAdapter(env) as adapter:
        try:
            result = asyncio.run(adapter.get_build_config(name, repository, branch))
        except OpsFetchError as exc:
            _fetch_failed(adapter.error_log, exc)
            result = ConfigResult()
        if result.config is not None:
            print(json.dumps(result.config.to_dict(), indent=2))
        if result.diagnostic is not None:
            adapter.error_log.write(result.diagnostic)
        _report(adapter.error_log)
        if adapter.error_log.errors:
            raise SystemExit(1)


@app.command(help="Serve a virtual https://ops/ URL through the interceptor.")
def fetch(
    url: typ.Annotated[str, Parameter(help="Virtual OPS URL to request")],
    *,
    config: ConfigOption = DEFAULT_CONFIG_PATH,
    environment: EnvironmentOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the locally synthesized body for ``url``.

    Exits with status 1 when the upstream service cannot be fetched and with
    status 2 when ``url`` is not one of the intercepted endpoints.
    """
    _configure_logging(verbose)
    env = resolve_environment(config_path=config, environment=environment)
    with OpsConfigAdapter(env) as adapter:
        try:
            response = asyncio.run(adapter.intercept_http_request(url))
        except OpsFetchError as exc:
            _fetch_failed(adapter.error_log, exc)
            _report(adapter.error_log)
            raise SystemExit(1) from exc
        _report(adapter.error_log)
    if response is None:
        print(f"{url} is not served by the OPS interceptor", file=sys.stderr)
        raise SystemExit(2)
    print(response.text)


def main() -> None:
    """Invoke the Cyclopts application behind the ``ops-config`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()

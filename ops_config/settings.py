"""Resolve the OPS environment used by every adapter component.

The environment is a small immutable value: whether the build talks to the
production or sandbox services, and which build token to attach to registry
requests. It is resolved once at startup and handed to each component, so
tests can build several environments side by side without touching
``os.environ``.

Resolution order mirrors the rest of the tooling: explicit arguments win,
then the ``DOCS_OPS_TOKEN`` / ``DOCS_ENVIRONMENT`` variables, then the
``[ops]`` table of ``~/.config/ops-config/config.toml``.

Examples
--------
>>> from ops_config.settings import OpsEnvironment
>>> env = OpsEnvironment.from_env({"DOCS_ENVIRONMENT": "PPE"})
>>> env.is_production
False
>>> env.build_service_endpoint
'https://op-build-sandbox2.azurewebsites.net'
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

import tomlkit

from ._constants import (
    OPS_TOKEN_HEADER,
    PPE_VALIDATION_SERVICE_ENDPOINT,
    PROD_BUILD_SERVICE_ENDPOINT,
    PROD_VALIDATION_SERVICE_ENDPOINT,
    SANDBOX_BUILD_SERVICE_ENDPOINT,
)

TOKEN_ENV_VAR = "DOCS_OPS_TOKEN"
ENVIRONMENT_ENV_VAR = "DOCS_ENVIRONMENT"

DEFAULT_CONFIG_PATH = Path(
    os.getenv(
        "OPS_CONFIG_FILE",
        Path.home() / ".config" / "ops-config" / "config.toml",
    )
)


class OpsSettingsError(ValueError):
    """Raised when the OPS configuration file cannot be read."""


def is_production_environment(name: str | None) -> bool:
    """Return True when ``name`` selects the production services.

    An unset or empty environment name counts as production, matching how
    build agents run without ``DOCS_ENVIRONMENT`` configured.
    """
    if not name:
        return True
    return name.upper() == "PROD"


@dc.dataclass(frozen=True, slots=True)
class OpsEnvironment:
    """Immutable process-wide settings for talking to OPS services."""

    is_production: bool = True
    ops_token: str | None = None

    @classmethod
    def from_env(
        cls, environ: typ.Mapping[str, str] | None = None
    ) -> OpsEnvironment:
        """Build an environment from ``environ`` (defaults to ``os.environ``)."""
        source = os.environ if environ is None else environ
        return cls(
            is_production=is_production_environment(source.get(ENVIRONMENT_ENV_VAR)),
            ops_token=source.get(TOKEN_ENV_VAR) or None,
        )

    @property
    def build_service_endpoint(self) -> str:
        if self.is_production:
            return PROD_BUILD_SERVICE_ENDPOINT
        return SANDBOX_BUILD_SERVICE_ENDPOINT

    @property
    def validation_service_endpoint(self) -> str:
        if self.is_production:
            return PROD_VALIDATION_SERVICE_ENDPOINT
        return PPE_VALIDATION_SERVICE_ENDPOINT

    @property
    def ops_headers(self) -> dict[str, str]:
        """Headers attached to every build service request."""
        return {OPS_TOKEN_HEADER: self.ops_token or ""}


def _load_ops_table(path: Path) -> dict[str, typ.Any]:
    if not path.exists():
        return {}
    try:
        document = tomlkit.parse(path.read_text(encoding="utf-8"))
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse OPS config TOML at {path}"
        raise OpsSettingsError(msg) from exc

    table = document.get("ops")
    if table is None:
        return {}
    if not isinstance(table, typ.Mapping):
        msg = f"Expected an [ops] table in {path}"
        raise OpsSettingsError(msg)
    return {key: value for key, value in table.items()}


def resolve_environment(
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    environment: str | None = None,
    ops_token: str | None = None,
    environ: typ.Mapping[str, str] | None = None,
) -> OpsEnvironment:
    """Merge CLI arguments, environment variables, and ``config.toml``.

    Parameters
    ----------
    config_path : Path, optional
        TOML file holding an optional ``[ops]`` table with ``token`` and
        ``environment`` keys. A missing file is not an error.
    environment : str | None, optional
        Explicit environment name (``PROD``, ``PPE``, ...).
    ops_token : str | None, optional
        Explicit build token.
    environ : Mapping[str, str] | None, optional
        Variable mapping to read instead of ``os.environ``.

    Returns
    -------
    OpsEnvironment
        The resolved, immutable environment.

    Raises
    ------
    OpsSettingsError
        If the config file exists but is not valid TOML or ``ops`` is not a
        table.
    """
    source = os.environ if environ is None else environ
    stored = _load_ops_table(config_path)

    name = (
        environment
        or source.get(ENVIRONMENT_ENV_VAR)
        or _as_optional_str(stored.get("environment"))
    )
    token = (
        ops_token
        or source.get(TOKEN_ENV_VAR)
        or _as_optional_str(stored.get("token"))
    )
    return OpsEnvironment(
        is_production=is_production_environment(name),
        ops_token=token or None,
    )


def _as_optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENVIRONMENT_ENV_VAR",
    "TOKEN_ENV_VAR",
    "OpsEnvironment",
    "OpsSettingsError",
    "is_production_environment",
    "resolve_environment",
]

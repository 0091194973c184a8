"""Resolve OPS build configuration and serve virtual OPS endpoints.

This package turns a docset name, repository URL, and branch into the build
configuration document consumed by the documentation build, and answers the
build's requests for moniker definitions, markdown validation rules, and the
metadata schema from the OPS services.

Exports
-------
- ``OpsConfigAdapter``: facade owning the shared HTTP session.
- ``OpsEnvironment``: immutable environment (production flag, build token).
- ``BuildConfig`` / ``ConfigResult``: resolution output.
- ``ErrorLog`` / ``Diagnostic``: diagnostic sink and records.

Examples
--------
>>> from ops_config import OpsEnvironment
>>> OpsEnvironment(is_production=True).validation_service_endpoint
'https://docs.microsoft.com/api/metadata'
"""

from __future__ import annotations

from .adapter import OpsConfigAdapter
from .diagnostics import Diagnostic, DiagnosticError, DiagnosticLevel, ErrorLog
from .fetcher import OpsFetchError
from .models import BuildConfig, ConfigResult, DocsetInfo
from .settings import OpsEnvironment, resolve_environment

__all__ = [
    "BuildConfig",
    "ConfigResult",
    "Diagnostic",
    "DiagnosticError",
    "DiagnosticLevel",
    "DocsetInfo",
    "ErrorLog",
    "OpsConfigAdapter",
    "OpsEnvironment",
    "OpsFetchError",
    "resolve_environment",
]

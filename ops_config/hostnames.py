"""Derive site host names and locales from a docset's site name."""

from __future__ import annotations

import typing as typ

from ._constants import LIVE_BRANCHES

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .settings import OpsEnvironment

# site name -> (production host, non-production host)
_SITE_HOSTS: dict[str, tuple[str, str]] = {
    "DocsAzureCN": ("docs.azure.cn", "ppe.docs.azure.cn"),
    "dev.microsoft.com": (
        "developer.microsoft.com",
        "devmsft-sandbox.azurewebsites.net",
    ),
    "rd.microsoft.com": ("rd.microsoft.com", "rd.microsoft.com"),
}
_DEFAULT_HOSTS = ("docs.microsoft.com", "ppe.docs.microsoft.com")


def is_live_branch(branch: str | None) -> bool:
    """Return True for branches published straight to the live site."""
    return branch in LIVE_BRANCHES


class HostnameResolver:
    """Map site names to host names for the configured environment."""

    def __init__(self, environment: OpsEnvironment) -> None:
        self.environment = environment

    def get_host_name(self, site_name: str | None) -> str:
        prod_host, sandbox_host = _SITE_HOSTS.get(site_name or "", _DEFAULT_HOSTS)
        return prod_host if self.environment.is_production else sandbox_host

    def get_default_locale(self, site_name: str | None) -> str:
        return "zh-cn" if site_name == "DocsAzureCN" else "en-us"

    def get_xref_host_name(self, site_name: str | None, branch: str | None) -> str:
        """Return the host used for cross-reference links.

        Non-live branches built against production get the ``review.``
        prefixed host; every other combination uses the site host.
        """
        host_name = self.get_host_name(site_name)
        if self.environment.is_production and not is_live_branch(branch):
            return f"review.{host_name}"
        return host_name


__all__ = ["HostnameResolver", "is_live_branch"]

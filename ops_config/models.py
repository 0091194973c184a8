"""Typed dataclasses exchanged between the registry and the build pipeline."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from .diagnostics import Diagnostic, DiagnosticError


@dc.dataclass(frozen=True, slots=True)
class DocsetInfo:
    """A docset entry returned by the registry query."""

    name: str
    base_path: str = ""
    site_name: str = ""
    product_name: str = ""

    @classmethod
    def from_mapping(cls, payload: cabc.Mapping[str, typ.Any]) -> DocsetInfo:
        return cls(
            name=_coerce_str(payload.get("name")),
            base_path=_coerce_str(payload.get("base_path")),
            site_name=_coerce_str(payload.get("site_name")),
            product_name=_coerce_str(payload.get("product_name")),
        )


def parse_docsets(payload: object) -> list[DocsetInfo]:
    """Return docset entries from a decoded registry response.

    Anything other than a list yields no entries; non-mapping items are
    skipped.
    """
    if not isinstance(payload, list):
        return []
    return [
        DocsetInfo.from_mapping(item)
        for item in payload
        if isinstance(item, cabc.Mapping)
    ]


@dc.dataclass(frozen=True, slots=True)
class BuildConfig:
    """Build configuration resolved for one docset.

    Attributes
    ----------
    product : str
        Product name registered for the docset.
    site_name : str
        Site the docset publishes to.
    host_name : str
        Host serving the site in the current environment.
    base_path : str
        URL path prefix of the docset on its site.
    xref_host_name : str
        Host used to resolve cross-references.
    default_locale : str
        Locale assumed for content without an explicit locale.
    moniker_definition : str
        Virtual URL of the moniker definition tree.
    markdown_validation_rules : str
        Virtual URL of the markdown validation rules.
    metadata_schema : tuple[str, str]
        Local bundled schema path followed by the virtual remote schema URL.
    """

    product: str
    site_name: str
    host_name: str
    base_path: str
    xref_host_name: str
    default_locale: str
    moniker_definition: str
    markdown_validation_rules: str
    metadata_schema: tuple[str, str]

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the camelCase document consumed by the build pipeline."""
        return {
            "product": self.product,
            "siteName": self.site_name,
            "hostName": self.host_name,
            "basePath": self.base_path,
            "xrefHostName": self.xref_host_name,
            "localization": {"defaultLocale": self.default_locale},
            "monikerDefinition": self.moniker_definition,
            "markdownValidationRules": self.markdown_validation_rules,
            "metadataSchema": list(self.metadata_schema),
        }


@dc.dataclass(frozen=True, slots=True)
class ConfigResult:
    """Outcome of a configuration lookup.

    ``config`` and ``diagnostic`` are both ``None`` when no configuration
    was requested.
    """

    config: BuildConfig | None = None
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    def unwrap(self) -> BuildConfig | None:
        """Return the config, raising :class:`DiagnosticError` on a diagnostic."""
        if self.diagnostic is not None:
            raise DiagnosticError(self.diagnostic)
        return self.config


def _coerce_str(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


__all__ = ["BuildConfig", "ConfigResult", "DocsetInfo", "parse_docsets"]

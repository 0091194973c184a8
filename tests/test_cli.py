"""Tests for the ops-config command line."""

from __future__ import annotations

import json
import typing as typ

import pytest

from ops_config import cli
from ops_config.diagnostics import Diagnostic, DiagnosticLevel, ErrorLog
from ops_config.fetcher import OpsFetchError
from ops_config.interceptor import InterceptedResponse
from ops_config.models import BuildConfig, ConfigResult

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ops_config.settings import OpsEnvironment


class StubAdapter:
    """Stand-in for OpsConfigAdapter recording calls made by the CLI."""

    instances: typ.ClassVar[list[StubAdapter]] = []
    result: typ.ClassVar[ConfigResult | Exception] = ConfigResult()
    intercepted: typ.ClassVar[InterceptedResponse | Exception | None] = None

    def __init__(self, environment: OpsEnvironment) -> None:
        self.environment = environment
        self.error_log = ErrorLog()
        self.closed = False
        StubAdapter.instances.append(self)

    def __enter__(self) -> StubAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    async def get_build_config(self, name: str, repository: str, branch: str) -> ConfigResult:
        if isinstance(StubAdapter.result, Exception):
            raise StubAdapter.result
        return StubAdapter.result

    async def intercept_http_request(self, url: str) -> InterceptedResponse | None:
        if isinstance(StubAdapter.intercepted, Exception):
            raise StubAdapter.intercepted
        return StubAdapter.intercepted


@pytest.fixture(autouse=True)
def stub_adapter(monkeypatch: pytest.MonkeyPatch) -> type[StubAdapter]:
    StubAdapter.instances = []
    StubAdapter.result = ConfigResult()
    StubAdapter.intercepted = None
    monkeypatch.setattr(cli, "OpsConfigAdapter", StubAdapter)
    monkeypatch.delenv("DOCS_ENVIRONMENT", raising=False)
    monkeypatch.delenv("DOCS_OPS_TOKEN", raising=False)
    return StubAdapter


def _config() -> BuildConfig:
    return BuildConfig(
        product="Azure",
        site_name="Docs",
        host_name="docs.microsoft.com",
        base_path="/azure",
        xref_host_name="review.docs.microsoft.com",
        default_locale="en-us",
        moniker_definition="https://ops/monikerDefinition/",
        markdown_validation_rules="https://ops/markdownvalidationrules/?repository_url=r&branch=b",
        metadata_schema=("/schemas/OpsMetadata.json", "https://ops/metadataschema/?repository_url=r&branch=b"),
    )


def _resolve(tmp_path: Path) -> None:
    cli.resolve(
        name="azure",
        repository="https://github.com/owner/repo",
        branch="main",
        config=tmp_path / "config.toml",
    )


def test_resolve_prints_build_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    StubAdapter.result = ConfigResult(config=_config())

    _resolve(tmp_path)

    document = json.loads(capsys.readouterr().out)
    assert document["xrefHostName"] == "review.docs.microsoft.com"
    assert document["metadataSchema"][0] == "/schemas/OpsMetadata.json"
    assert StubAdapter.instances[0].closed, "expected adapter to be closed"


def test_resolve_reports_warning_without_failing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    StubAdapter.result = ConfigResult(
        diagnostic=Diagnostic("docset-not-provisioned", "not provisioned")
    )

    _resolve(tmp_path)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "warning: docset-not-provisioned: not provisioned" in captured.err


def test_resolve_exits_nonzero_on_transport_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    StubAdapter.result = OpsFetchError("boom", url="https://x", status_code=500)

    with pytest.raises(SystemExit) as excinfo:
        _resolve(tmp_path)

    assert excinfo.value.code == 1
    assert "error: fetch-failed: boom" in capsys.readouterr().err
    errors = StubAdapter.instances[0].error_log.errors
    assert [d.level for d in errors] == [DiagnosticLevel.ERROR]


def test_fetch_prints_intercepted_body(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    StubAdapter.intercepted = InterceptedResponse(url="https://ops/monikerDefinition/", text="{}")

    cli.fetch("https://ops/monikerDefinition/", config=tmp_path / "c.toml")

    assert capsys.readouterr().out.strip() == "{}"


def test_fetch_rejects_non_virtual_urls(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.fetch("https://example.com/", config=tmp_path / "c.toml")
    assert excinfo.value.code == 2


def test_fetch_exits_nonzero_on_transport_failure(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    StubAdapter.intercepted = OpsFetchError("down", url="https://x", status_code=503)

    with pytest.raises(SystemExit) as excinfo:
        cli.fetch("https://ops/monikerDefinition/", config=tmp_path / "c.toml")

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error: fetch-failed: down" in captured.err
    assert StubAdapter.instances[0].closed, "expected adapter to be closed"

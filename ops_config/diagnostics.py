"""Structured build diagnostics and the sink that collects them.

Components report conditions that should reach the build report (a docset
that is not provisioned, validation data that could not be loaded, the
ruleset version served by the metadata service) as :class:`Diagnostic`
records written to an :class:`ErrorLog`. Each diagnostic carries an explicit
:class:`DiagnosticLevel`, so callers can tell a recoverable warning from a
hard failure without inspecting exception types.

Example
-------
>>> from ops_config.diagnostics import ErrorLog, validation_incomplete
>>> log = ErrorLog()
>>> log.write(validation_incomplete())
>>> [d.code for d in log.warnings]
['validation-incomplete']
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import threading

logger = logging.getLogger(__name__)


class DiagnosticLevel(enum.StrEnum):
    """Severity attached to a diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def logging_level(self) -> int:
        return {
            DiagnosticLevel.INFO: logging.INFO,
            DiagnosticLevel.WARNING: logging.WARNING,
            DiagnosticLevel.ERROR: logging.ERROR,
        }[self]


@dc.dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single build report entry.

    Attributes
    ----------
    code : str
        Stable kebab-case identifier, e.g. ``docset-not-provisioned``.
    message : str
        Human-readable explanation.
    level : DiagnosticLevel
        Severity; only ``ERROR`` should fail a build.
    """

    code: str
    message: str
    level: DiagnosticLevel = DiagnosticLevel.WARNING

    @property
    def is_error(self) -> bool:
        return self.level is DiagnosticLevel.ERROR

    def __str__(self) -> str:
        return f"{self.level}: {self.code}: {self.message}"


class DiagnosticError(RuntimeError):
    """Unwind a call while carrying a structured diagnostic."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


class ErrorLog:
    """Collect diagnostics emitted during a build.

    Writes are guarded by a lock: sessions with an ``InterceptingHTTPAdapter``
    mounted may be used from several threads that share one log.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Diagnostic] = []

    def write(self, diagnostic: Diagnostic) -> None:
        logger.log(diagnostic.level.logging_level, "%s", diagnostic)
        with self._lock:
            self._items.append(diagnostic)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._items)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level is DiagnosticLevel.WARNING]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def docset_not_provisioned(name: str) -> Diagnostic:
    return Diagnostic(
        code="docset-not-provisioned",
        message=(
            f"Cannot build docset '{name}' because it has not been provisioned. "
            "Provision the docset in the OPS portal and try again."
        ),
        level=DiagnosticLevel.WARNING,
    )


def validation_incomplete() -> Diagnostic:
    return Diagnostic(
        code="validation-incomplete",
        message=(
            "Failed to load markdown validation rules or metadata schema; "
            "validation is incomplete for this build."
        ),
        level=DiagnosticLevel.WARNING,
    )


def metadata_validation_ruleset(version: str) -> Diagnostic:
    return Diagnostic(
        code="metadata-validation-ruleset",
        message=f"Metadata validation ruleset used: {version}",
        level=DiagnosticLevel.INFO,
    )


__all__ = [
    "Diagnostic",
    "DiagnosticError",
    "DiagnosticLevel",
    "ErrorLog",
    "docset_not_provisioned",
    "metadata_validation_ruleset",
    "validation_incomplete",
]

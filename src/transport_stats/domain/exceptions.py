"""Exception hierarchy for the statistics backend."""

from __future__ import annotations

from typing import Any, Mapping


class TransportStatsError(Exception):
    """Base class for all errors raised outside the pure aggregation core."""

    default_message = "Transport statistics error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class ConfigurationError(TransportStatsError):
    """Invalid or incomplete dashboard configuration."""

    default_message = "Invalid configuration"


class SourceError(TransportStatsError):
    """A record source could not be read or written."""

    default_message = "Record source failure"


class ValidationError(TransportStatsError):
    """Caller-supplied arguments (filters, report parameters) are invalid."""

    default_message = "Validation failed"


class ReportError(TransportStatsError):
    """Report data could not be assembled."""

    default_message = "Report generation failed"

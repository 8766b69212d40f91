from __future__ import annotations

from typing import Any, Optional


class AnalyzerError(Exception):
    """Base for errors the analyze endpoint turns into a JSON error body."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class ConfigurationError(AnalyzerError):
    status_code = 500


class InvalidInputError(AnalyzerError):
    status_code = 400


class ExternalServiceError(AnalyzerError):
    status_code = 500

    @classmethod
    def from_exception(cls, e: BaseException) -> "ExternalServiceError":
        return cls("Analysis service error", detail=f"{type(e).__name__}: {e}")

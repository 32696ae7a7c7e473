"""Custom exception hierarchy for codicibot."""

from __future__ import annotations


class CodiciError(Exception):
    """Base exception for all codicibot errors."""


class CodiciConfigError(CodiciError):
    """Invalid or missing configuration."""


class CodiciStoreError(CodiciError):
    """Code record store unavailable or rejected an operation."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class CodiciStoreTimeoutError(CodiciStoreError):
    """A store operation did not complete within the configured timeout."""


class CodiciSessionError(CodiciError):
    """A dialogue transition not defined for the session's current phase."""


class CodiciTransportError(CodiciError):
    """HTTP-level failure talking to the Telegram Bot API (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str = "",
    ) -> None:
        self.status_code = status_code
        self.method = method
        super().__init__(message)


class CodiciApiError(CodiciError):
    """Telegram Bot API answered with ``"ok": false``."""

    def __init__(
        self,
        message: str,
        *,
        error_code: int | None = None,
        method: str = "",
    ) -> None:
        self.error_code = error_code
        self.method = method
        super().__init__(message)

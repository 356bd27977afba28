"""HLSFlow exception hierarchy."""

from __future__ import annotations

from hlsflow.error_codes import ErrorCode


class HLSFlowError(Exception):
    """Base error for HLSFlow."""


class ConfigurationError(HLSFlowError):
    """Raised when configuration or inputs are invalid."""


class EncoderError(HLSFlowError):
    """Raised when the external encoder reports a failure."""

    def __init__(
        self,
        stage: str,
        message: str,
        *,
        rendition: str | None = None,
        returncode: int | None = None,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        prefix = f"{stage}"
        if rendition:
            prefix = f"{prefix} (rendition={rendition})"
        super().__init__(f"{prefix}: {message}")
        self.stage = stage
        self.rendition = rendition
        self.returncode = returncode
        self.message = message
        self.error_code = error_code


class StorageError(HLSFlowError):
    """Raised when an object-storage operation fails."""

    def __init__(self, operation: str, object_path: str, message: str) -> None:
        super().__init__(f"{operation} {object_path!r}: {message}")
        self.operation = operation
        self.object_path = object_path
        self.message = message


class TokenNotFoundError(HLSFlowError):
    """Raised when a download URL is requested for an object that was never published."""

    def __init__(self, object_path: str) -> None:
        super().__init__(f"no access token recorded for {object_path!r}")
        self.object_path = object_path


class ReconcileError(HLSFlowError):
    """Raised when a business record cannot be merge-updated."""

    def __init__(self, document_path: str, message: str) -> None:
        super().__init__(f"{document_path}: {message}")
        self.document_path = document_path
        self.message = message

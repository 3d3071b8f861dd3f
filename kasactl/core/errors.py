"""Domain-specific errors for kasactl."""

from __future__ import annotations


class KasactlError(Exception):
    """Base error for kasactl."""


class ProfileValidationError(KasactlError):
    """Raised when a device profile does not conform to schema or semantics."""


class ProfileLoadError(KasactlError):
    """Raised when loading profile sources fails."""


class TransportError(KasactlError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised on TCP connect failures."""


class TransportSendError(TransportError):
    """Raised when writing the request or reading the reply fails."""


class TransportTimeoutError(TransportError):
    """Raised when any phase of an exchange times out."""


class DeviceDiscoveryError(TransportError):
    """Raised when the discovery probe cannot be broadcast or collected."""


class FramingError(KasactlError):
    """Raised when a length-prefixed frame is truncated or inconsistent."""


class DecodeError(KasactlError):
    """Raised when a reply is not valid JSON after de-obfuscation."""


class ResponseShapeError(KasactlError):
    """Raised when a reply does not mirror the request's subsystem/action path."""


class DeviceError(KasactlError):
    """Raised when the device answers with a non-zero ``err_code``."""

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = code
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Device reported error {code}{detail}")


class CapabilityError(KasactlError):
    """Raised when a device instance lacks the requested capability."""


class InvalidParameterError(KasactlError):
    """Raised when a caller-supplied value is rejected before any I/O."""

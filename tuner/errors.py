"""
Error taxonomy for Tuner.

Collaborators (catalog, decoder, output device) raise these exceptions.
The playback engine never lets them escape its thread; it converts them
into ErrorInfo values carried by Status.error(...).
"""

from dataclasses import dataclass
from typing import Optional


class TunerError(Exception):
    """Base class for all Tuner errors."""


class ApiError(TunerError):
    """
    Catalog/transport failure (station list fetch, rating, rename, ...).

    Recoverable: the engine reports it and retries by staying in the
    Station state.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (code={self.code})"
        return self.message


class DecodeError(TunerError):
    """A track locator cannot be opened or decoded. Per-track, non-fatal."""


class DeviceError(TunerError):
    """
    Output device unavailable.

    Per-track when raised while opening a device for a track; fatal when
    raised by the driver probe at engine startup.
    """


@dataclass(frozen=True)
class ErrorInfo:
    """
    Immutable description of an error surfaced on the status stream.

    Attributes:
        kind: "api", "decode", "device" or "internal"
        message: Human-readable message
        code: Optional catalog error code
    """
    kind: str
    message: str
    code: Optional[int] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        if isinstance(exc, ApiError):
            return cls(kind="api", message=exc.message, code=exc.code)
        if isinstance(exc, DecodeError):
            return cls(kind="decode", message=str(exc))
        if isinstance(exc, DeviceError):
            return cls(kind="device", message=str(exc))
        return cls(kind="internal", message=f"{type(exc).__name__}: {exc}")

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"

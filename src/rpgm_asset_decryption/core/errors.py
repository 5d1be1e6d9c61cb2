"""Error taxonomy for key discovery and asset decryption.

Key discovery errors are fatal to a run unless marked recoverable, in which
case the next key source is tried. Frame errors are per-file and end up in
the batch report instead of propagating.
"""

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Stable identifiers for every failure the engine can report."""

    MANIFEST_MISSING = "ManifestMissing"
    MANIFEST_UNREADABLE = "ManifestUnreadable"
    KEY_NOT_FOUND = "KeyNotFound"
    KEY_MALFORMED = "KeyMalformed"
    FALLBACK_KEY_NOT_FOUND = "FallbackKeyNotFound"
    HEADER_TOO_SHORT = "HeaderTooShort"
    WRONG_KEY_OR_FORMAT = "WrongKeyOrFormat"
    KEYLESS_UNSUPPORTED = "KeylessUnsupported"
    IO_ERROR = "IOError"
    PERMISSION_DENIED = "PermissionDenied"


class DecryptionError(Exception):
    """Base class for all errors raised by this package."""

    kind: ErrorKind | None = None


class GameRootError(DecryptionError):
    """The given path cannot be used as a game root."""


class KeyDiscoveryError(DecryptionError):
    """No usable encryption key could be obtained from a key source.

    Attributes:
        recoverable: Whether the next key source should be tried
        path: File the failure relates to, if any
        attempts: Errors of earlier sources, filled in by the key chain
    """

    recoverable = False

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path
        self.attempts: list["KeyDiscoveryError"] = []


class ManifestMissing(KeyDiscoveryError):
    kind = ErrorKind.MANIFEST_MISSING
    recoverable = True


class ManifestUnreadable(KeyDiscoveryError):
    kind = ErrorKind.MANIFEST_UNREADABLE
    recoverable = True


class KeyNotFound(KeyDiscoveryError):
    kind = ErrorKind.KEY_NOT_FOUND


class KeyMalformed(KeyDiscoveryError, ValueError):
    kind = ErrorKind.KEY_MALFORMED


class FallbackKeyNotFound(KeyDiscoveryError):
    kind = ErrorKind.FALLBACK_KEY_NOT_FOUND
    recoverable = True


class FrameError(DecryptionError):
    """An encrypted file could not be turned back into its original bytes."""


class HeaderTooShort(FrameError):
    kind = ErrorKind.HEADER_TOO_SHORT


class WrongKeyOrFormat(FrameError):
    kind = ErrorKind.WRONG_KEY_OR_FORMAT


class KeylessUnsupported(FrameError):
    kind = ErrorKind.KEYLESS_UNSUPPORTED

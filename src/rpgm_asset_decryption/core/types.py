"""Type definitions for the decryption engine.

This module defines the layout variants, the closed table of encrypted
asset kinds, and the records passed between the scanner, the frame
decryptor and the batch pipeline.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ErrorKind, KeyMalformed

# Length of the stock RPG Maker file header that precedes the encrypted part
SIGNATURE_LEN = 16

# R P G M V, padding, version (VER in rpg_core.js), padding
STOCK_SIGNATURE = b"RPGMV\x00\x00\x00\x00\x03\x01\x00\x00\x00\x00\x00"

# The key is XOR-ed byte for byte over the encrypted part, so both are 16
KEY_LEN = 16

# Bytes [0, 32) of every encrypted file
FRAME_LEN = SIGNATURE_LEN + KEY_LEN

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# PNG signature followed by the IHDR chunk length and type, always fixed
PNG_HEADER = PNG_SIGNATURE + b"\x00\x00\x00\x0dIHDR"


class LayoutVariant(str, Enum):
    """Directory layout a game was published with."""

    MV = "MV"
    MZ = "MZ"


class AssetKind(Enum):
    """Encrypted asset kinds, keyed by layout and source extension.

    Each member carries (layout, source extension, target extension,
    magic, magic offset, keyless header template).
    """

    PNG_MV = (LayoutVariant.MV, ".rpgmvp", ".png", PNG_SIGNATURE, 0, PNG_HEADER)
    OGG_MV = (LayoutVariant.MV, ".rpgmvo", ".ogg", b"OggS", 0, None)
    M4A_MV = (LayoutVariant.MV, ".rpgmvm", ".m4a", b"ftyp", 4, None)
    PNG_MZ = (LayoutVariant.MZ, ".png_", ".png", PNG_SIGNATURE, 0, PNG_HEADER)
    OGG_MZ = (LayoutVariant.MZ, ".ogg_", ".ogg", b"OggS", 0, None)
    M4A_MZ = (LayoutVariant.MZ, ".m4a_", ".m4a", b"ftyp", 4, None)

    def __init__(
        self,
        layout: LayoutVariant,
        source_extension: str,
        target_extension: str,
        magic: bytes,
        magic_offset: int,
        keyless_header: bytes | None,
    ):
        self.layout = layout
        self.source_extension = source_extension
        self.target_extension = target_extension
        self.magic = magic
        self.magic_offset = magic_offset
        self.keyless_header = keyless_header

    @property
    def is_image(self) -> bool:
        return self.target_extension == ".png"

    @classmethod
    def for_extension(cls, layout: LayoutVariant, extension: str) -> "AssetKind | None":
        """Look up the kind for a file extension within one layout.

        Args:
            layout: Layout of the game being scanned
            extension: File suffix including the dot, any case

        Returns:
            The matching kind, or None if the extension is not an asset
        """
        extension = extension.lower()
        for kind in cls:
            if kind.layout is layout and kind.source_extension == extension:
                return kind
        return None

    @classmethod
    def for_layout(cls, layout: LayoutVariant) -> list["AssetKind"]:
        return [kind for kind in cls if kind.layout is layout]


@dataclass(frozen=True)
class EncryptionKey:
    """The per-title 16 byte key."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != KEY_LEN:
            raise KeyMalformed(
                f"Encryption key must be {KEY_LEN} bytes, got {len(self.value)}"
            )

    @classmethod
    def from_hex(cls, raw_key: str) -> "EncryptionKey":
        """Parse a key from its 32 character hex representation.

        Args:
            raw_key: Hex string, any case, surrounding whitespace ignored

        Returns:
            The parsed key

        Raises:
            KeyMalformed: If the string is not exactly 32 hex characters
        """
        raw_key = raw_key.strip()
        if len(raw_key) != KEY_LEN * 2:
            raise KeyMalformed(
                f'String "{raw_key}" is not a valid encryption key: expected '
                f"{KEY_LEN * 2} hex characters, got {len(raw_key)}. "
                "Maybe it's fake, obfuscated or broken."
            )
        try:
            return cls(bytes.fromhex(raw_key))
        except ValueError as e:
            raise KeyMalformed(f'String "{raw_key}" is not valid hex: {e}') from e

    def hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class EncryptedFile:
    """A discovered encrypted asset.

    Attributes:
        path: Absolute path of the encrypted file
        kind: Detected asset kind
        size_bytes: Size from file metadata, the file is not read
    """

    path: Path
    kind: AssetKind
    size_bytes: int


@dataclass(frozen=True)
class DecryptionJob:
    """One file to decrypt. A key of None selects keyless reconstruction."""

    file: EncryptedFile
    key: EncryptionKey | None
    destination: Path


@dataclass
class JobOutcome:
    """Result of one decryption job.

    A successful outcome has ``error_kind`` set to None and may still carry
    advisory warnings. A failed outcome never wrote its destination.
    """

    path: Path
    destination: Path | None = None
    bytes_written: int = 0
    error_kind: ErrorKind | None = None
    detail: str = ""
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(
        cls, path: Path, destination: Path, bytes_written: int, warnings: list[str]
    ) -> "JobOutcome":
        return cls(
            path=path,
            destination=destination,
            bytes_written=bytes_written,
            warnings=warnings,
        )

    @classmethod
    def failure(cls, path: Path, error_kind: ErrorKind, detail: str) -> "JobOutcome":
        return cls(path=path, error_kind=error_kind, detail=detail)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "destination": str(self.destination) if self.destination else None,
            "ok": self.ok,
            "bytes_written": self.bytes_written,
            "error": self.error_kind.value if self.error_kind else None,
            "detail": self.detail,
            "warnings": list(self.warnings),
        }


@dataclass
class ScanWarning:
    """A non-fatal problem met while walking the game tree."""

    path: Path
    error_kind: ErrorKind
    detail: str

    def __str__(self) -> str:
        return f"{self.error_kind.value}: {self.path}: {self.detail}"


class BatchReport:
    """Thread-safe accumulator of job outcomes for one run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[JobOutcome] = []
        self.scan_warnings: list[ScanWarning] = []

    def record(self, outcome: JobOutcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    @property
    def outcomes(self) -> list[JobOutcome]:
        with self._lock:
            return list(self._outcomes)

    @property
    def successes(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def warnings(self) -> list[str]:
        return [f"{o.path}: {w}" for o in self.outcomes for w in o.warnings]

    @property
    def ok(self) -> bool:
        return self.failure_count == 0

    def to_dict(self) -> dict[str, Any]:
        outcomes = self.outcomes
        return {
            "total": len(outcomes),
            "succeeded": sum(1 for o in outcomes if o.ok),
            "failed": sum(1 for o in outcomes if not o.ok),
            "failures": [o.to_dict() for o in outcomes if not o.ok],
            "warnings": self.warnings,
            "scan_warnings": [str(w) for w in self.scan_warnings],
        }

"""Core data model and algorithms.

This package contains the type definitions, the error taxonomy, layout
detection, System.json validation and the frame decryptor used by the key
sources and the batch pipeline.
"""

from .errors import (
    DecryptionError,
    ErrorKind,
    FallbackKeyNotFound,
    FrameError,
    GameRootError,
    HeaderTooShort,
    KeyDiscoveryError,
    KeylessUnsupported,
    KeyMalformed,
    KeyNotFound,
    ManifestMissing,
    ManifestUnreadable,
    WrongKeyOrFormat,
)
from .frame import decrypt_frame, decrypt_frame_keyless, verify_frame
from .game import GameRoot
from .types import (
    AssetKind,
    BatchReport,
    DecryptionJob,
    EncryptedFile,
    EncryptionKey,
    JobOutcome,
    LayoutVariant,
    ScanWarning,
)
from .validator import validate_system_manifest, validate_system_manifest_with_error_details

__all__ = [
    "AssetKind",
    "BatchReport",
    "DecryptionError",
    "DecryptionJob",
    "EncryptedFile",
    "EncryptionKey",
    "ErrorKind",
    "FallbackKeyNotFound",
    "FrameError",
    "GameRoot",
    "GameRootError",
    "HeaderTooShort",
    "JobOutcome",
    "KeyDiscoveryError",
    "KeylessUnsupported",
    "KeyMalformed",
    "KeyNotFound",
    "LayoutVariant",
    "ManifestMissing",
    "ManifestUnreadable",
    "ScanWarning",
    "WrongKeyOrFormat",
    "decrypt_frame",
    "decrypt_frame_keyless",
    "validate_system_manifest",
    "validate_system_manifest_with_error_details",
    "verify_frame",
]

"""RPG Maker MV/MZ asset decryption.

This package finds the per-title encryption key of RPG Maker MV and MZ
games and restores their encrypted images and audio in parallel.
"""

# Core library interface
from .pipeline import DecryptionPipeline, decrypt_game, discover_key
from .registry import KeySourceRegistry
from .scanner import AssetScanner, scan_encrypted_files
from .sources import KeySource, resolve_key

# Core data model
from .core import (
    AssetKind,
    BatchReport,
    DecryptionError,
    EncryptedFile,
    EncryptionKey,
    ErrorKind,
    GameRoot,
    JobOutcome,
    KeyDiscoveryError,
    LayoutVariant,
    decrypt_frame,
    decrypt_frame_keyless,
)

# CLI entry point
from .cli import main

__version__ = "0.1.0"

__all__ = [
    # Primary library interface
    "DecryptionPipeline",
    "decrypt_game",
    "discover_key",
    "KeySourceRegistry",
    "KeySource",
    "resolve_key",
    "AssetScanner",
    "scan_encrypted_files",
    # Data model
    "AssetKind",
    "BatchReport",
    "DecryptionError",
    "EncryptedFile",
    "EncryptionKey",
    "ErrorKind",
    "GameRoot",
    "JobOutcome",
    "KeyDiscoveryError",
    "LayoutVariant",
    "decrypt_frame",
    "decrypt_frame_keyless",
    # CLI
    "main",
]

"""Fallback key source scanning the packaged executable.

Games bundled with Enigma Virtual Box carry System.json inside Game.exe.
When the bundler stored it uncompressed the key is sitting in the binary
in plain text and a regex finds it. Compressed bundles are not unpacked,
so such titles stay out of reach of this source.
"""

import re
from pathlib import Path

from ..core.errors import FallbackKeyNotFound
from ..core.game import GameRoot
from ..core.types import EncryptionKey
from .base import KeySource

# Upper bound on how much of an executable is read into memory
MAX_EXECUTABLE_SCAN_BYTES = 256 * 1024 * 1024

KEY_PATTERN = re.compile(rb'"?encryptionKey"?\s*:\s*"([0-9a-fA-F]{32})"')


def find_key_in_bytes(data: bytes) -> EncryptionKey | None:
    """Search a binary blob for an embedded ``"encryptionKey":"<hex>"``."""
    match = KEY_PATTERN.search(data)
    if match is None:
        return None
    return EncryptionKey.from_hex(match.group(1).decode("ascii"))


def read_bounded(path: Path, limit: int) -> bytes:
    with path.open("rb") as f:
        return f.read(limit)


class ExecutableKeySource(KeySource):
    """Recover the key from an executable with embedded game data."""

    name = "executable"

    def __init__(self, max_bytes: int = MAX_EXECUTABLE_SCAN_BYTES):
        self.max_bytes = max_bytes

    def find_key(self, game: GameRoot) -> EncryptionKey:
        try:
            candidates = game.executable_candidates()
        except OSError as e:
            raise FallbackKeyNotFound(
                f"Can't list executables in {game.path}: {e}", path=game.path
            ) from e

        if not candidates:
            raise FallbackKeyNotFound(f"No game executable found in {game.path}")

        problems: list[str] = []
        for exe in candidates:
            try:
                data = read_bounded(exe, self.max_bytes)
            except OSError as e:
                problems.append(f"{exe.name}: {e}")
                continue

            key = find_key_in_bytes(data)
            if key is not None:
                return key
            problems.append(f"{exe.name}: no embedded encryption key")

        raise FallbackKeyNotFound(
            "Encryption key not found in executables (" + "; ".join(problems) + ")",
            path=candidates[0],
        )

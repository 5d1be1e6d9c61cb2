"""Fallback key source deriving the key from encrypted PNG files.

The first 16 bytes of every PNG are fixed (signature, IHDR length and chunk
type), so XOR-ing them with the encrypted part of an encrypted PNG yields
the key itself. Several files are probed and must agree before the key is
trusted.
"""

from collections import Counter
from pathlib import Path

from ..core.errors import FallbackKeyNotFound
from ..core.game import GameRoot
from ..core.types import FRAME_LEN, PNG_HEADER, SIGNATURE_LEN, EncryptionKey
from ..scanner import AssetScanner
from .base import KeySource

# Number of encrypted PNG files read when deriving the key
PNG_PROBE_LIMIT = 8


def key_from_png_frame(frame: bytes) -> EncryptionKey | None:
    """Derive the key from the first 32 bytes of an encrypted PNG."""
    if len(frame) < FRAME_LEN:
        return None
    encrypted_part = frame[SIGNATURE_LEN:FRAME_LEN]
    return EncryptionKey(bytes(a ^ b for a, b in zip(encrypted_part, PNG_HEADER)))


def read_frame(path: Path) -> bytes:
    with path.open("rb") as f:
        return f.read(FRAME_LEN)


class PngHeaderKeySource(KeySource):
    """Recover the key from the known header of encrypted PNG files."""

    name = "png-header"

    def __init__(self, probe_limit: int = PNG_PROBE_LIMIT):
        self.probe_limit = probe_limit

    def find_key(self, game: GameRoot) -> EncryptionKey:
        votes: Counter[EncryptionKey] = Counter()
        probed = 0

        for encrypted in AssetScanner(game, quiet=True).iter_files():
            if not encrypted.kind.is_image:
                continue
            try:
                key = key_from_png_frame(read_frame(encrypted.path))
            except OSError:
                continue
            if key is None:
                continue
            votes[key] += 1
            probed += 1
            if probed >= self.probe_limit:
                break

        if not votes:
            raise FallbackKeyNotFound(
                f"No readable encrypted PNG files to derive the key from in {game.path}"
            )

        key, count = votes.most_common(1)[0]
        if probed > 1 and count < 2:
            raise FallbackKeyNotFound(
                f"Encrypted PNG files disagree on the key ({probed} files, "
                f"{len(votes)} candidates)"
            )
        return key

"""Helpers for building synthetic RPG Maker game trees."""

import json
from pathlib import Path

from rpgm_asset_decryption.core.types import PNG_HEADER, STOCK_SIGNATURE, EncryptionKey

KEY_HEX = "000102030405060708090a0b0c0d0e0f"

# Minimal files with realistic leading bytes, payload after byte 16 is arbitrary
PNG_BYTES = PNG_HEADER + b"\x00\x00\x00\x10\x00\x00\x00\x10\x08\x06\x00\x00\x00" + b"png-payload" * 8
OGG_BYTES = b"OggS\x00\x02\x00\x00\x00\x00\x00\x00\x00\x00\x2a\x2a\x00\x00" + b"ogg-payload" * 8
M4A_BYTES = b"\x00\x00\x00\x20ftypM4A \x00\x00\x00\x00" + b"m4a-payload" * 8


def encrypt_frame(original: bytes, key: EncryptionKey, signature: bytes = STOCK_SIGNATURE) -> bytes:
    """Inverse of the frame decryptor, for building fixtures only."""
    head = bytes(b ^ k for b, k in zip(original[:16], key.value))
    return signature + head + original[16:]


class GameBuilder:
    """Write a fake game under a temporary directory."""

    def __init__(self, root: Path, layout: str):
        self.root = root
        self.layout = layout

    @property
    def content_root(self) -> Path:
        return self.root / "www" if self.layout == "MV" else self.root

    def write(self, relative: str, data: bytes) -> Path:
        path = self.content_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def system_json(self, document: dict | None = None, raw: bytes | None = None) -> Path:
        if raw is None:
            raw = json.dumps(document if document is not None else {"encryptionKey": KEY_HEX}).encode("utf-8")
        return self.write("data/System.json", raw)

    def asset(self, relative: str, original: bytes, key: EncryptionKey) -> Path:
        return self.write(relative, encrypt_frame(original, key))

    def executable(self, data: bytes, name: str = "Game.exe") -> Path:
        path = self.root / name
        path.write_bytes(data)
        return path



"""Shared fixtures for building synthetic RPG Maker game trees."""

from collections.abc import Callable
from pathlib import Path

import pytest

from helpers import KEY_HEX, GameBuilder
from rpgm_asset_decryption.core.types import EncryptionKey


@pytest.fixture
def key() -> EncryptionKey:
    return EncryptionKey.from_hex(KEY_HEX)


@pytest.fixture
def make_game(tmp_path: Path) -> Callable[..., GameBuilder]:
    """Factory creating an empty MV or MZ game directory."""

    def _make(layout: str = "MV") -> GameBuilder:
        root = tmp_path / f"game-{layout.lower()}"
        root.mkdir()
        if layout == "MV":
            (root / "www").mkdir()
        return GameBuilder(root, layout)

    return _make

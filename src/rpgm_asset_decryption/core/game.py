"""Game root and layout detection.

Published MV games keep everything under a ``www`` folder next to the
executable, while MZ games lay ``data``, ``img`` and ``audio`` directly
alongside it::

    MV                          MZ
    <root>/Game.exe             <root>/Game.exe
    <root>/www/data/System.json <root>/data/System.json
    <root>/www/img/...          <root>/img/...
"""

from dataclasses import dataclass
from pathlib import Path

from .errors import GameRootError
from .types import LayoutVariant

MANIFEST_NAME = "System.json"

ASSET_DIR_NAMES = ("img", "audio")

# nw.js ships these next to the game executable, they never embed game data
HELPER_EXECUTABLES = {"notification_helper.exe", "nwjc.exe", "payload.exe"}


@dataclass(frozen=True)
class GameRoot:
    """A game directory together with its detected layout."""

    path: Path
    layout: LayoutVariant

    @classmethod
    def detect(cls, path: Path) -> "GameRoot":
        """Detect the layout of the game at ``path``.

        Args:
            path: Game directory (absolute or relative)

        Returns:
            GameRoot with an absolute path

        Raises:
            GameRootError: If the path doesn't exist or isn't a directory
        """
        root = Path(path).resolve()

        if not root.exists():
            raise GameRootError(f"Game directory does not exist: {root}")

        if not root.is_dir():
            raise GameRootError(f"Game directory is not a directory: {root}")

        layout = LayoutVariant.MV if (root / "www").is_dir() else LayoutVariant.MZ
        return cls(path=root, layout=layout)

    @property
    def content_root(self) -> Path:
        """Directory holding ``data``, ``img`` and ``audio``."""
        if self.layout is LayoutVariant.MV:
            return self.path / "www"
        return self.path

    @property
    def data_dir(self) -> Path:
        return self.content_root / "data"

    @property
    def manifest_path(self) -> Path:
        return self.data_dir / MANIFEST_NAME

    @property
    def asset_dirs(self) -> list[Path]:
        return [self.content_root / name for name in ASSET_DIR_NAMES]

    def executable_candidates(self) -> list[Path]:
        """List executables that may embed the game data, best guess first."""
        candidates = [
            p
            for p in self.path.iterdir()
            if p.suffix.lower() == ".exe"
            and p.is_file()
            and p.name.lower() not in HELPER_EXECUTABLES
        ]
        # Game.exe first, the rest by name
        return sorted(candidates, key=lambda p: (p.name.lower() != "game.exe", p.name))

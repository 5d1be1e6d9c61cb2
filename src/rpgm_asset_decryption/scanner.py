"""Directory scanning and encrypted asset classification.

This module walks the asset directories of a game and yields every file
whose extension marks it as an encrypted asset of the game's layout.
"""

import os
import stat
import sys
from collections.abc import Iterator
from pathlib import Path

from .core.errors import ErrorKind
from .core.game import GameRoot
from .core.types import AssetKind, EncryptedFile, ScanWarning


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")


def classify(path: Path, game: GameRoot) -> AssetKind | None:
    """Return the asset kind of ``path`` for the game's layout, if any."""
    return AssetKind.for_extension(game.layout, path.suffix)


class AssetScanner:
    """Lazily enumerate the encrypted assets of a game.

    Each call to :meth:`iter_files` starts a fresh walk. Warnings for
    unreadable directories and files are collected in ``warnings`` and the
    walk carries on past them.

    Example:
        >>> scanner = AssetScanner(GameRoot.detect(Path('/games/SomeTitle')))
        >>> for encrypted in scanner.iter_files():
        ...     print(encrypted.path, encrypted.kind.target_extension)
    """

    def __init__(self, game: GameRoot, quiet: bool = False):
        self.game = game
        self.quiet = quiet
        self.warnings: list[ScanWarning] = []

    def _warn(self, path: Path, error_kind: ErrorKind, detail: str) -> None:
        warning = ScanWarning(path=path, error_kind=error_kind, detail=detail)
        self.warnings.append(warning)
        if not self.quiet:
            print(f"Warning: {warning}", file=sys.stderr)

    def _on_walk_error(self, error: OSError) -> None:
        path = Path(error.filename) if error.filename else self.game.content_root
        error_kind = (
            ErrorKind.PERMISSION_DENIED
            if isinstance(error, PermissionError)
            else ErrorKind.IO_ERROR
        )
        self._warn(path, error_kind, error.strerror or str(error))

    def iter_files(self) -> Iterator[EncryptedFile]:
        """Yield every encrypted asset under the game's asset directories.

        Yields:
            EncryptedFile entries in walk order
        """
        for asset_dir in self.game.asset_dirs:
            if not asset_dir.is_dir():
                continue

            # Symlinked directories are not descended into
            for dirpath, _, filenames in os.walk(
                asset_dir, onerror=self._on_walk_error, followlinks=False
            ):
                for filename in sorted(filenames):
                    file_path = Path(dirpath) / filename

                    kind = classify(file_path, self.game)
                    if kind is None:
                        continue

                    try:
                        if file_path.is_symlink():
                            continue
                        stat_info = file_path.stat()
                    except OSError as e:
                        self._warn(file_path, ErrorKind.IO_ERROR, str(e))
                        continue

                    if not stat.S_ISREG(stat_info.st_mode):
                        continue

                    yield EncryptedFile(
                        path=file_path,
                        kind=kind,
                        size_bytes=stat_info.st_size,
                    )


def scan_encrypted_files(game: GameRoot) -> list[EncryptedFile]:
    """Collect all encrypted assets of a game into a list.

    Args:
        game: The game to scan

    Returns:
        EncryptedFile entries for every matching regular file
    """
    return list(AssetScanner(game).iter_files())

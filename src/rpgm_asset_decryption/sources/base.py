"""Base abstractions for key sources.

A key source is one strategy for obtaining a title's encryption key. The
key chain tries sources in order: a found key ends the chain, a recoverable
miss moves on to the next source, and a fatal error aborts discovery.
"""

import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..core.errors import FallbackKeyNotFound, KeyDiscoveryError
from ..core.game import GameRoot
from ..core.types import EncryptionKey


class KeySource(ABC):
    """Abstract base class for all key sources.

    Implementations know one place or encoding the key can be recovered
    from. They must either return a key or raise a ``KeyDiscoveryError``
    whose ``recoverable`` flag tells the chain whether to continue.
    """

    name: str = "unknown"

    @abstractmethod
    def find_key(self, game: GameRoot) -> EncryptionKey:
        """Obtain the encryption key of a game.

        Args:
            game: The game to inspect

        Returns:
            The game's encryption key

        Raises:
            KeyDiscoveryError: If this source can't provide the key
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def resolve_key(
    game: GameRoot,
    sources: Iterable[KeySource],
    verbose: bool = False,
) -> tuple[EncryptionKey, KeySource]:
    """Try key sources in order until one provides the key.

    Args:
        game: The game to find the key for
        sources: Key sources, most trusted first
        verbose: Print each miss to stderr

    Returns:
        Tuple of (key, source that found it)

    Raises:
        KeyDiscoveryError: The first fatal error, or the last recoverable
            miss with every earlier miss in its ``attempts``
    """
    attempts: list[KeyDiscoveryError] = []

    for source in sources:
        try:
            return source.find_key(game), source
        except KeyDiscoveryError as e:
            e.attempts = attempts + e.attempts
            if not e.recoverable:
                raise
            if verbose:
                print(f"Warning: {source.name}: {e}", file=sys.stderr)
            attempts.append(e)

    if attempts:
        last = attempts[-1]
        last.attempts = attempts[:-1]
        raise last

    raise FallbackKeyNotFound("No key sources were configured")

"""Key source for a key supplied by the user."""

from ..core.game import GameRoot
from ..core.types import EncryptionKey
from .base import KeySource


class ExplicitKeySource(KeySource):
    """Return a fixed key, parsed when the source is created.

    Raises:
        KeyMalformed: If the hex string is not a valid key
    """

    name = "explicit"

    def __init__(self, raw_key: str):
        self.key = EncryptionKey.from_hex(raw_key)

    def find_key(self, game: GameRoot) -> EncryptionKey:
        return self.key

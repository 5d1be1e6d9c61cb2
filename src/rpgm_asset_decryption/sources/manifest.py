"""Key source reading ``data/System.json``.

System.json is usually plain JSON, but some titles save it with a UTF-8
byte order mark (nw.js doesn't mind) and some wrap the whole document in
lz-string as a thin layer of obscurity.
"""

import json
import sys
from collections.abc import Iterator
from typing import Any

from lzstring import LZString

from ..core.errors import KeyMalformed, KeyNotFound, ManifestMissing, ManifestUnreadable
from ..core.game import GameRoot
from ..core.types import EncryptionKey
from ..core.validator import validate_system_manifest_with_error_details
from .base import KeySource

UTF8_BOM = b"\xef\xbb\xbf"

KEY_FIELD = "encryptionKey"


def strip_bom(raw: bytes) -> bytes:
    """Remove a leading UTF-8 byte order mark, if any."""
    if raw.startswith(UTF8_BOM):
        return raw[len(UTF8_BOM):]
    return raw


def iter_lzstring_candidates(text: str) -> Iterator[str]:
    """Yield every non-empty lz-string decompression of a manifest.

    Both the base64 and URI-safe flavours are tried, since their alphabets
    overlap and one may decode the other's output into garbage.

    Args:
        text: Manifest text that failed to parse as JSON
    """
    compact = "".join(text.split())
    if not compact:
        return

    lz = LZString()
    for decompress in (lz.decompressFromBase64, lz.decompressFromEncodedURIComponent):
        try:
            result = decompress(compact)
        except (KeyError, IndexError, TypeError, ValueError):
            # Characters outside the flavour's alphabet
            continue
        if result:
            yield result.removeprefix("\ufeff")


def parse_manifest_text(text: str) -> Any:
    """Parse manifest text, falling back to lz-string decompression.

    Args:
        text: Decoded manifest text (BOM already removed)

    Returns:
        The parsed JSON document

    Raises:
        ManifestUnreadable: If neither plain nor decompressed text parses
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        plain_error = e

    for decompressed in iter_lzstring_candidates(text):
        try:
            return json.loads(decompressed)
        except json.JSONDecodeError:
            continue

    raise ManifestUnreadable(
        f"Manifest is neither JSON nor lz-string compressed JSON: {plain_error}"
    ) from plain_error


def key_from_document(document: Any) -> EncryptionKey:
    """Extract the encryption key from a parsed System.json.

    Args:
        document: The parsed JSON document

    Returns:
        The encryption key

    Raises:
        ManifestUnreadable: If the document isn't a JSON object
        KeyMalformed: If the key isn't a 32 character hex string
        KeyNotFound: If the key field is absent or empty
    """
    is_valid, error_msg, location = validate_system_manifest_with_error_details(document)
    if not is_valid:
        if location == KEY_FIELD:
            raise KeyMalformed(
                f"Found encryption key, but it can't be parsed into string ({error_msg})"
            )
        raise ManifestUnreadable(f"Manifest has an unexpected shape ({error_msg})")

    raw_key = document.get(KEY_FIELD)
    if not raw_key:
        raise KeyNotFound(
            "System.json does not contain an encryption key, maybe not encrypted?"
        )

    return EncryptionKey.from_hex(raw_key)


class ManifestKeySource(KeySource):
    """Read the key from the game's System.json.

    Example:
        >>> game = GameRoot.detect(Path('/games/SomeTitle'))
        >>> key = ManifestKeySource().find_key(game)
    """

    name = "manifest"

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def find_key(self, game: GameRoot) -> EncryptionKey:
        path = game.manifest_path

        if not path.is_file():
            raise ManifestMissing(f"System.json doesn't exist at {path}", path=path)

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ManifestUnreadable(f"Failed to read {path}: {e}", path=path) from e

        try:
            text = strip_bom(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ManifestUnreadable(f"{path} is not UTF-8 text: {e}", path=path) from e

        try:
            document = parse_manifest_text(text)
            if self.verbose and isinstance(document, dict):
                print(
                    f"hasEncryptedImages: {document.get('hasEncryptedImages', False)}, "
                    f"hasEncryptedAudio: {document.get('hasEncryptedAudio', False)}",
                    file=sys.stderr,
                )
            return key_from_document(document)
        except (KeyNotFound, KeyMalformed, ManifestUnreadable) as e:
            e.path = path
            raise

"""Frame decryption for encrypted RPG Maker assets.

An encrypted asset is framed as::

    [0, 16)   vendor signature and version, discarded
    [16, 32)  first 16 bytes of the original file XOR-ed with the key
    [32, end) rest of the original file, untouched

Because only 16 bytes of the original are obscured, the key-based path is
the primary one and the keyless header substitution is only offered for
kinds whose leading 16 bytes are fixed (PNG).
"""

from .errors import ErrorKind, HeaderTooShort, KeylessUnsupported, WrongKeyOrFormat
from .types import FRAME_LEN, SIGNATURE_LEN, STOCK_SIGNATURE, AssetKind, EncryptionKey


def _require_frame(data: bytes) -> None:
    if len(data) < FRAME_LEN:
        raise HeaderTooShort(
            f"Data is too small to be encrypted: {len(data)} bytes, "
            f"need at least {FRAME_LEN}"
        )


def xor_header(encrypted_part: bytes, key: EncryptionKey) -> bytes:
    """XOR the encrypted part of a frame with the key, byte for byte."""
    return bytes(b ^ k for b, k in zip(encrypted_part, key.value))


def decrypt_frame(data: bytes, key: EncryptionKey) -> bytes:
    """Reconstruct the original file bytes.

    Args:
        data: Whole content of the encrypted file
        key: The title's encryption key

    Returns:
        The original file content

    Raises:
        HeaderTooShort: If ``data`` is shorter than 32 bytes
    """
    _require_frame(data)
    return xor_header(data[SIGNATURE_LEN:FRAME_LEN], key) + data[FRAME_LEN:]


def decrypt_frame_keyless(data: bytes, kind: AssetKind) -> bytes:
    """Reconstruct the original file by substituting a known header.

    Args:
        data: Whole content of the encrypted file
        kind: Asset kind the file was classified as

    Returns:
        The original file content, assuming the kind's standard header

    Raises:
        HeaderTooShort: If ``data`` is shorter than 32 bytes
        KeylessUnsupported: If the kind has no fixed 16 byte header
    """
    _require_frame(data)
    if kind.keyless_header is None:
        raise KeylessUnsupported(
            f"{kind.target_extension} files have no fixed header, a key is required"
        )
    return kind.keyless_header + data[FRAME_LEN:]


def has_expected_magic(decrypted: bytes, kind: AssetKind) -> bool:
    end = kind.magic_offset + len(kind.magic)
    return decrypted[kind.magic_offset:end] == kind.magic


def verify_frame(data: bytes, decrypted: bytes, kind: AssetKind, strict: bool = False) -> list[str]:
    """Run the advisory checks on a decrypted frame.

    Args:
        data: The encrypted input
        decrypted: Output of :func:`decrypt_frame`
        kind: Asset kind the file was classified as
        strict: Raise instead of warning when the magic doesn't match

    Returns:
        Warning messages, empty if everything looks right

    Raises:
        WrongKeyOrFormat: On magic mismatch when ``strict`` is set
    """
    warnings: list[str] = []

    if data[:SIGNATURE_LEN] != STOCK_SIGNATURE:
        warnings.append(
            f"Non-stock signature header {data[:SIGNATURE_LEN].hex(' ')}"
        )

    if not has_expected_magic(decrypted, kind):
        end = kind.magic_offset + len(kind.magic)
        message = (
            f"{ErrorKind.WRONG_KEY_OR_FORMAT.value}: expected {kind.magic!r} at offset "
            f"{kind.magic_offset}, found {decrypted[kind.magic_offset:end]!r}"
        )
        if strict:
            raise WrongKeyOrFormat(message)
        warnings.append(message)

    return warnings

"""Tests for the data model."""

import threading
from pathlib import Path

import pytest

from rpgm_asset_decryption.core.errors import ErrorKind, KeyMalformed
from rpgm_asset_decryption.core.types import (
    AssetKind,
    BatchReport,
    EncryptionKey,
    JobOutcome,
    LayoutVariant,
)


class TestEncryptionKey:
    """Test key parsing."""

    def test_parses_hex(self) -> None:
        """Test that a 32 character hex string yields the 16 key bytes."""
        key = EncryptionKey.from_hex("bb145893824d809dcab45febae756d2b")
        assert key.value == bytes([
            187, 20, 88, 147, 130, 77, 128, 157,
            202, 180, 95, 235, 174, 117, 109, 43,
        ])

    def test_case_insensitive(self) -> None:
        lower = EncryptionKey.from_hex("bb145893824d809dcab45febae756d2b")
        upper = EncryptionKey.from_hex("BB145893824D809DCAB45FEBAE756D2B")
        assert lower == upper

    def test_ignores_surrounding_whitespace(self) -> None:
        key = EncryptionKey.from_hex("  000102030405060708090a0b0c0d0e0f\n")
        assert key.value == bytes(range(16))

    @pytest.mark.parametrize(
        "raw_key",
        [
            "",
            "wow",
            "000102030405060708090a0b0c0d0e",  # 30 characters
            "000102030405060708090a0b0c0d0e0",  # 31 characters, never padded
            "000102030405060708090a0b0c0d0e0f00",  # 34 characters, never truncated
        ],
    )
    def test_rejects_wrong_length(self, raw_key: str) -> None:
        """Test that keys of the wrong length are rejected, not fixed up."""
        with pytest.raises(KeyMalformed):
            EncryptionKey.from_hex(raw_key)

    def test_rejects_non_hex(self) -> None:
        with pytest.raises(KeyMalformed, match="not valid hex"):
            EncryptionKey.from_hex("zz0102030405060708090a0b0c0d0e0f")

    def test_rejects_wrong_byte_length(self) -> None:
        with pytest.raises(KeyMalformed):
            EncryptionKey(b"\x00" * 15)

    def test_malformed_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            EncryptionKey.from_hex("wow")

    def test_renders_as_lowercase_hex(self) -> None:
        key = EncryptionKey.from_hex("BB145893824D809DCAB45FEBAE756D2B")
        assert str(key) == "bb145893824d809dcab45febae756d2b"


class TestAssetKind:
    """Test the asset kind table."""

    @pytest.mark.parametrize(
        "layout,extension,expected",
        [
            (LayoutVariant.MV, ".rpgmvp", AssetKind.PNG_MV),
            (LayoutVariant.MV, ".rpgmvo", AssetKind.OGG_MV),
            (LayoutVariant.MV, ".rpgmvm", AssetKind.M4A_MV),
            (LayoutVariant.MZ, ".png_", AssetKind.PNG_MZ),
            (LayoutVariant.MZ, ".ogg_", AssetKind.OGG_MZ),
            (LayoutVariant.MZ, ".m4a_", AssetKind.M4A_MZ),
        ],
    )
    def test_lookup(self, layout: LayoutVariant, extension: str, expected: AssetKind) -> None:
        assert AssetKind.for_extension(layout, extension) is expected

    def test_lookup_ignores_case(self) -> None:
        assert AssetKind.for_extension(LayoutVariant.MV, ".RPGMVP") is AssetKind.PNG_MV

    def test_lookup_is_per_layout(self) -> None:
        """Test that one layout's extensions are not assets of the other."""
        assert AssetKind.for_extension(LayoutVariant.MV, ".png_") is None
        assert AssetKind.for_extension(LayoutVariant.MZ, ".rpgmvp") is None

    def test_unknown_extension(self) -> None:
        assert AssetKind.for_extension(LayoutVariant.MV, ".json") is None
        assert AssetKind.for_extension(LayoutVariant.MZ, "") is None

    def test_target_extensions(self) -> None:
        assert {k.target_extension for k in AssetKind.for_layout(LayoutVariant.MV)} == {
            ".png",
            ".ogg",
            ".m4a",
        }

    def test_only_png_has_keyless_header(self) -> None:
        assert [k for k in AssetKind if k.keyless_header is not None] == [
            AssetKind.PNG_MV,
            AssetKind.PNG_MZ,
        ]
        assert all(len(k.keyless_header) == 16 for k in AssetKind if k.keyless_header)


class TestBatchReport:
    """Test outcome aggregation."""

    def test_counts(self) -> None:
        report = BatchReport()
        report.record(JobOutcome.success(Path("a.rpgmvp"), Path("a.png"), 10, []))
        report.record(JobOutcome.failure(Path("b.rpgmvp"), ErrorKind.HEADER_TOO_SHORT, "short"))

        assert report.total == 2
        assert report.success_count == 1
        assert report.failure_count == 1
        assert not report.ok
        assert report.failures[0].error_kind is ErrorKind.HEADER_TOO_SHORT

    def test_empty_report_is_ok(self) -> None:
        assert BatchReport().ok

    def test_concurrent_records(self) -> None:
        """Test that appends from many threads are all kept."""
        report = BatchReport()

        def worker(n: int) -> None:
            for i in range(200):
                report.record(JobOutcome.success(Path(f"{n}-{i}"), Path("x"), 1, []))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert report.success_count == 1600

    def test_to_dict(self) -> None:
        report = BatchReport()
        report.record(JobOutcome.success(Path("a.rpgmvp"), Path("a.png"), 10, ["odd magic"]))
        report.record(JobOutcome.failure(Path("b.rpgmvp"), ErrorKind.IO_ERROR, "gone"))

        data = report.to_dict()

        assert data["total"] == 2
        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert data["failures"][0]["error"] == "IOError"
        assert data["warnings"] == ["a.rpgmvp: odd magic"]

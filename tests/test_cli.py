"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from helpers import OGG_BYTES, PNG_BYTES
from rpgm_asset_decryption.cli import EXIT_FATAL, EXIT_OK, EXIT_PARTIAL, build_parser, main


class TestMain:
    """Test exit codes and output streams."""

    def test_success(self, make_game, key, capsys: pytest.CaptureFixture[str]) -> None:
        game = make_game("MV")
        game.system_json()
        game.asset("img/pictures/a.rpgmvp", PNG_BYTES, key)

        assert main([str(game.root)]) == EXIT_OK

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Decrypted 1 of 1 assets" in captured.err
        assert "(from manifest)" in captured.err

    def test_partial_failure(self, make_game, key, capsys: pytest.CaptureFixture[str]) -> None:
        game = make_game("MV")
        game.system_json()
        game.asset("img/pictures/a.rpgmvp", PNG_BYTES, key)
        game.write("img/pictures/b.rpgmvp", b"tiny")

        assert main([str(game.root), "--quiet"]) == EXIT_PARTIAL

        err = capsys.readouterr().err
        assert "HeaderTooShort" in err
        assert "b.rpgmvp" in err

    def test_missing_game_directory(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "missing")]) == EXIT_FATAL
        assert "Error:" in capsys.readouterr().err

    def test_no_key_anywhere(self, make_game, key, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a game with no key source at all fails before writing."""
        game = make_game("MZ")
        game.asset("audio/bgm/a.ogg_", OGG_BYTES, key)

        assert main([str(game.root)]) == EXIT_FATAL

        err = capsys.readouterr().err
        assert "FallbackKeyNotFound" in err
        assert "also tried" in err
        assert not (game.root / "audio" / "bgm" / "a.ogg").exists()

    def test_malformed_key_argument(self, make_game, capsys: pytest.CaptureFixture[str]) -> None:
        game = make_game("MV")

        assert main([str(game.root), "--key", "wow"]) == EXIT_FATAL
        assert "KeyMalformed" in capsys.readouterr().err

    def test_explicit_key(self, make_game, key) -> None:
        game = make_game("MZ")
        game.asset("img/pictures/a.png_", PNG_BYTES, key)

        assert main([str(game.root), "--key", str(key), "-q"]) == EXIT_OK
        assert (game.root / "img" / "pictures" / "a.png").read_bytes() == PNG_BYTES

    def test_keyless(self, make_game, key) -> None:
        game = make_game("MZ")
        game.asset("img/pictures/a.png_", PNG_BYTES, key)

        assert main([str(game.root), "--keyless", "-q"]) == EXIT_OK
        assert (game.root / "img" / "pictures" / "a.png").read_bytes() == PNG_BYTES

    def test_strict(self, make_game, key) -> None:
        game = make_game("MV")
        game.system_json({"encryptionKey": "ffeeddccbbaa99887766554433221100"})
        game.asset("img/pictures/a.rpgmvp", PNG_BYTES, key)

        assert main([str(game.root), "-q"]) == EXIT_OK
        assert main([str(game.root), "-q", "--strict"]) == EXIT_PARTIAL

    def test_output_dir(self, make_game, key, tmp_path: Path) -> None:
        game = make_game("MV")
        game.system_json()
        game.asset("audio/bgm/a.rpgmvo", OGG_BYTES, key)
        out = tmp_path / "out"

        assert main([str(game.root), "-q", "-o", str(out)]) == EXIT_OK
        assert (out / "audio" / "bgm" / "a.ogg").read_bytes() == OGG_BYTES

    def test_json_report(self, make_game, key, capsys: pytest.CaptureFixture[str]) -> None:
        game = make_game("MV")
        game.system_json()
        game.asset("img/pictures/a.rpgmvp", PNG_BYTES, key)
        game.write("img/pictures/b.rpgmvp", b"tiny")

        assert main([str(game.root), "--json", "-q"]) == EXIT_PARTIAL

        report = json.loads(capsys.readouterr().out)
        assert report["total"] == 2
        assert report["succeeded"] == 1
        assert report["failed"] == 1
        assert report["failures"][0]["error"] == "HeaderTooShort"

    def test_invalid_worker_count(self, make_game, capsys: pytest.CaptureFixture[str]) -> None:
        game = make_game("MV")

        assert main([str(game.root), "--workers", "0"]) == EXIT_FATAL
        assert "--workers" in capsys.readouterr().err


class TestParser:
    """Test argument parsing."""

    def test_key_and_keyless_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["game", "--key", "00", "--keyless"])

    def test_defaults(self) -> None:
        args = build_parser().parse_args(["game"])
        assert args.game_dir == Path("game")
        assert args.key is None
        assert not args.keyless
        assert not args.strict
        assert args.output is None
        assert args.workers >= 1

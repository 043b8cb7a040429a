"""Tests for CLI argument parsing and commands."""

import json

import pytest

from g2pcrf.cli import main, parse_args


class TestParseArgs:
    def test_phonemise_defaults(self, monkeypatch):
        monkeypatch.delenv("G2PCRF_MODEL", raising=False)
        args = parse_args(["phonemise", "cat", "dog"])
        assert args.command == "phonemise"
        assert args.words == ["cat", "dog"]
        assert args.model is None
        assert args.alphabet == "ipa"
        assert args.pos is None
        assert args.fallback is None
        assert args.json is False
        assert args.verbose is False

    def test_phonemise_all_options(self):
        args = parse_args([
            "-v", "phonemise",
            "--model", "/tmp/model.json",
            "--alphabet", "xsampa",
            "--pos", "NN",
            "--fallback", "g2p_en",
            "--json",
            "cat",
        ])
        assert args.verbose is True
        assert args.model == "/tmp/model.json"
        assert args.alphabet == "xsampa"
        assert args.pos == "NN"
        assert args.fallback == "g2p_en"
        assert args.json is True

    def test_convert_defaults(self):
        args = parse_args(["convert", "AE", "K"])
        assert args.command == "convert"
        assert args.symbols == ["AE", "K"]
        assert args.source == "arpabet"
        assert args.target == "ipa"

    def test_no_command(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_bad_alphabet_choice(self):
        with pytest.raises(SystemExit):
            parse_args(["convert", "--target", "klingon", "AE"])


class TestMain:
    def test_phonemise(self, model_file, capsys):
        main(["phonemise", "--model", str(model_file), "cat", "camel"])
        out = capsys.readouterr().out
        assert out.splitlines() == ["cat\t' k æ t", "camel\t' k æ - m ɛ l"]

    def test_model_from_environment(self, model_file, monkeypatch, capsys):
        monkeypatch.setenv("G2PCRF_MODEL", str(model_file))
        main(["phonemise", "--alphabet", "arpabet", "x"])
        assert capsys.readouterr().out == "x\t' K S\n"

    def test_phonemise_json(self, model_file, capsys):
        main(["phonemise", "--model", str(model_file), "--json", "cat"])
        data = json.loads(capsys.readouterr().out)
        assert data["words"][0]["g2p_method"] == "crf"
        assert data["words"][0]["syllables"][0]["phonemes"] == ["k", "æ", "t"]

    def test_missing_model(self, monkeypatch, capsys):
        monkeypatch.delenv("G2PCRF_MODEL", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["phonemise", "cat"])
        assert exc_info.value.code == 1
        assert "no model given" in capsys.readouterr().err

    def test_decode_failure_exits(self, model_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["phonemise", "--model", str(model_file), "q"])
        assert exc_info.value.code == 1
        assert "Can't phonemise word 0 'q'" in capsys.readouterr().err

    def test_convert(self, capsys):
        main(["convert", "--target", "xsampa", "TH", "AE"])
        assert capsys.readouterr().out == "T\n{\n"

    def test_convert_unknown_symbol(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", "zz9"])
        assert exc_info.value.code == 1
        assert "Unknown arpabet symbol: 'zz9'" in capsys.readouterr().err

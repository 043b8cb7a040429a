"""Tests for core data types."""

import math

import pytest

from g2pcrf.types import (
    Annotation,
    DecodeResult,
    ParsedSyllable,
    Phoneme,
    Stress,
    Syllable,
    SyllableAssignment,
    Word,
)


def test_stress_marks():
    assert Stress.PRIMARY.mark == "'"
    assert Stress.SECONDARY.mark == ","
    assert Stress.NONE.mark == ""


def test_parsed_syllable_str():
    assert str(ParsedSyllable(("B", "AW", "T"), Stress.PRIMARY)) == "' B AW T"
    assert str(ParsedSyllable(("AH",))) == "AH"


def test_decode_result_confidence():
    result = DecodeResult(
        graphemes="ox",
        phonemes=("AA", "K", "S"),
        score=-1.0,
        log_partition=-1.0 + math.log(4),
        segments=((0, 1, "AA"), (1, 2, "K S")),
    )
    assert result.confidence == pytest.approx(0.25)
    assert result.alignment() == [("o", "AA"), ("x", "K S")]


class TestSyllableAssignment:
    def test_split(self):
        assignment = SyllableAssignment((True, False, True), (Stress.NONE, Stress.PRIMARY))
        assert assignment.split(["AH", "B", "AW"]) == [
            ParsedSyllable(("AH", "B")),
            ParsedSyllable(("AW",), Stress.PRIMARY),
        ]

    def test_first_phoneme_starts_a_syllable(self):
        with pytest.raises(ValueError, match="first phoneme"):
            SyllableAssignment((False, True), (Stress.NONE,))

    def test_stress_count_must_match(self):
        with pytest.raises(ValueError, match="stress values"):
            SyllableAssignment((True, True), (Stress.NONE,))

    def test_split_length_mismatch(self):
        assignment = SyllableAssignment((True,), (Stress.NONE,))
        with pytest.raises(ValueError, match="same length"):
            assignment.split(["K", "AE"])


class TestAnnotation:
    @pytest.fixture
    def annotation(self):
        # "the cat": DH AH | ' K AE T
        return Annotation(
            words=(Word("the"), Word("cat", g2p_method="crf")),
            phonemes=tuple(Phoneme(p) for p in ["ð", "ʌ", "k", "æ", "t"]),
            syllables=(Syllable(), Syllable(Stress.PRIMARY, accent="H*")),
            word_phonemes=((0, 0), (0, 1), (1, 2), (1, 3), (1, 4)),
            syllable_phonemes=((0, 0), (0, 1), (1, 2), (1, 3), (1, 4)),
        )

    def test_indices(self, annotation):
        assert annotation.phoneme_indices_of_word(1) == [2, 3, 4]
        assert annotation.phoneme_indices_of_syllable(0) == [0, 1]
        assert annotation.syllable_indices_of_word(1) == [1]

    def test_word_without_phonemes(self, annotation):
        assert annotation.syllable_indices_of_word(5) == []

    def test_to_dict(self, annotation):
        d = annotation.to_dict()
        assert d["words"][1] == {
            "text": "cat",
            "pos": None,
            "g2p_method": "crf",
            "syllables": [{"phonemes": ["k", "æ", "t"], "stress": 1, "accent": "H*"}],
        }
        assert d["word_phonemes"][0] == [0, 0]

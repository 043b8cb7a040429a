"""Tests for sonority and phone classes."""

from g2pcrf.phonology import (
    CONSONANT,
    VOWEL,
    is_vowel,
    phone_class,
    sonority,
    strip_stress,
    stress_digit,
)


class TestStress:
    def test_strip_stress(self):
        assert strip_stress("AH0") == "AH"
        assert strip_stress("EY1") == "EY"
        assert strip_stress("K") == "K"
        assert strip_stress("") == ""

    def test_stress_digit(self):
        assert stress_digit("AE1") == 1
        assert stress_digit("IH2") == 2
        assert stress_digit("AH0") == 0
        assert stress_digit("T") is None


class TestSonority:
    def test_arpabet_scale(self):
        assert sonority("T") < sonority("CH") < sonority("S") < sonority("N")
        assert sonority("N") < sonority("L") < sonority("W") < sonority("AA")

    def test_stressed_vowel(self):
        assert sonority("AH0") == 7

    def test_syllabic_consonants_are_nuclei(self):
        assert is_vowel("EN")
        assert is_vowel("n̩")

    def test_ipa_labels(self):
        assert sonority("p") == 1
        assert sonority("tʃ") == 2
        assert sonority("ʃ") == 3
        assert sonority("ŋ") == 4
        assert sonority("ɹ") == 5
        assert sonority("j") == 6
        assert sonority("aɪ") == 7

    def test_unknown(self):
        assert sonority("ZZ") == 0
        assert sonority("") == 0


def test_phone_class():
    assert phone_class("AE") == VOWEL
    assert phone_class("K") == CONSONANT
    assert phone_class("ɛ") == VOWEL
    assert phone_class("m") == CONSONANT

"""Sonority and vowel/consonant classes for ARPABET and IPA labels."""

# Sonority scale for ARPABET phonemes (higher = more sonorous)
_SONORITY = {}

# 1: Stops
for p in ("P", "B", "T", "D", "K", "G", "Q", "DX"):
    _SONORITY[p] = 1

# 2: Affricates
for p in ("CH", "JH"):
    _SONORITY[p] = 2

# 3: Fricatives
for p in ("F", "V", "TH", "DH", "S", "Z", "SH", "ZH", "HH"):
    _SONORITY[p] = 3

# 4: Nasals
for p in ("M", "N", "NG"):
    _SONORITY[p] = 4

# 5: Liquids
for p in ("L", "R"):
    _SONORITY[p] = 5

# 6: Glides
for p in ("W", "Y", "WH"):
    _SONORITY[p] = 6

# Syllabic consonants act as nuclei
for p in ("EM", "EN", "EL"):
    _SONORITY[p] = 7

_ARPABET_VOWELS = frozenset((
    "AA", "AE", "AH", "AO", "AW", "AX", "AXR", "AY",
    "EH", "ER", "EY", "IH", "IX", "IY",
    "OW", "OY", "UH", "UW", "UX",
))

_IPA_VOWELS = set("aeiouɪɛæɑɒɔʊəɜɐʌɝɚɨʉ")
_IPA_STOPS = set("pbtdkgɡʔɾ")
_IPA_NASALS = set("mnɲŋɴ")
_IPA_FRICATIVES = set("fvθðszʃʒçxɣhɦ")
_IPA_LATERALS = set("lɫɬɮ")
_IPA_RHOTICS = {"r", "ɹ", "ʁ", "ʀ"}
_IPA_GLIDES = {"j", "w", "ɥ", "ʍ"}
_SYLLABIC_MARK = "̩"

VOWEL = "V"
CONSONANT = "C"


def strip_stress(phoneme: str) -> str:
    """Remove trailing stress marker (0, 1, 2) from an ARPABET phoneme."""
    if phoneme and phoneme[-1] in "012":
        return phoneme[:-1]
    return phoneme


def stress_digit(phoneme: str) -> int | None:
    """Return the ARPABET stress digit of a phoneme, or None."""
    if phoneme and phoneme[-1] in "012":
        return int(phoneme[-1])
    return None


def _is_ipa(label: str) -> bool:
    """Heuristic: IPA labels use lowercase/Unicode, ARPABET uses uppercase ASCII."""
    if not label:
        return False
    return label[0].islower() or not label[0].isascii()


def _ipa_sonority(label: str) -> int:
    if _SYLLABIC_MARK in label:
        return 7
    if label[0] in _IPA_VOWELS or label.rstrip("ːˑ") in _IPA_VOWELS:
        return 7
    if label[0] in _IPA_GLIDES:
        return 6
    if label[0] in _IPA_RHOTICS or label[0] in _IPA_LATERALS:
        return 5
    if label[0] in _IPA_NASALS:
        return 4
    if label[0] in _IPA_FRICATIVES:
        return 3
    if len(label) > 1 and label[1] in "ʃʒ":
        return 2
    if label[0] in _IPA_STOPS:
        return 1
    return 0


def sonority(label: str) -> int:
    """Return sonority value for a phoneme label (ARPABET or IPA).

    Strips stress digits for ARPABET (e.g. 'AH0' -> vowel). Returns 0 for unknown.
    """
    if not label:
        return 0
    if _is_ipa(label):
        return _ipa_sonority(label)

    base = strip_stress(label)
    if base in _SONORITY:
        return _SONORITY[base]
    if label != base or base in _ARPABET_VOWELS:
        return 7
    return 0


def is_vowel(label: str) -> bool:
    """True for syllable nuclei: vowels and syllabic consonants."""
    return sonority(label) == 7


def phone_class(label: str) -> str:
    """Return VOWEL ('V') or CONSONANT ('C') for a phoneme label."""
    return VOWEL if is_vowel(label) else CONSONANT

"""Phonetic alphabet conversion: ARPABET, IPA and X-SAMPA.

IPA is the pivot: every other alphabet maps each of its symbols to exactly
one IPA symbol, and the canonical tables are injective so conversions
round-trip. Common non-canonical IPA spellings are folded onto the canonical
symbols only by :func:`normalize_ipa`, which callers opt into.
"""

from g2pcrf.errors import UnknownSymbolError

# ARPABET (CMU inventory plus the TIMIT extensions) to IPA.
ARPABET_TO_IPA: dict[str, str] = {
    # Vowels
    "AA":  "ɑ",
    "AE":  "æ",
    "AH":  "ʌ",
    "AO":  "ɔ",
    "AX":  "ə",
    "AXR": "ɚ",
    "EH":  "ɛ",
    "ER":  "ɝ",
    "IH":  "ɪ",
    "IX":  "ɨ",
    "IY":  "i",
    "UH":  "ʊ",
    "UW":  "u",
    "UX":  "ʉ",
    # Diphthongs
    "AW":  "aʊ",
    "AY":  "aɪ",
    "EY":  "eɪ",
    "OW":  "oʊ",
    "OY":  "ɔɪ",
    # Stops
    "P":   "p",
    "B":   "b",
    "T":   "t",
    "D":   "d",
    "K":   "k",
    "G":   "ɡ",
    "Q":   "ʔ",
    "DX":  "ɾ",
    # Affricates
    "CH":  "tʃ",
    "JH":  "dʒ",
    # Fricatives
    "F":   "f",
    "V":   "v",
    "TH":  "θ",
    "DH":  "ð",
    "S":   "s",
    "Z":   "z",
    "SH":  "ʃ",
    "ZH":  "ʒ",
    "HH":  "h",
    # Nasals
    "M":   "m",
    "N":   "n",
    "NG":  "ŋ",
    "EM":  "m̩",
    "EN":  "n̩",
    # Liquids and glides
    "L":   "l",
    "EL":  "l̩",
    "R":   "ɹ",
    "W":   "w",
    "WH":  "ʍ",
    "Y":   "j",
}

# IPA to X-SAMPA for every IPA symbol reachable from ARPABET.
IPA_TO_XSAMPA: dict[str, str] = {
    "ɑ":  "A",
    "æ":  "{",
    "ʌ":  "V",
    "ɔ":  "O",
    "ə":  "@",
    "ɚ":  "@`",
    "ɛ":  "E",
    "ɝ":  "3`",
    "ɪ":  "I",
    "ɨ":  "1",
    "i":  "i",
    "ʊ":  "U",
    "u":  "u",
    "ʉ":  "}",
    "aʊ": "aU",
    "aɪ": "aI",
    "eɪ": "eI",
    "oʊ": "oU",
    "ɔɪ": "OI",
    "p":  "p",
    "b":  "b",
    "t":  "t",
    "d":  "d",
    "k":  "k",
    "ɡ":  "g",
    "ʔ":  "?",
    "ɾ":  "4",
    "tʃ": "tS",
    "dʒ": "dZ",
    "f":  "f",
    "v":  "v",
    "θ":  "T",
    "ð":  "D",
    "s":  "s",
    "z":  "z",
    "ʃ":  "S",
    "ʒ":  "Z",
    "h":  "h",
    "m":  "m",
    "n":  "n",
    "ŋ":  "N",
    "m̩":  "m=",
    "n̩":  "n=",
    "l":  "l",
    "l̩":  "l=",
    "ɹ":  "r\\",
    "w":  "w",
    "ʍ":  "W",
    "j":  "j",
}

# Non-canonical IPA spellings folded by normalize_ipa().
IPA_ALIASES: dict[str, str] = {
    "g":  "ɡ",
    "r":  "ɹ",
    "ɐ":  "ʌ",
    "ɜ":  "ɝ",
    "ɒ":  "ɑ",
    "a":  "ɑ",
    "e":  "eɪ",
    "o":  "oʊ",
    "ɫ":  "l",
    "ɦ":  "h",
    "ʧ":  "tʃ",
    "ʤ":  "dʒ",
}

IPA = "ipa"

# alphabet name -> symbol -> IPA
_TO_IPA: dict[str, dict[str, str]] = {
    "arpabet": ARPABET_TO_IPA,
    "xsampa": {x: ipa for ipa, x in IPA_TO_XSAMPA.items()},
}

# alphabet name -> IPA -> symbol
_FROM_IPA: dict[str, dict[str, str]] = {
    name: {ipa: symbol for symbol, ipa in table.items()}
    for name, table in _TO_IPA.items()
}

_IPA_SYMBOLS = frozenset(ARPABET_TO_IPA.values()) | frozenset(IPA_TO_XSAMPA)

ALPHABETS = (*_TO_IPA, IPA)


def _check_alphabet(name: str) -> str:
    key = name.lower()
    if key not in ALPHABETS:
        raise ValueError(f"Unknown alphabet: {name!r}. Available: {list(ALPHABETS)}")
    return key


def symbols(alphabet: str) -> list[str]:
    """Return the canonical symbol inventory of an alphabet, sorted."""
    key = _check_alphabet(alphabet)
    if key == IPA:
        return sorted(_IPA_SYMBOLS)
    return sorted(_TO_IPA[key])


def _to_ipa(symbol: str, source: str) -> str:
    if source == IPA:
        if symbol in _IPA_SYMBOLS:
            return symbol
        raise UnknownSymbolError(symbol, source)
    try:
        return _TO_IPA[source][symbol]
    except KeyError:
        raise UnknownSymbolError(symbol, source) from None


def normalize_ipa(symbol: str) -> str:
    """Map a common non-canonical IPA spelling to its canonical symbol.

    Canonical symbols and unknown symbols pass through unchanged, so the
    result may still be rejected by :func:`convert_alphabet`.
    """
    return IPA_ALIASES.get(symbol, symbol)


def convert_alphabet(symbol: str, source: str, target: str) -> str:
    """Translate one phoneme symbol between alphabets.

    Raises:
        UnknownSymbolError: if the symbol is not in the source alphabet, or
            its IPA value has no counterpart in the target alphabet.
        ValueError: if either alphabet name is unknown.
    """
    source = _check_alphabet(source)
    target = _check_alphabet(target)

    ipa = _to_ipa(symbol, source)
    if target == IPA:
        return ipa
    try:
        return _FROM_IPA[target][ipa]
    except KeyError:
        raise UnknownSymbolError(
            symbol, source, detail=f"no {target} mapping for /{ipa}/",
        ) from None


def arpabet_to_ipa(symbol: str) -> str:
    return convert_alphabet(symbol, "arpabet", IPA)


def ipa_to_arpabet(symbol: str) -> str:
    return convert_alphabet(symbol, IPA, "arpabet")

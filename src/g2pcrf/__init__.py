"""g2pcrf: grapheme-to-phoneme conversion with conditional random fields."""

from g2pcrf.alphabet import ALPHABETS, convert_alphabet, normalize_ipa
from g2pcrf.decoder import decode_phonemes
from g2pcrf.errors import (
    DecodeFailureError,
    G2PError,
    InvalidInputError,
    LoadError,
    NotReadyError,
    UnknownSymbolError,
)
from g2pcrf.model import G2PModel, load_model
from g2pcrf.pipeline import CRFPhonemiser
from g2pcrf.syllabify import decode_syllables
from g2pcrf.types import (
    Annotation,
    DecodeResult,
    Phoneme,
    Phonemisation,
    Stress,
    Syllable,
    SyllableAssignment,
    Word,
)

__version__ = "0.1.0"

__all__ = [
    "ALPHABETS",
    "Annotation",
    "CRFPhonemiser",
    "DecodeFailureError",
    "DecodeResult",
    "G2PError",
    "G2PModel",
    "InvalidInputError",
    "LoadError",
    "NotReadyError",
    "Phoneme",
    "Phonemisation",
    "Stress",
    "Syllable",
    "SyllableAssignment",
    "UnknownSymbolError",
    "Word",
    "convert_alphabet",
    "decode_phonemes",
    "decode_syllables",
    "load_model",
    "normalize_ipa",
]

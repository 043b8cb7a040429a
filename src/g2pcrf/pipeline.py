"""Phonemiser module: words of an utterance -> phonemes, syllables, alignments.

Wraps the CRF decoder and syllabifier for a TTS front end: decides which
words are pronounceable from their text and part-of-speech tag, honours
"sounds like" and transcription overrides, splits multi-part words, and
builds the word -> syllable -> phoneme hierarchy.
"""

import logging
import re
from pathlib import Path
from typing import Mapping, Sequence

from g2pcrf.alphabet import ALPHABETS, convert_alphabet
from g2pcrf.assembler import AnnotationBuilder, parse_transcription
from g2pcrf.decoder import decode_phonemes
from g2pcrf.errors import (
    DecodeFailureError,
    G2PError,
    InvalidInputError,
    NotReadyError,
    UnknownSymbolError,
)
from g2pcrf.model import G2PModel, load_model
from g2pcrf.phonology import is_vowel, strip_stress, stress_digit
from g2pcrf.syllabify import decode_syllables
from g2pcrf.types import Annotation, Phonemisation, Stress, SyllableAssignment, Word

logger = logging.getLogger(__name__)

DEFAULT_PUNCTUATION_POS = r"\$PUNCT"
DEFAULT_UNPRONOUNCEABLE_POS = r"^[^a-zA-Z]+$"

FALLBACKS = ("g2p_en",)

# Parts of a multi-part word ("sounds like" overrides, hyphenated compounds)
_PART_SPLIT = re.compile(r"[ \-]+")
_WORD_CHAR = re.compile(r"\w", re.ASCII)

_DIGIT_STRESS = {0: Stress.NONE, 1: Stress.PRIMARY, 2: Stress.SECONDARY}


def _overlay_lexical_stress(
    assignment: SyllableAssignment,
    phonemes: list[str],
) -> SyllableAssignment:
    """Replace predicted stress with the stress digits carried by ``phonemes``."""
    stresses = list(assignment.stresses)
    syllable = -1
    for phoneme, starts in zip(phonemes, assignment.boundaries):
        if starts:
            syllable += 1
        digit = stress_digit(phoneme)
        if digit is not None and is_vowel(phoneme):
            stresses[syllable] = _DIGIT_STRESS[digit]
    return SyllableAssignment(boundaries=assignment.boundaries, stresses=tuple(stresses))


class CRFPhonemiser:
    """Phonemise the words of an utterance with a CRF model.

    Args:
        punctuation_pos_regex: POS tags (full match) marking punctuation.
        unpronounceable_pos_regex: POS tags (full match) marking tokens that
            are never pronounced.
        alphabet: Output phoneme alphabet ("ipa", "arpabet", "xsampa").
        fallback: Phonemiser to try when the CRF finds no path ("g2p_en"),
            or None to let DecodeFailureError propagate.
    """

    def __init__(
        self,
        punctuation_pos_regex: str = DEFAULT_PUNCTUATION_POS,
        unpronounceable_pos_regex: str = DEFAULT_UNPRONOUNCEABLE_POS,
        alphabet: str = "ipa",
        fallback: str | None = None,
    ):
        try:
            self.punctuation_pos_regex = re.compile(punctuation_pos_regex)
            self.unpronounceable_pos_regex = re.compile(unpronounceable_pos_regex)
        except re.error as e:
            raise ValueError(f"Invalid POS regex: {e}") from e
        if alphabet not in ALPHABETS:
            raise ValueError(f"Unknown alphabet: {alphabet!r}. Available: {list(ALPHABETS)}")
        if fallback is not None and fallback not in FALLBACKS:
            raise ValueError(f"Unknown fallback: {fallback!r}. Available: {list(FALLBACKS)}")
        self.alphabet = alphabet
        self.fallback = fallback
        self.model: G2PModel | None = None

    # --- Lifecycle ---

    @property
    def ready(self) -> bool:
        return self.model is not None

    def startup(self, model_source: str | Path | Mapping | G2PModel) -> None:
        """Load the model. Must complete before any phonemisation.

        Raises:
            LoadError: if the model cannot be loaded.
        """
        if isinstance(model_source, G2PModel):
            self.model = model_source
        else:
            self.model = load_model(model_source)
        logger.info(f"Phonemiser ready with model {self.model.name!r} (output: {self.alphabet})")

    def check_startup(self) -> None:
        if self.model is None:
            raise NotReadyError("Phonemiser used before startup(); no model loaded")

    def check_input(self, words) -> None:
        """Check that ``words`` is a word sequence this module can process."""
        if words is None or isinstance(words, (str, bytes)) or not isinstance(words, Sequence):
            raise InvalidInputError("Word sequence is missing")
        for i, w in enumerate(words):
            if not isinstance(w, Word):
                raise InvalidInputError(f"Item {i} of the word sequence is not a Word: {w!r}")

    # --- Pronounceability ---

    def is_pos_punctuation(self, pos: str | None) -> bool:
        return pos is not None and self.punctuation_pos_regex.fullmatch(pos) is not None

    def is_unpronounceable(self, pos: str | None) -> bool:
        return pos is not None and self.unpronounceable_pos_regex.fullmatch(pos) is not None

    def maybe_pronounceable(self, text: str | None, pos: str | None) -> bool:
        """Whether a token should be pronounced, based on text and POS tag.

        False for empty text, or for text without word characters whose POS
        tag marks punctuation or an unpronounceable token; True otherwise.
        """
        if not text:
            return False
        if _WORD_CHAR.search(text):
            return True
        if self.is_pos_punctuation(pos):
            return False
        if self.is_unpronounceable(pos):
            return False
        return True

    # --- Phonemisation ---

    def _fallback(self, text: str) -> tuple[list[str], SyllableAssignment]:
        from g2pcrf.fallback import g2p_en_phonemes

        # g2p_en speaks ARPABET; the syllabifier wants the model's alphabet
        lexical = g2p_en_phonemes(text)
        phonemes = [
            convert_alphabet(strip_stress(p), "arpabet", self.model.alphabet)
            for p in lexical
        ]
        assignment = decode_syllables(self.model, phonemes)
        return phonemes, _overlay_lexical_stress(assignment, lexical)

    def phonemise(self, text: str, pos: str | None = None) -> Phonemisation:
        """Transcribe one graphemic word part.

        Raises:
            NotReadyError: before startup().
            InvalidInputError: if ``text`` has no word characters.
            DecodeFailureError: if neither the CRF nor the fallback succeeds.
        """
        self.check_startup()
        if not text or not _WORD_CHAR.search(text):
            raise InvalidInputError(f"Nothing to pronounce in {text!r}")

        try:
            result = decode_phonemes(self.model, text.lower())
            phonemes = list(result.phonemes)
            assignment = decode_syllables(self.model, phonemes)
            method = "crf"
        except DecodeFailureError as e:
            if self.fallback is None:
                raise
            logger.warning(f"CRF failed for {text!r} ({e}); falling back to {self.fallback}")
            phonemes, assignment = self._fallback(text)
            result = None
            method = self.fallback

        return Phonemisation(
            text=text,
            transcription=assignment.transcription(phonemes),
            method=method,
            decode=result,
        )

    def _transcribe_word(self, word: Word):
        """Return (parts, method) for a word, or None if it is not pronounced."""
        if word.transcription:
            return [parse_transcription(word.transcription)], "transcription"

        text = word.sounds_like if word.sounds_like is not None else word.text
        if not self.maybe_pronounceable(text, word.pos):
            return None

        # Each part of a multi-part text is transcribed separately
        parts = []
        methods: list[str] = []
        for graph in _PART_SPLIT.split(text):
            if not graph:
                continue
            phonemisation = self.phonemise(graph, word.pos)
            parts.append(parse_transcription(phonemisation.transcription))
            if phonemisation.method not in methods:
                methods.append(phonemisation.method)

        if not parts:
            return None
        return parts, "+".join(methods)

    def process(self, words: Sequence[Word]) -> Annotation:
        """Phonemise every word and build the utterance annotation.

        Sets ``g2p_method`` on each pronounced word. Fails as a whole if any
        word fails; the error names the word.
        """
        self.check_startup()
        self.check_input(words)

        builder = AnnotationBuilder(self.model.alphabet, self.alphabet)
        methods: dict[int, str] = {}
        for i, word in enumerate(words):
            try:
                transcribed = self._transcribe_word(word)
                if transcribed is None:
                    logger.debug(f"Skipping unpronounceable token {word.text!r} ({word.pos})")
                    continue
                parts, method = transcribed
                builder.add_word(i, word, parts)
            except UnknownSymbolError as e:
                detail = f"can't phonemise word {i} {word.text!r}"
                if e.detail:
                    detail = f"{e.detail}; {detail}"
                raise UnknownSymbolError(e.symbol, e.alphabet, detail=detail) from e
            except G2PError as e:
                raise type(e)(f"Can't phonemise word {i} {word.text!r}: {e}") from e
            methods[i] = method

        for i, method in methods.items():
            words[i].g2p_method = method
        annotation = builder.build(words)
        logger.debug(
            f"Phonemised {len(words)} words: {len(annotation.syllables)} syllables, "
            f"{len(annotation.phonemes)} phonemes"
        )
        return annotation

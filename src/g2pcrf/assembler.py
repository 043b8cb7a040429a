"""Build the word -> syllable -> phoneme hierarchy from transcriptions.

Transcriptions are stress-annotated strings: syllables separated by ``-``,
phonemes by whitespace, ``'`` marks primary and ``,`` secondary stress
(the mark may be glued to the following phoneme)::

    AH - ' B AW T
    ,K AA - N V ER - ' S EY - SH AH N
"""

import logging
import re
from enum import Enum, auto
from typing import Sequence

from g2pcrf.alphabet import convert_alphabet, normalize_ipa
from g2pcrf.errors import InvalidInputError, UnknownSymbolError
from g2pcrf.phonology import strip_stress
from g2pcrf.types import (
    PRIMARY_MARK,
    SECONDARY_MARK,
    SYLLABLE_SEP,
    Annotation,
    ParsedSyllable,
    Phoneme,
    Stress,
    Syllable,
    Word,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(
    rf"[{re.escape(PRIMARY_MARK + SECONDARY_MARK + SYLLABLE_SEP)}]"
    rf"|[^\s{re.escape(PRIMARY_MARK + SECONDARY_MARK + SYLLABLE_SEP)}]+"
)


class _State(Enum):
    DEFAULT = auto()
    SAW_FIRST_STRESS = auto()
    SAW_SECOND_STRESS = auto()


class _Event(Enum):
    PRIMARY = auto()
    SECONDARY = auto()
    PHONE = auto()
    BOUNDARY = auto()


# (state, event) -> next state. Pairs not listed are malformed input.
_TRANSITIONS = {
    (_State.DEFAULT, _Event.PRIMARY): _State.SAW_FIRST_STRESS,
    (_State.DEFAULT, _Event.SECONDARY): _State.SAW_SECOND_STRESS,
    (_State.DEFAULT, _Event.PHONE): _State.DEFAULT,
    (_State.DEFAULT, _Event.BOUNDARY): _State.DEFAULT,
    (_State.SAW_FIRST_STRESS, _Event.PRIMARY): _State.SAW_FIRST_STRESS,
    (_State.SAW_FIRST_STRESS, _Event.PHONE): _State.SAW_FIRST_STRESS,
    (_State.SAW_FIRST_STRESS, _Event.BOUNDARY): _State.DEFAULT,
    (_State.SAW_SECOND_STRESS, _Event.SECONDARY): _State.SAW_SECOND_STRESS,
    (_State.SAW_SECOND_STRESS, _Event.PHONE): _State.SAW_SECOND_STRESS,
    (_State.SAW_SECOND_STRESS, _Event.BOUNDARY): _State.DEFAULT,
}

_STATE_STRESS = {
    _State.DEFAULT: Stress.NONE,
    _State.SAW_FIRST_STRESS: Stress.PRIMARY,
    _State.SAW_SECOND_STRESS: Stress.SECONDARY,
}


def _event(token: str) -> _Event:
    if token == PRIMARY_MARK:
        return _Event.PRIMARY
    if token == SECONDARY_MARK:
        return _Event.SECONDARY
    if token == SYLLABLE_SEP:
        return _Event.BOUNDARY
    return _Event.PHONE


def parse_transcription(text: str) -> list[ParsedSyllable]:
    """Parse a stress-annotated transcription into syllables.

    Raises:
        InvalidInputError: for an empty transcription, an empty syllable, or
            conflicting stress marks within one syllable.
    """
    if not text or not text.strip():
        raise InvalidInputError("Empty transcription")

    syllables: list[ParsedSyllable] = []
    state = _State.DEFAULT
    phones: list[str] = []

    # End of input closes the last syllable like a boundary
    for token in [*_TOKEN_RE.findall(text), SYLLABLE_SEP]:
        event = _event(token)
        next_state = _TRANSITIONS.get((state, event))
        if next_state is None:
            raise InvalidInputError(
                f"Conflicting stress marks in syllable {len(syllables) + 1} of {text!r}"
            )

        if event is _Event.PHONE:
            phones.append(token)
        elif event is _Event.BOUNDARY:
            if not phones:
                raise InvalidInputError(
                    f"Empty syllable {len(syllables) + 1} in transcription {text!r}"
                )
            syllables.append(ParsedSyllable(tuple(phones), _STATE_STRESS[state]))
            phones = []

        state = next_state

    return syllables


class AnnotationBuilder:
    """Accumulates words into one utterance-level Annotation.

    Phoneme and syllable indices are global to the utterance and contiguous
    per word, in the order words are added.
    """

    def __init__(self, source_alphabet: str = "arpabet", target_alphabet: str = "ipa"):
        self.source_alphabet = source_alphabet
        self.target_alphabet = target_alphabet
        self.phonemes: list[Phoneme] = []
        self.syllables: list[Syllable] = []
        self.word_phonemes: list[tuple[int, int]] = []
        self.syllable_phonemes: list[tuple[int, int]] = []

    def _convert(self, symbol: str, word: Word) -> str:
        if self.source_alphabet == "arpabet":
            symbol = strip_stress(symbol)
        elif self.source_alphabet == "ipa":
            symbol = normalize_ipa(symbol)
        try:
            return convert_alphabet(symbol, self.source_alphabet, self.target_alphabet)
        except UnknownSymbolError:
            logger.error(
                f"No {self.target_alphabet} mapping for {self.source_alphabet} "
                f"symbol {symbol!r} (word {word.text!r})"
            )
            raise

    def add_word(
        self,
        word_index: int,
        word: Word,
        parts: Sequence[Sequence[ParsedSyllable]],
    ) -> None:
        """Append the syllables of one word.

        ``parts`` holds one syllable list per independently phonemised part
        of the word. The word's accent goes to its first primary-stressed
        syllable and to no other.
        """
        # Convert everything first so a failure leaves the builder untouched
        converted = [
            (syl.stress, [self._convert(p, word) for p in syl.phonemes])
            for part in parts
            for syl in part
        ]

        accent = word.accent
        for stress, labels in converted:
            logger.debug(f"Dealing with {word.text!r}: {stress.name} {' '.join(labels)}")
            syllable_accent = None
            if accent is not None and stress is Stress.PRIMARY:
                syllable_accent, accent = accent, None
            self.syllables.append(Syllable(stress=stress, accent=syllable_accent))
            syllable_index = len(self.syllables) - 1

            for label in labels:
                self.phonemes.append(Phoneme(label))
                phone_index = len(self.phonemes) - 1
                self.syllable_phonemes.append((syllable_index, phone_index))
                self.word_phonemes.append((word_index, phone_index))

    def build(self, words: Sequence[Word]) -> Annotation:
        return Annotation(
            words=tuple(words),
            phonemes=tuple(self.phonemes),
            syllables=tuple(self.syllables),
            word_phonemes=tuple(self.word_phonemes),
            syllable_phonemes=tuple(self.syllable_phonemes),
        )

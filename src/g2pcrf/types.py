"""Core data types for g2pcrf."""

import math
from dataclasses import dataclass
from enum import IntEnum

PRIMARY_MARK = "'"
SECONDARY_MARK = ","
SYLLABLE_SEP = "-"


class Stress(IntEnum):
    NONE = 0
    PRIMARY = 1
    SECONDARY = 2

    @property
    def mark(self) -> str:
        """Transcription mark for this stress level ('' for none)."""
        return {Stress.PRIMARY: PRIMARY_MARK, Stress.SECONDARY: SECONDARY_MARK}.get(self, "")


@dataclass(frozen=True)
class DecodeResult:
    """Best phoneme sequence for one grapheme sequence."""
    graphemes: str
    phonemes: tuple[str, ...]       # decoder-native symbols, never empty
    score: float                    # Viterbi path score
    log_partition: float            # log-sum of all path scores
    segments: tuple[tuple[int, int, str], ...] = ()   # (start, end, label) per grapheme chunk

    @property
    def confidence(self) -> float:
        """Posterior probability of the best path."""
        return math.exp(self.score - self.log_partition)

    def alignment(self) -> list[tuple[str, str]]:
        """(grapheme chunk, label) pairs of the best path."""
        return [(self.graphemes[i:j], label) for i, j, label in self.segments]


@dataclass(frozen=True)
class ParsedSyllable:
    """One syllable of a stress-annotated transcription."""
    phonemes: tuple[str, ...]
    stress: Stress = Stress.NONE

    def __str__(self) -> str:
        tokens = list(self.phonemes)
        if self.stress.mark:
            tokens.insert(0, self.stress.mark)
        return " ".join(tokens)


@dataclass(frozen=True)
class SyllableAssignment:
    """Syllable boundaries and stress for a phoneme sequence.

    ``boundaries`` has one flag per phoneme, True where a syllable starts
    (the first flag is always True). ``stresses`` has one entry per syllable.
    """
    boundaries: tuple[bool, ...]
    stresses: tuple[Stress, ...]

    def __post_init__(self):
        if not self.boundaries or not self.boundaries[0]:
            raise ValueError("first phoneme must start a syllable")
        if sum(self.boundaries) != len(self.stresses):
            raise ValueError(
                f"{sum(self.boundaries)} syllable starts but {len(self.stresses)} stress values"
            )

    @property
    def syllable_count(self) -> int:
        return len(self.stresses)

    def split(self, phonemes: list[str] | tuple[str, ...]) -> list[ParsedSyllable]:
        """Group ``phonemes`` into syllables according to the boundaries."""
        if len(phonemes) != len(self.boundaries):
            raise ValueError(
                f"phonemes ({len(phonemes)}) and boundaries ({len(self.boundaries)}) "
                f"must have same length"
            )
        groups: list[list[str]] = []
        for phoneme, starts in zip(phonemes, self.boundaries):
            if starts:
                groups.append([])
            groups[-1].append(phoneme)
        return [
            ParsedSyllable(tuple(group), stress)
            for group, stress in zip(groups, self.stresses)
        ]

    def transcription(self, phonemes: list[str] | tuple[str, ...]) -> str:
        """Render as a stress-annotated transcription, e.g. "' K AE - M AH L"."""
        return f" {SYLLABLE_SEP} ".join(str(s) for s in self.split(phonemes))


@dataclass
class Word:
    """A word of the host utterance."""
    text: str
    pos: str | None = None
    sounds_like: str | None = None      # graphemic override, may hold several parts
    transcription: str | None = None    # stress-annotated phonemic override
    accent: str | None = None           # e.g. a ToBI accent such as "H*"
    g2p_method: str | None = None       # set by the phonemiser


@dataclass(frozen=True)
class Phoneme:
    label: str


@dataclass(frozen=True)
class Syllable:
    stress: Stress = Stress.NONE
    accent: str | None = None
    tone: str | None = None


@dataclass(frozen=True)
class Annotation:
    """Word -> syllable -> phoneme hierarchy for one utterance."""
    words: tuple[Word, ...]
    phonemes: tuple[Phoneme, ...]
    syllables: tuple[Syllable, ...]
    word_phonemes: tuple[tuple[int, int], ...]        # (word index, phoneme index)
    syllable_phonemes: tuple[tuple[int, int], ...]    # (syllable index, phoneme index)

    def phoneme_indices_of_word(self, word_index: int) -> list[int]:
        return [p for w, p in self.word_phonemes if w == word_index]

    def phoneme_indices_of_syllable(self, syllable_index: int) -> list[int]:
        return [p for s, p in self.syllable_phonemes if s == syllable_index]

    def syllable_indices_of_word(self, word_index: int) -> list[int]:
        phones = set(self.phoneme_indices_of_word(word_index))
        seen: list[int] = []
        for s, p in self.syllable_phonemes:
            if p in phones and s not in seen:
                seen.append(s)
        return seen

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        words = []
        for wi, word in enumerate(self.words):
            syllables = []
            for si in self.syllable_indices_of_word(wi):
                syl = self.syllables[si]
                syllables.append({
                    "phonemes": [
                        self.phonemes[p].label
                        for p in self.phoneme_indices_of_syllable(si)
                    ],
                    "stress": int(syl.stress),
                    "accent": syl.accent,
                })
            words.append({
                "text": word.text,
                "pos": word.pos,
                "g2p_method": word.g2p_method,
                "syllables": syllables,
            })
        return {
            "words": words,
            "word_phonemes": [list(pair) for pair in self.word_phonemes],
            "syllable_phonemes": [list(pair) for pair in self.syllable_phonemes],
        }


@dataclass(frozen=True)
class Phonemisation:
    """Transcription of one graphemic word part."""
    text: str
    transcription: str                  # stress-annotated, decoder-native alphabet
    method: str                         # "crf" or the fallback's name
    decode: DecodeResult | None = None  # None when the fallback produced it

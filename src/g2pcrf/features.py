"""Local context features for the CRF decoder and syllabifier.

A feature family is a function ``(seq, start, end, extractor) -> iterable of
feature names`` registered under a name with :func:`feature_family`. The
extractor fires every configured family on the segment ``seq[start:end]``
and returns a sparse feature vector (feature name -> value). Decoders only
see the resulting vectors, so new families can be added without touching
them.
"""

from typing import Callable, Iterable, Sequence

from g2pcrf.errors import InvalidInputError
from g2pcrf.phonology import phone_class, sonority

BOS = "<s>"
EOS = "</s>"

FeatureFamily = Callable[[Sequence[str], int, int, "FeatureExtractor"], Iterable[str]]

FEATURE_FAMILIES: dict[str, FeatureFamily] = {}


def feature_family(name: str) -> Callable[[FeatureFamily], FeatureFamily]:
    """Register a feature family under ``name``."""
    def register(fn: FeatureFamily) -> FeatureFamily:
        FEATURE_FAMILIES[name] = fn
        return fn
    return register


def _symbol(seq: Sequence[str], i: int) -> str:
    if i < 0:
        return BOS
    if i >= len(seq):
        return EOS
    return seq[i]


@feature_family("bias")
def _bias(seq, start, end, extractor):
    yield "bias"


@feature_family("chunk")
def _chunk(seq, start, end, extractor):
    yield f"chunk={extractor.join(seq[start:end])}"


@feature_family("context")
def _context(seq, start, end, extractor):
    for d in range(1, extractor.radius + 1):
        yield f"left{d}={_symbol(seq, start - d)}"
        yield f"right{d}={_symbol(seq, end - 1 + d)}"


@feature_family("ngram")
def _ngram(seq, start, end, extractor):
    chunk = extractor.join(seq[start:end])
    yield f"lchunk={_symbol(seq, start - 1)}|{chunk}"
    yield f"chunkr={chunk}|{_symbol(seq, end)}"


@feature_family("position")
def _position(seq, start, end, extractor):
    at_start = start == 0
    at_end = end == len(seq)
    if at_start and at_end:
        yield "pos=whole"
    elif at_start:
        yield "pos=begin"
    elif at_end:
        yield "pos=end"
    else:
        yield "pos=mid"


def _class(seq: Sequence[str], i: int) -> str:
    if i < 0:
        return BOS
    if i >= len(seq):
        return EOS
    return phone_class(seq[i])


@feature_family("class")
def _phone_class(seq, start, end, extractor):
    # Vowel/consonant pattern of the segment and its neighbours
    classes = "".join(phone_class(p) for p in seq[start:end])
    yield f"cls={classes}"
    yield f"ctx={_class(seq, start - 1)}_{classes}_{_class(seq, end)}"
    for d in range(2, extractor.radius + 1):
        yield f"lcls{d}={_class(seq, start - d)}"
        yield f"rcls{d}={_class(seq, end - 1 + d)}"


@feature_family("sonority")
def _sonority(seq, start, end, extractor):
    current = sonority(seq[start])
    yield f"son={current}"
    if end < len(seq):
        following = sonority(seq[end])
        if following > current:
            yield "son_next=rise"
        elif following < current:
            yield "son_next=fall"
        else:
            yield "son_next=flat"
    if start > 0:
        previous = sonority(seq[start - 1])
        if previous > current:
            yield "son_prev=fall"
        elif previous < current:
            yield "son_prev=rise"
        else:
            yield "son_prev=flat"


DEFAULT_FAMILIES = ("bias", "chunk", "context", "ngram", "position")


class FeatureExtractor:
    """Computes sparse feature vectors for segments of a symbol sequence.

    Args:
        families: Names of registered feature families to fire.
        radius: Context window size on each side of the segment.
        separator: String used to join the symbols of a segment in feature
            names ("" for graphemes, " " for phonemes).
    """

    def __init__(
        self,
        families: Sequence[str] = DEFAULT_FAMILIES,
        radius: int = 1,
        separator: str = "",
    ):
        unknown = [f for f in families if f not in FEATURE_FAMILIES]
        if unknown:
            raise ValueError(
                f"Unknown feature families: {unknown}. "
                f"Available: {sorted(FEATURE_FAMILIES)}"
            )
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")
        self.families = tuple(families)
        self.radius = radius
        self.separator = separator

    def join(self, symbols: Sequence[str]) -> str:
        return self.separator.join(symbols)

    def extract(self, seq: Sequence[str], start: int, end: int) -> dict[str, float]:
        """Return the feature vector for the segment ``seq[start:end]``.

        Raises:
            InvalidInputError: if ``seq`` is empty or the segment is not a
                non-empty slice of it.
        """
        if not seq:
            raise InvalidInputError("Cannot extract features from an empty sequence")
        if not 0 <= start < end <= len(seq):
            raise InvalidInputError(
                f"Segment [{start}, {end}) out of range for sequence of length {len(seq)}"
            )

        features: dict[str, float] = {}
        for name in self.families:
            for feature in FEATURE_FAMILIES[name](seq, start, end, self):
                features[feature] = features.get(feature, 0.0) + 1.0
        return features

    def __repr__(self) -> str:
        return (
            f"FeatureExtractor(families={list(self.families)!r}, "
            f"radius={self.radius}, separator={self.separator!r})"
        )

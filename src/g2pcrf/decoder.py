"""CRF decoding: grapheme sequence -> best phoneme sequence.

The lattice has one node per grapheme boundary. Every grapheme chunk of
length 1..``max_chunk`` found in the model's chunk table becomes a set of
candidate arcs, one per allowed label, so one grapheme may produce zero
(null label), one, or several phonemes, and several graphemes may produce
one phoneme.
"""

import logging

import numpy as np

from g2pcrf.errors import DecodeFailureError, InvalidInputError
from g2pcrf.lattice import forward, viterbi
from g2pcrf.model import NULL_LABEL, G2PModel
from g2pcrf.types import DecodeResult

logger = logging.getLogger(__name__)


def label_phonemes(label: str) -> list[str]:
    """Phonemes emitted by one encoder label ([] for the null label)."""
    if label == NULL_LABEL:
        return []
    return label.split()


def _emission_fn(model: G2PModel, graphemes: str):
    weights = model.encoder
    extractor = weights.features

    def emission(i: int, j: int) -> np.ndarray | None:
        mask = model.chunk_mask(graphemes[i:j])
        if mask is None:
            return None
        scores = weights.score(extractor.extract(graphemes, i, j))
        return np.where(mask, scores, -np.inf)

    return emission


def decode_phonemes(model: G2PModel, graphemes: str) -> DecodeResult:
    """Find the best-scoring phoneme sequence for ``graphemes``.

    Args:
        model: Loaded model handle.
        graphemes: The word to decode, already normalized by the caller.

    Returns:
        DecodeResult with a non-empty phoneme tuple.

    Raises:
        InvalidInputError: if ``graphemes`` is empty.
        DecodeFailureError: if no path through the lattice has a finite
            score, or the best path emits no phonemes at all.
    """
    if not graphemes:
        raise InvalidInputError("Cannot decode an empty grapheme sequence")

    weights = model.encoder
    emission = _emission_fn(model, graphemes)
    args = (
        len(graphemes), weights.num_labels, model.max_chunk, emission,
        weights.transition, weights.start, weights.end,
    )

    try:
        path, score = viterbi(*args)
    except DecodeFailureError as e:
        raise DecodeFailureError(f"No phonemisation found for {graphemes!r}: {e}") from e

    segments = tuple((i, j, weights.labels[k]) for i, j, k in path)
    phonemes = tuple(p for _, _, label in segments for p in label_phonemes(label))
    if not phonemes:
        raise DecodeFailureError(f"Best path for {graphemes!r} emits no phonemes")

    log_partition = forward(*args)
    logger.debug(f"Decoded {graphemes!r} -> {' '.join(phonemes)} (score {score:.3f})")

    return DecodeResult(
        graphemes=graphemes,
        phonemes=phonemes,
        score=score,
        log_partition=log_partition,
        segments=segments,
    )

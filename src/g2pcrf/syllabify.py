"""Syllabification: phoneme sequence -> syllable boundaries and stress.

A second CRF labels each phoneme with ``B`` (starts an unstressed
syllable), ``B1`` / ``B2`` (starts a syllable with primary / secondary
stress) or ``I`` (continues the current syllable). Only start labels may
open the sequence, so a single phoneme always forms exactly one syllable.
"""

import logging
from typing import Sequence

from g2pcrf.errors import DecodeFailureError, InvalidInputError
from g2pcrf.lattice import viterbi
from g2pcrf.model import BEGIN_PRIMARY, BEGIN_SECONDARY, INSIDE, G2PModel
from g2pcrf.types import Stress, SyllableAssignment

logger = logging.getLogger(__name__)

_STRESS = {BEGIN_PRIMARY: Stress.PRIMARY, BEGIN_SECONDARY: Stress.SECONDARY}


def decode_syllables(model: G2PModel, phonemes: Sequence[str]) -> SyllableAssignment:
    """Assign syllable boundaries and stress levels to ``phonemes``.

    Raises:
        InvalidInputError: if ``phonemes`` is empty.
        DecodeFailureError: if no labelling has a finite score.
    """
    if not phonemes:
        raise InvalidInputError("Cannot syllabify an empty phoneme sequence")

    phonemes = list(phonemes)
    weights = model.syllabifier
    extractor = weights.features

    def emission(i, j):
        return weights.score(extractor.extract(phonemes, i, j))

    try:
        path, score = viterbi(
            len(phonemes), weights.num_labels, 1, emission,
            weights.transition, weights.start, weights.end,
        )
    except DecodeFailureError as e:
        raise DecodeFailureError(f"No syllabification found for {' '.join(phonemes)!r}: {e}") from e

    labels = [weights.labels[k] for _, _, k in path]
    boundaries = tuple(label != INSIDE for label in labels)
    stresses = tuple(
        _STRESS.get(label, Stress.NONE) for label in labels if label != INSIDE
    )
    assignment = SyllableAssignment(boundaries=boundaries, stresses=stresses)
    logger.debug(f"Syllabified {' '.join(phonemes)!r} -> {assignment.transcription(phonemes)!r}")
    return assignment

"""Segmental Viterbi and forward search over a (position, label) trellis.

Positions run from 0 to n; a segment ``(i, j)`` covers input symbols
``i..j-1`` and carries one label. Scores live in dense numpy arrays of shape
``(n + 1, L)`` allocated per call, with back-pointers stored the same way,
so a search never touches shared mutable state.

Tie-break policy (labels are indexed in lexicographic order by the model):

- among equal-scoring predecessor labels the lowest index wins;
- among equal-scoring segmentations ending at the same position and label,
  the shorter final segment wins;
- the final label is the lowest-index maximum.

The final label is fixed before backtracking, so among tied paths the winner
is not the lexicographically smallest label sequence: with ``0 -> 1`` and
``1 -> 0`` tied, ``1 -> 0`` is returned.
"""

from typing import Callable

import numpy as np
from scipy.special import logsumexp

from g2pcrf.errors import DecodeFailureError

# emission(i, j) -> score per label (-inf = label not allowed), or None when
# the segment [i, j) has no candidate labels at all.
EmissionFn = Callable[[int, int], "np.ndarray | None"]

NEG_INF = -np.inf


def viterbi(
    n: int,
    num_labels: int,
    max_span: int,
    emission: EmissionFn,
    transition: np.ndarray,
    start: np.ndarray,
    end: np.ndarray,
) -> tuple[list[tuple[int, int, int]], float]:
    """Find the best-scoring segmentation and labelling.

    Args:
        n: Input length (number of symbols), must be positive.
        num_labels: Size of the label set L.
        max_span: Longest segment a single label may cover.
        emission: Segment scorer, see ``EmissionFn``.
        transition: (L, L) scores, row = previous label, column = next label.
        start: (L,) scores for the first label.
        end: (L,) scores for the last label.

    Returns:
        (segments, score) where segments is a list of (start, end, label_index).

    Raises:
        DecodeFailureError: if no path has a finite score.
    """
    L = num_labels
    delta = np.full((n + 1, L), NEG_INF)
    back_pos = np.full((n + 1, L), -1, dtype=np.int64)
    back_label = np.full((n + 1, L), -1, dtype=np.int64)
    columns = np.arange(L)

    for j in range(1, n + 1):
        for span in range(1, min(max_span, j) + 1):
            i = j - span
            scores = emission(i, j)
            if scores is None:
                continue

            if i == 0:
                prev_best = start
                prev_arg = np.full(L, -1, dtype=np.int64)
            else:
                if not np.isfinite(delta[i]).any():
                    continue
                cand = delta[i][:, None] + transition
                prev_arg = np.argmax(cand, axis=0)
                prev_best = cand[prev_arg, columns]

            total = prev_best + scores
            better = total > delta[j]
            delta[j][better] = total[better]
            back_pos[j][better] = i
            back_label[j][better] = prev_arg[better]

    final = delta[n] + end
    best = int(np.argmax(final))
    score = float(final[best])
    if not np.isfinite(score):
        raise DecodeFailureError(f"No finite-score path through trellis of length {n}")

    segments = []
    j, label = n, best
    while j > 0:
        i = int(back_pos[j, label])
        segments.append((i, j, label))
        j, label = i, int(back_label[j, label])
    segments.reverse()
    return segments, score


def forward(
    n: int,
    num_labels: int,
    max_span: int,
    emission: EmissionFn,
    transition: np.ndarray,
    start: np.ndarray,
    end: np.ndarray,
) -> float:
    """Return the log partition function (log-sum over all paths).

    Same arguments as :func:`viterbi`. Returns -inf when no path exists.
    """
    L = num_labels
    alpha = np.full((n + 1, L), NEG_INF)

    with np.errstate(divide="ignore", invalid="ignore"):
        for j in range(1, n + 1):
            for span in range(1, min(max_span, j) + 1):
                i = j - span
                scores = emission(i, j)
                if scores is None:
                    continue
                if i == 0:
                    prev = start
                else:
                    if not np.isfinite(alpha[i]).any():
                        continue
                    prev = logsumexp(alpha[i][:, None] + transition, axis=0)
                alpha[j] = np.logaddexp(alpha[j], prev + scores)

        total = alpha[n] + end
        if not np.isfinite(total).any():
            return float(NEG_INF)
        return float(logsumexp(total))

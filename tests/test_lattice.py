"""Tests for segmental Viterbi and forward search."""

import math

import numpy as np
import pytest

from g2pcrf.errors import DecodeFailureError
from g2pcrf.lattice import forward, viterbi


def _table_emission(table):
    """Emission function backed by a {(i, j): scores} dict."""
    def emission(i, j):
        scores = table.get((i, j))
        return None if scores is None else np.asarray(scores, dtype=float)
    return emission


def _zeros(L):
    return np.zeros((L, L)), np.zeros(L), np.zeros(L)


class TestViterbi:
    def test_best_labelling(self):
        emission = _table_emission({(0, 1): [1.0, 0.0], (1, 2): [0.0, 2.0]})
        path, score = viterbi(2, 2, 1, emission, *_zeros(2))
        assert path == [(0, 1, 0), (1, 2, 1)]
        assert score == pytest.approx(3.0)

    def test_transition_scores_change_the_path(self):
        emission = _table_emission({(0, 1): [1.0, 0.0], (1, 2): [0.0, 2.0]})
        transition = np.array([[0.0, -5.0], [0.0, 0.0]])
        path, score = viterbi(2, 2, 1, emission, transition, np.zeros(2), np.zeros(2))
        # 0 -> 1 now costs 5, so staying on label 1 (0 + 2) wins
        assert path == [(0, 1, 1), (1, 2, 1)]
        assert score == pytest.approx(2.0)

    def test_start_and_end_scores(self):
        emission = _table_emission({(0, 1): [1.0, 0.0]})
        start = np.array([-np.inf, 0.0])
        path, score = viterbi(1, 2, 1, emission, np.zeros((2, 2)), start, np.array([0.0, 0.5]))
        assert path == [(0, 1, 1)]
        assert score == pytest.approx(0.5)

    def test_multi_symbol_segment(self):
        emission = _table_emission({
            (0, 1): [1.0],
            (1, 2): [1.0],
            (0, 2): [3.0],
        })
        path, score = viterbi(2, 1, 2, emission, *_zeros(1))
        assert path == [(0, 2, 0)]
        assert score == pytest.approx(3.0)

    def test_segments_cover_input(self):
        emission = _table_emission({
            (0, 1): [1.0, 0.0],
            (1, 3): [0.0, 4.0],
            (1, 2): [1.0, 0.0],
            (2, 3): [1.0, 0.0],
        })
        path, _ = viterbi(3, 2, 2, emission, *_zeros(2))
        assert path[0][0] == 0
        assert path[-1][1] == 3
        for (_, end, _), (start, _, _) in zip(path, path[1:]):
            assert end == start

    def test_tie_prefers_lowest_label(self):
        emission = _table_emission({(0, 1): [1.0, 1.0], (1, 2): [1.0, 1.0]})
        path, _ = viterbi(2, 2, 1, emission, *_zeros(2))
        assert path == [(0, 1, 0), (1, 2, 0)]

    def test_tie_is_resolved_from_the_final_label(self):
        # 0 -> 1 and 1 -> 0 both score 0; the path ending on label 0 wins
        emission = _table_emission({(0, 1): [0.0, 0.0], (1, 2): [0.0, 0.0]})
        transition = np.array([[-1.0, 0.0], [0.0, -1.0]])
        path, score = viterbi(2, 2, 1, emission, transition, np.zeros(2), np.zeros(2))
        assert path == [(0, 1, 1), (1, 2, 0)]
        assert score == pytest.approx(0.0)

    def test_tie_prefers_shorter_final_segment(self):
        emission = _table_emission({
            (0, 1): [1.0],
            (1, 2): [1.0],
            (0, 2): [2.0],
        })
        path, _ = viterbi(2, 1, 2, emission, *_zeros(1))
        assert path == [(0, 1, 0), (1, 2, 0)]

    def test_no_candidates(self):
        emission = _table_emission({(0, 1): [1.0]})
        with pytest.raises(DecodeFailureError):
            viterbi(2, 1, 1, emission, *_zeros(1))

    def test_all_transitions_forbidden(self):
        emission = _table_emission({(0, 1): [0.0], (1, 2): [0.0]})
        transition = np.array([[-np.inf]])
        with pytest.raises(DecodeFailureError, match="No finite-score path"):
            viterbi(2, 1, 1, emission, transition, np.zeros(1), np.zeros(1))

    def test_deterministic(self):
        rng = np.random.default_rng(7)
        table = {(i, i + 1): rng.normal(size=3) for i in range(5)}
        transition = rng.normal(size=(3, 3))
        args = (5, 3, 1, _table_emission(table), transition, np.zeros(3), np.zeros(3))
        assert viterbi(*args) == viterbi(*args)


class TestForward:
    def test_sums_over_labels(self):
        emission = _table_emission({(0, 1): [0.0, 0.0]})
        assert forward(1, 2, 1, emission, *_zeros(2)) == pytest.approx(math.log(2))

    def test_sums_over_segmentations(self):
        emission = _table_emission({
            (0, 1): [0.0],
            (1, 2): [0.0],
            (0, 2): [0.0],
        })
        assert forward(2, 1, 2, emission, *_zeros(1)) == pytest.approx(math.log(2))

    def test_bounds_best_path(self):
        emission = _table_emission({(0, 1): [1.0, 0.0], (1, 2): [0.0, 2.0]})
        _, best = viterbi(2, 2, 1, emission, *_zeros(2))
        log_z = forward(2, 2, 1, emission, *_zeros(2))
        assert log_z >= best
        assert math.exp(best - log_z) <= 1.0

    def test_no_path(self):
        emission = _table_emission({(0, 1): [0.0]})
        assert forward(2, 1, 1, emission, *_zeros(1)) == -math.inf

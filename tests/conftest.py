"""Shared fixtures: a small hand-weighted ARPABET model.

Encoder scores only use the ``chunk`` family and all transitions are 0, so
a path's score is the sum of its chunk weights:

    cat   -> K AE T        well  -> W EH L (``ll`` beats ``l l``)
    known -> N OW N        x     -> K S
    camel -> K AE M EH L   h     -> only the null label (no phonemes)
    q     -> no chunk at all (no path)

The syllabifier opens a syllable on a consonant between two vowels (``B``)
and stresses the first syllable of a word (``B1``).
"""

import copy
import json

import pytest

from g2pcrf.model import load_model
from g2pcrf.pipeline import CRFPhonemiser

_ENCODER_CHUNKS = {
    "a":  {"AE": 2.0, "AH": 1.0},
    "c":  {"K": 2.0, "S": 1.0},
    "e":  {"EH": 2.0, "_": 0.5},
    "h":  {"_": 1.0},
    "k":  {"K": 1.0, "_": 1.5},
    "kn": {"N": 4.0},
    "l":  {"L": 2.0},
    "ll": {"L": 5.0},
    "m":  {"M": 2.0},
    "n":  {"N": 2.0},
    "o":  {"OW": 2.0},
    "ow": {"OW": 5.0},
    "t":  {"T": 2.0},
    "w":  {"W": 2.0},
    "x":  {"K S": 2.0},
}

MODEL_DATA = {
    "name": "test-en",
    "alphabet": "arpabet",
    "encoder": {
        "labels": ["AE", "AH", "EH", "K", "K S", "L", "M", "N", "OW", "S", "T", "W", "_"],
        "max_chunk": 2,
        "chunks": {chunk: sorted(weights) for chunk, weights in _ENCODER_CHUNKS.items()},
        "features": {"families": ["chunk"], "radius": 0},
        "emission": {f"chunk={chunk}": weights for chunk, weights in _ENCODER_CHUNKS.items()},
        "transition_default": 0.0,
    },
    "syllabifier": {
        "labels": ["B", "B1", "B2", "I"],
        "features": {"families": ["class"], "radius": 1},
        "emission": {
            "cls=C": {"I": 1.0},
            "cls=V": {"I": 2.0},
            "ctx=<s>_C_V": {"B1": 3.0},
            "ctx=<s>_C_C": {"B1": 1.0},
            "ctx=<s>_V_C": {"B1": 1.0},
            "ctx=<s>_V_</s>": {"B1": 1.0},
            "ctx=V_C_V": {"B": 3.0},
        },
        "transition_default": 0.0,
    },
}


def make_model_data() -> dict:
    """Fresh, mutable copy of the test model table."""
    return copy.deepcopy(MODEL_DATA)


@pytest.fixture(autouse=True)
def isolated_model_cache(monkeypatch):
    """Give each test its own model cache."""
    monkeypatch.setattr("g2pcrf.model._model_cache", {})


@pytest.fixture
def model_data():
    return make_model_data()


@pytest.fixture
def model(model_data):
    return load_model(model_data)


@pytest.fixture
def model_file(tmp_path, model_data):
    path = tmp_path / "test-en.json"
    path.write_text(json.dumps(model_data), encoding="utf-8")
    return path


@pytest.fixture
def phonemiser(model):
    p = CRFPhonemiser()
    p.startup(model)
    return p

"""Model loading: JSON weight tables -> immutable, shareable model handles.

A model file holds two independently trained CRFs, an ``encoder`` mapping
grapheme chunks to phoneme labels and a ``syllabifier`` labelling phonemes
with syllable boundaries and stress::

    {
      "name": "cmu-en",
      "alphabet": "arpabet",
      "encoder": {
        "labels": ["AE", "K", "K S", "_", ...],
        "max_chunk": 2,
        "chunks": {"c": ["K", "S"], "x": ["K S"], "gh": ["F", "_"], ...},
        "features": {"families": ["chunk", "context"], "radius": 2},
        "emission": {"chunk=c": {"K": 1.2}, ...},
        "transition": {"K": {"AE": 0.3}, ...},
        "start": {"K": 0.1}, "end": {"T": 0.2},
        "transition_default": 0.0
      },
      "syllabifier": {"labels": ["B", "B1", "B2", "I"], ...}
    }

``_`` is the null (deletion) label; a label holding several space-separated
symbols emits several phonemes. Missing emission weights count as 0.
Missing transition, start and end weights take ``transition_default``;
``null`` there forbids them.
"""

import gzip
import hashlib
import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import numpy as np

from g2pcrf.alphabet import ALPHABETS
from g2pcrf.errors import LoadError
from g2pcrf.features import DEFAULT_FAMILIES, FeatureExtractor

logger = logging.getLogger(__name__)

NULL_LABEL = "_"

BEGIN = "B"
BEGIN_PRIMARY = "B1"
BEGIN_SECONDARY = "B2"
INSIDE = "I"
SYLLABLE_LABELS = frozenset((BEGIN, BEGIN_PRIMARY, BEGIN_SECONDARY, INSIDE))
BEGIN_LABELS = frozenset((BEGIN, BEGIN_PRIMARY, BEGIN_SECONDARY))

_SYLLABLE_FAMILIES = ("bias", "class", "position")

_model_cache: dict[str, "G2PModel"] = {}


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class CRFWeights:
    """Read-only weights of one linear-chain CRF.

    Labels are sorted lexicographically; label indices follow that order,
    which makes index order the tie-break order during decoding.
    """
    labels: tuple[str, ...]
    index: Mapping[str, int]
    emission: Mapping[str, np.ndarray]   # feature -> (L,) weights
    transition: np.ndarray               # (L, L) previous x next
    start: np.ndarray                    # (L,)
    end: np.ndarray                      # (L,)
    features: FeatureExtractor

    @property
    def num_labels(self) -> int:
        return len(self.labels)

    def score(self, features: dict[str, float]) -> np.ndarray:
        """Sum of emission weights of the active features, one entry per label."""
        total = np.zeros(self.num_labels)
        for name, value in features.items():
            row = self.emission.get(name)
            if row is not None:
                total += value * row
        return total


@dataclass(frozen=True)
class G2PModel:
    """Handle for a loaded grapheme-to-phoneme model. Safe to share across threads."""
    name: str
    alphabet: str
    encoder: CRFWeights
    chunks: Mapping[str, np.ndarray]     # grapheme chunk -> (L,) bool mask of allowed labels
    max_chunk: int
    syllabifier: CRFWeights
    checksum: str

    def chunk_mask(self, chunk: str) -> np.ndarray | None:
        return self.chunks.get(chunk)


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file's contents."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _weight(value, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LoadError(f"{where}: weight must be a number, got {value!r}")
    if not math.isfinite(value):
        raise LoadError(f"{where}: weight must be finite, got {value!r}")
    return float(value)


def _section(data: Mapping, key: str, kind: type, where: str, default=None):
    if key not in data:
        if default is not None:
            return default
        raise LoadError(f"{where}: missing {key!r}")
    value = data[key]
    if not isinstance(value, kind):
        raise LoadError(f"{where}.{key}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def _parse_weights(
    data: Mapping,
    where: str,
    default_families: tuple[str, ...],
    separator: str,
) -> CRFWeights:
    if not isinstance(data, Mapping):
        raise LoadError(f"{where}: expected an object")

    raw_labels = _section(data, "labels", list, where)
    if not raw_labels:
        raise LoadError(f"{where}.labels: empty label set")
    if not all(isinstance(label, str) and label for label in raw_labels):
        raise LoadError(f"{where}.labels: labels must be non-empty strings")
    if len(set(raw_labels)) != len(raw_labels):
        raise LoadError(f"{where}.labels: duplicate labels")
    labels = tuple(sorted(raw_labels))
    index = {label: i for i, label in enumerate(labels)}
    L = len(labels)

    def label_index(label, context: str) -> int:
        if label not in index:
            raise LoadError(f"{context}: unknown label {label!r}")
        return index[label]

    feature_cfg = _section(data, "features", dict, where, default={})
    try:
        extractor = FeatureExtractor(
            families=feature_cfg.get("families", default_families),
            radius=feature_cfg.get("radius", 1),
            separator=separator,
        )
    except (TypeError, ValueError) as e:
        raise LoadError(f"{where}.features: {e}") from e

    emission: dict[str, np.ndarray] = {}
    for feature, row in _section(data, "emission", dict, where).items():
        if not isinstance(row, dict):
            raise LoadError(f"{where}.emission[{feature!r}]: expected an object")
        vec = np.zeros(L)
        for label, value in row.items():
            context = f"{where}.emission[{feature!r}]"
            vec[label_index(label, context)] = _weight(value, f"{context}[{label!r}]")
        emission[feature] = _frozen(vec)

    default = data.get("transition_default", 0.0)
    fill = -np.inf if default is None else _weight(default, f"{where}.transition_default")

    transition = np.full((L, L), fill)
    for prev, row in _section(data, "transition", dict, where, default={}).items():
        if not isinstance(row, dict):
            raise LoadError(f"{where}.transition[{prev!r}]: expected an object")
        context = f"{where}.transition[{prev!r}]"
        i = label_index(prev, context)
        for label, value in row.items():
            transition[i, label_index(label, context)] = _weight(value, f"{context}[{label!r}]")

    boundary = {}
    for key in ("start", "end"):
        vec = np.full(L, fill)
        for label, value in _section(data, key, dict, where, default={}).items():
            context = f"{where}.{key}"
            vec[label_index(label, context)] = _weight(value, f"{context}[{label!r}]")
        boundary[key] = vec

    return CRFWeights(
        labels=labels,
        index=MappingProxyType(index),
        emission=MappingProxyType(emission),
        transition=_frozen(transition),
        start=_frozen(boundary["start"]),
        end=_frozen(boundary["end"]),
        features=extractor,
    )


def _parse_chunks(data: Mapping, weights: CRFWeights, max_chunk: int) -> dict[str, np.ndarray]:
    chunks: dict[str, np.ndarray] = {}
    for chunk, allowed in _section(data, "chunks", dict, "encoder").items():
        where = f"encoder.chunks[{chunk!r}]"
        if not chunk or len(chunk) > max_chunk:
            raise LoadError(f"{where}: chunk length must be between 1 and max_chunk={max_chunk}")
        if not isinstance(allowed, list) or not allowed:
            raise LoadError(f"{where}: expected a non-empty list of labels")
        mask = np.zeros(weights.num_labels, dtype=bool)
        for label in allowed:
            if label not in weights.index:
                raise LoadError(f"{where}: unknown label {label!r}")
            mask[weights.index[label]] = True
        chunks[chunk] = _frozen(mask)
    if not chunks:
        raise LoadError("encoder.chunks: empty chunk table")
    return chunks


def _restrict_start(weights: CRFWeights) -> CRFWeights:
    """Only syllable-start labels may open a phoneme sequence."""
    start = weights.start.copy()
    for label, i in weights.index.items():
        if label not in BEGIN_LABELS:
            start[i] = -np.inf
    return CRFWeights(
        labels=weights.labels,
        index=weights.index,
        emission=weights.emission,
        transition=weights.transition,
        start=_frozen(start),
        end=weights.end,
        features=weights.features,
    )


def build_model(data: Mapping, checksum: str = "") -> G2PModel:
    """Build a model handle from an already parsed weight table.

    Raises:
        LoadError: if the table is incomplete or inconsistent.
    """
    if not isinstance(data, Mapping):
        raise LoadError(f"Model must be a JSON object, got {type(data).__name__}")

    alphabet = data.get("alphabet", "arpabet")
    if alphabet not in ALPHABETS:
        raise LoadError(f"Unknown model alphabet: {alphabet!r}")

    encoder_data = _section(data, "encoder", dict, "model")
    encoder = _parse_weights(encoder_data, "encoder", DEFAULT_FAMILIES, separator="")
    max_chunk = _section(encoder_data, "max_chunk", int, "encoder", default=1)
    if max_chunk < 1:
        raise LoadError(f"encoder.max_chunk must be >= 1, got {max_chunk}")
    chunks = _parse_chunks(encoder_data, encoder, max_chunk)

    syllabifier = _parse_weights(
        _section(data, "syllabifier", dict, "model"),
        "syllabifier", _SYLLABLE_FAMILIES, separator=" ",
    )
    unknown = set(syllabifier.labels) - SYLLABLE_LABELS
    if unknown:
        raise LoadError(
            f"syllabifier.labels: unknown labels {sorted(unknown)}; "
            f"expected a subset of {sorted(SYLLABLE_LABELS)}"
        )
    if not BEGIN_LABELS & set(syllabifier.labels):
        raise LoadError("syllabifier.labels: needs at least one syllable-start label")

    if not checksum:
        canonical = json.dumps(data, sort_keys=True, ensure_ascii=False)
        checksum = hashlib.sha256(canonical.encode()).hexdigest()

    return G2PModel(
        name=str(data.get("name", checksum[:12])),
        alphabet=alphabet,
        encoder=encoder,
        chunks=MappingProxyType(chunks),
        max_chunk=max_chunk,
        syllabifier=_restrict_start(syllabifier),
        checksum=checksum,
    )


def _read_json(path: Path):
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt", encoding="utf-8") as f:
        return json.load(f)


def load_model(source: str | Path | Mapping) -> G2PModel:
    """Load a G2P model from a JSON file (optionally gzipped) or a parsed dict.

    File-backed models are cached per content hash, so repeated startups
    share one handle.

    Raises:
        LoadError: if the file is missing, unreadable, or not a valid model.
    """
    if isinstance(source, Mapping):
        model = build_model(source)
        logger.info(f"Loaded model {model.name!r} ({model.encoder.num_labels} phoneme labels)")
        return model

    path = Path(source)
    if not path.is_file():
        raise LoadError(f"Model file not found: {path}")

    try:
        checksum = file_hash(path)
    except OSError as e:
        raise LoadError(f"Cannot read model file {path}: {e}") from e

    if checksum in _model_cache:
        logger.info(f"Cache hit: model {path.name} ({checksum[:12]}...)")
        return _model_cache[checksum]

    try:
        data = _read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise LoadError(f"Cannot parse model file {path}: {e}") from e

    model = build_model(data, checksum=checksum)
    _model_cache[checksum] = model
    logger.info(
        f"Loaded model {model.name!r} from {path} "
        f"({model.encoder.num_labels} phoneme labels, {len(model.chunks)} chunks)"
    )
    return model

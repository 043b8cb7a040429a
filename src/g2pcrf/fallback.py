"""Fallback phonemisation with g2p_en (CMUdict lookup + neural OOV model)."""

import logging

from g2pcrf.errors import DecodeFailureError

logger = logging.getLogger(__name__)

_g2p = None


def _get_g2p():
    """Lazy-init g2p_en (downloads model on first use)."""
    global _g2p
    if _g2p is None:
        from g2p_en import G2p
        _g2p = G2p()
    return _g2p


def _is_phoneme(label: str) -> bool:
    """Return True if label is a real phoneme (not punctuation or space)."""
    return bool(label) and label[0].isalpha()


def g2p_en_phonemes(text: str) -> list[str]:
    """ARPABET phonemes (with stress digits) for ``text`` from g2p_en.

    Raises:
        DecodeFailureError: if g2p_en produces no phonemes.
    """
    raw = _get_g2p()(text)
    phonemes = [p.strip() for p in raw if _is_phoneme(p.strip())]
    if not phonemes:
        raise DecodeFailureError(f"g2p_en produced no phonemes for {text!r}")
    logger.debug(f"g2p_en {text!r} -> {' '.join(phonemes)}")
    return phonemes

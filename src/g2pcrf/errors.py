"""Error types raised by the decoding core and the phonemiser."""


class G2PError(Exception):
    """Base class for all g2pcrf errors."""


class InvalidInputError(G2PError, ValueError):
    """Empty or malformed input (graphemes, phonemes, transcriptions)."""


class DecodeFailureError(G2PError):
    """No finite-score path exists through the trellis.

    Callers may retry with a fallback phonemiser; the core never does.
    """


class UnknownSymbolError(G2PError, KeyError):
    """A symbol has no entry in an alphabet table."""

    def __init__(self, symbol: str, alphabet: str, detail: str = ""):
        self.symbol = symbol
        self.alphabet = alphabet
        self.detail = detail
        message = f"Unknown {alphabet} symbol: {symbol!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class LoadError(G2PError):
    """Model weights are missing or corrupt."""


class NotReadyError(G2PError):
    """A decode was requested before the model was loaded."""

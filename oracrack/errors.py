"""Errors raised by the oracle attacks and the frequency analysis helpers."""


class OracleAttackError(Exception):
    """Base class for every failure surfaced by oracrack."""


class LengthMismatch(OracleAttackError, ValueError):
    """Two byte sequences that must have the same length do not."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Not same length: {left} - {right}")
        self.left = left
        self.right = right


class IndeterminateBlockSize(OracleAttackError):
    """The ciphertext length never changed within the probe bound."""


class NoDictionaryMatch(OracleAttackError):
    """No candidate byte reproduced the target block."""

    def __init__(self, message: str, recovered: bytes = b""):
        super().__init__(message)
        self.recovered = recovered


class OracleQueryFailed(OracleAttackError):
    """The oracle itself failed to encrypt a payload."""

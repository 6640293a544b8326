"""Chosen-plaintext attacks on block cipher oracles and XOR frequency analysis."""

__version__ = "0.1.0"

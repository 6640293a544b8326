"""
XOR frequency analysis - single-byte and repeating-key XOR key recovery

Principle:
  - Single-byte XOR: try the 256 keys, score each decryption with byte
    frequencies taken from a reference text and keep the best one.
  - Repeating-key XOR: blocks encrypted with the same key segment are closer
    in Hamming distance when the guessed key size is right. Once the key size
    is known, byte i of every key-sized chunk was XORed with the same key byte,
    so each column is a single-byte XOR problem.
"""

from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from oracrack.errors import LengthMismatch


def _as_array(data: bytes) -> np.ndarray:
    return np.frombuffer(bytes(data), dtype=np.uint8)


def do_xor(left: bytes, right: bytes) -> bytes:
    """XOR between two byte sequences of the same length"""
    if len(left) != len(right):
        raise LengthMismatch(len(left), len(right))
    return bytes(x ^ y for x, y in zip(left, right))


def do_single_xor(data: bytes, key: int) -> bytes:
    return bytes(b ^ key for b in data)


def do_vigenere(data: bytes, key: bytes) -> bytes:
    """Repeating-key XOR"""
    if not key:
        raise ValueError("Key must not be empty")
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(data))


def hamming_distance(left: bytes, right: bytes) -> int:
    """Number of differing bits between two equal-length byte sequences"""
    if len(left) != len(right):
        raise LengthMismatch(len(left), len(right))
    return int(np.unpackbits(_as_array(left) ^ _as_array(right)).sum())


def build_charstat_dict(corpus: bytes) -> np.ndarray:
    """Frequency of each byte value in the reference corpus"""
    if not corpus:
        raise ValueError("Reference corpus is empty")
    counts = np.bincount(_as_array(corpus), minlength=256)
    return counts / len(corpus)


def load_charstat_dict(path) -> np.ndarray:
    return build_charstat_dict(Path(path).read_bytes())


def crack_single_xor(data: bytes, table) -> Tuple[int, float]:
    """
    Best single-byte XOR key for data and its score.

    A key only replaces the current best on a strictly greater score, starting
    from 0.0: ties go to the lowest key and an all-zero table gives (0, 0.0).
    """
    table = np.asarray(table, dtype=np.float64)
    keys = np.arange(256)

    # score only depends on how often each byte value occurs
    counts = np.bincount(_as_array(data), minlength=256)
    scores = table[keys[:, np.newaxis] ^ keys[np.newaxis, :]] @ counts

    best = int(np.argmax(scores))
    if scores[best] > 0.0:
        return best, float(scores[best])
    return 0, 0.0


def guess_key_size(data: bytes, min_size: int = 2, max_size: int = 40,
                   verbose: bool = False) -> int:
    """
    Most likely repeating-key size in [min_size, max_size).

    Sums the Hamming distances of the first four key-sized chunks over every
    pair (i, j) with i <= j, normalised by the key size.
    """
    best_key_size = None
    min_distance = float("inf")

    for key_size in range(min_size, max_size):
        if len(data) < 4 * key_size:
            break
        chunks = [data[i * key_size:(i + 1) * key_size] for i in range(4)]

        distance = 0
        for i in range(4):
            for j in range(i, 4):
                distance += hamming_distance(chunks[i], chunks[j])
        distance /= key_size

        if distance < min_distance:
            min_distance = distance
            best_key_size = key_size

    if best_key_size is None:
        raise ValueError(f"Need at least {4 * min_size} bytes to guess a key size, got {len(data)}")

    if verbose:
        print(f"[+] Guessed key size {best_key_size} with min distance {min_distance:.3f}")
    return best_key_size


def crack_vigenere(data: bytes, table, key_size: Optional[int] = None,
                   verbose: bool = False) -> bytes:
    """Recovers the repeating XOR key, one single-byte XOR per key position"""
    if key_size is None:
        key_size = guess_key_size(data, verbose=verbose)

    key = bytearray()
    for position in range(key_size):
        k, score = crack_single_xor(data[position::key_size], table)
        if verbose:
            print(f"[*] Key byte {position}: 0x{k:02x} (score {score:.3f})")
        key.append(k)

    return bytes(key)

"""
ECB Oracle Attack - Byte-by-byte attack to recover the hidden suffix
Exploits ECB mode deterministic encryption weakness

Principle:
  1. Send just enough filler so that the next unknown suffix byte is the last
     byte of a block: that ciphertext block is the target.
  2. Encrypt the 256 blocks  filler/known bytes || c  (the dictionary).
  3. The candidate c whose block equals the target is the unknown byte.
  4. Repeat until the whole suffix is known.

A hidden prefix is handled by first sending (-prefix_len) % block_size filler
bytes so our data always starts on a block boundary.
"""

import multiprocessing as mp
from contextlib import nullcontext
from functools import partial
from typing import List, Optional

from tqdm import tqdm

from oracrack.attack.ecb.affixes import detect_prefix_len, detect_suffix_len
from oracrack.attack.ecb.detection import (
    detect_blocksize,
    detect_encryption_mode,
    detect_padding,
    query,
)
from oracrack.errors import NoDictionaryMatch, OracleAttackError
from oracrack.modes import Mode

FILLER = b"A"


def _alignment(prefix_len: int, block_size: int):
    """Filler count that pushes our data to a block boundary, and that boundary"""
    align = (block_size - prefix_len % block_size) % block_size
    return align, prefix_len + align


def build_dict(known: bytes, oracle, block_size: int, prefix_len: int = 0,
               pool=None) -> List[bytes]:
    """
    Encrypts the 256 candidate blocks for the byte following known.

    Each block is the last block_size - 1 bytes of filler + known, then the
    candidate. Entry c is the ciphertext block produced for candidate c.
    """
    align, base = _alignment(prefix_len, block_size)

    head = (FILLER * block_size + bytes(known))[-(block_size - 1):] if block_size > 1 else b""
    payloads = [FILLER * align + head + bytes([c]) for c in range(256)]

    if pool is None:
        ciphertexts = [query(oracle, payload) for payload in payloads]
    else:
        ciphertexts = pool.map(partial(query, oracle), payloads)

    return [ciphertext[base:base + block_size] for ciphertext in ciphertexts]


def find_char_in_dict(dictionary: List[bytes], block: bytes) -> int:
    """Run through the guessing dictionary and find which byte it was"""
    for candidate, entry in enumerate(dictionary):
        if entry == block:
            return candidate

    raise NoDictionaryMatch("Could not find next byte")


def _leaked_suffix_len(oracle, align: int, base: int, block_size: int) -> int:
    """Suffix length leaked by padding: the ciphertext grows one block once our
    aligned data plus the suffix reach a block boundary"""
    initial_size = len(query(oracle, FILLER * align))

    for n in range(1, block_size + 1):
        if len(query(oracle, FILLER * (align + n))) != initial_size:
            return initial_size - base - n

    raise OracleAttackError(
        "Length of oracle output did not change, something is wrong with the provided oracle"
    )


def recover_ecb_suffix(oracle, block_size: Optional[int] = None,
                       prefix_len: Optional[int] = None,
                       suffix_len: Optional[int] = None,
                       workers: int = 1, progress: bool = False,
                       verbose: bool = False) -> bytes:
    """
    Recovers the hidden suffix byte-by-byte using the ECB oracle.

    Stops with NoDictionaryMatch once the next byte would come from the final
    padding block, so a suffix_len larger than the real suffix never yields
    padding bytes as plaintext.
    """
    if block_size is None:
        block_size = detect_blocksize(oracle)
    if prefix_len is None:
        prefix_len = detect_prefix_len(oracle, block_size)
    if suffix_len is None:
        suffix_len = detect_suffix_len(oracle, prefix_len, block_size)

    align, base = _alignment(prefix_len, block_size)
    available = _leaked_suffix_len(oracle, align, base, block_size)
    recovered = bytearray()

    with (mp.Pool(processes=workers) if workers > 1 else nullcontext()) as pool:
        for _ in tqdm(range(suffix_len), desc="suffix", unit="B", disable=not progress):
            if len(recovered) >= available:
                raise NoDictionaryMatch(
                    f"Reached the padding block after {available} bytes, {suffix_len} requested",
                    bytes(recovered),
                )

            # Align target byte to end of block
            pad_len = block_size - (len(recovered) % block_size) - 1
            start = base + len(recovered) // block_size * block_size
            target = query(oracle, FILLER * (align + pad_len))[start:start + block_size]

            # Fresh dictionary for every byte: it depends on the known bytes
            dictionary = build_dict(recovered, oracle, block_size, prefix_len, pool)
            try:
                char = find_char_in_dict(dictionary, target)
            except NoDictionaryMatch as e:
                raise NoDictionaryMatch(
                    f"Could not find byte {len(recovered)} of {suffix_len}", bytes(recovered)
                ) from e

            recovered.append(char)
            if verbose:
                print(f"[+] Suffix progress: {bytes(recovered)!r}")

    return bytes(recovered)


def ecb_oracle_attack(oracle, workers: int = 1, progress: bool = False,
                      verbose: bool = False) -> dict:
    """
    Runs the full attack: block size, mode, padding, prefix and suffix
    lengths, then recovers the suffix.
    """
    if verbose:
        print("[*] Starting ECB Oracle Attack...")

    block_size = detect_blocksize(oracle)
    if verbose:
        print(f"[+] Block Size: {block_size} bytes")

    mode = detect_encryption_mode(oracle, block_size)
    if verbose:
        print(f"[+] Mode: {mode}")
    if mode is not Mode.ECB:
        raise OracleAttackError(f"Byte-at-a-time recovery needs ECB, oracle looks like {mode}")

    padded = detect_padding(oracle, block_size)
    prefix_len = detect_prefix_len(oracle, block_size)
    suffix_len = detect_suffix_len(oracle, prefix_len, block_size)
    if verbose:
        print(f"[+] Padding: {padded}, prefix: {prefix_len} bytes, suffix: {suffix_len} bytes")
        print("[*] Recovering suffix...")

    suffix = recover_ecb_suffix(oracle, block_size, prefix_len, suffix_len,
                                workers=workers, progress=progress, verbose=verbose)

    return {
        "block_size": block_size,
        "mode": mode,
        "padded": padded,
        "prefix_len": prefix_len,
        "suffix_len": suffix_len,
        "suffix": suffix,
    }

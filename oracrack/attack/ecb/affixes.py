"""
Hidden prefix / suffix length detection for ECB oracles

Principle:
  - Blocks lying entirely inside the prefix encrypt the same whatever we send,
    so the first block that differs between two one-byte inputs is the block
    where our data starts.
  - Inside that block, a run of filler bytes keeps the block constant until it
    becomes too short to complete the prefix's partial block.
  - With padding, the ciphertext grows by one block as soon as
    prefix + input + suffix reaches a multiple of the block size, which leaks
    the combined length of prefix and suffix.
"""

from typing import Optional

from oracrack.attack.ecb.detection import MAX_PROBE, detect_blocksize, detect_padding, query
from oracrack.errors import IndeterminateBlockSize, OracleAttackError


def detect_prefix_blocks_count(oracle, block_size: Optional[int] = None) -> int:
    """Number of complete blocks occupied by the hidden prefix"""
    if block_size is None:
        block_size = detect_blocksize(oracle)

    first = query(oracle, b"\x00")
    second = query(oracle, b"\x01")

    for index in range(0, min(len(first), len(second)), block_size):
        if first[index:index + block_size] != second[index:index + block_size]:
            return index // block_size

    raise OracleAttackError("Unable to find number of blocks occupied by oracle prefix")


def detect_prefix_len(oracle, block_size: Optional[int] = None, verbose: bool = False) -> int:
    """Exact byte length of the hidden prefix"""
    if block_size is None:
        block_size = detect_blocksize(oracle)
    offset = detect_prefix_blocks_count(oracle, block_size) * block_size

    if verbose:
        print(f"[*] Prefix fills {offset // block_size} block(s), offset {offset}")

    def stable_run(filler: int) -> int:
        run = bytes([filler]) * block_size
        initial_block = query(oracle, run)[offset:offset + block_size]

        for i in range(block_size):
            current = query(oracle, run[i + 1:])
            if len(current) < offset + block_size or current[offset:offset + block_size] != initial_block:
                return i
        return block_size

    # Two fillers: a filler equal to the next plaintext byte keeps the block
    # stable one step too long.
    prefix_len = offset + min(stable_run(0x00), stable_run(0x01))

    if verbose:
        print(f"[+] Prefix length: {prefix_len}")
    return prefix_len


def detect_prefix_plus_suffix_len(oracle, padded: Optional[bool] = None,
                                  block_size: Optional[int] = None) -> int:
    """
    Combined length of prefix and suffix.

    With PKCS#7 the output first grows after index filler bytes, when
    L + index is a multiple of the block size, so L = initial_size - index.
    The filler byte that completes the block is ours, so no +1.
    """
    initial_size = len(query(oracle, b""))

    if block_size is None:
        block_size = detect_blocksize(oracle)
    if padded is None:
        padded = detect_padding(oracle, block_size)
    if not padded:
        return initial_size

    for index in range(1, block_size + 1):
        if len(query(oracle, bytes(index))) != initial_size:
            return initial_size - index

    raise OracleAttackError(
        "Length of oracle output did not change, something is wrong with the provided oracle"
    )


def detect_suffix_len(oracle, prefix_len: Optional[int] = None,
                      block_size: Optional[int] = None,
                      max_probe: int = MAX_PROBE) -> int:
    """
    Exact byte length of the hidden suffix.

    Only meaningful for length-leaking (padded, ECB-like) oracles. The prefix
    length is detected when not given and taken out of the combined length.
    """
    initial_size = len(query(oracle, b""))

    for appended in range(1, max_probe + 1):
        if len(query(oracle, bytes(appended))) != initial_size:
            break
    else:
        raise IndeterminateBlockSize(
            f"Ciphertext length stayed at {initial_size} bytes for inputs up to {max_probe} bytes"
        )

    if prefix_len is None:
        prefix_len = detect_prefix_len(oracle, block_size)

    suffix_len = initial_size - appended - prefix_len
    if suffix_len < 0:
        raise OracleAttackError(
            f"Prefix length {prefix_len} exceeds the combined length {initial_size - appended}"
        )
    return suffix_len

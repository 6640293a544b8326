"""
Block size and mode detection against an encryption oracle

Principle:
  - Padding makes the ciphertext length jump by exactly one block when the
    padded plaintext crosses a block boundary, so the size of the first jump
    is the block size.
  - In ECB identical plaintext blocks give identical ciphertext blocks. Three
    blocks of zeros always contain two aligned identical plaintext blocks, even
    behind an unaligned prefix; chained modes (CBC) never repeat them.
    This is a heuristic: a chance collision in CBC is treated as negligible.
"""

from typing import Optional

from oracrack.errors import IndeterminateBlockSize, OracleAttackError, OracleQueryFailed
from oracrack.modes import Mode

MAX_PROBE = 256


def query(oracle, data: bytes) -> bytes:
    """Sends data to the oracle and returns the ciphertext"""
    try:
        return oracle.encrypt(bytes(data))
    except OracleAttackError:
        raise
    except Exception as e:
        raise OracleQueryFailed(f"Oracle failed on {len(data)}-byte input: {e}") from e


def detect_blocksize(oracle, max_probe: int = MAX_PROBE) -> int:
    """Detects the block size by observing ciphertext length changes"""
    zero_len = len(query(oracle, b""))

    # xxxx xxxx x___      -> 12
    # xxxx xxxx xa__      -> 12
    # xxxx xxxx xaa_      -> 12
    # xxxx xxxx xaaa      -> 12
    # xxxx xxxx xaaa a___ -> 16    block size: 16 - 12 = 4
    for i in range(1, max_probe + 1):
        length = len(query(oracle, b"\x00" * i))
        if length != zero_len:
            return abs(length - zero_len)

    raise IndeterminateBlockSize(
        f"Ciphertext length stayed at {zero_len} bytes for inputs up to {max_probe} bytes"
    )


def detect_ecb(ciphertext: bytes, block_size: int = 16) -> bool:
    """True if two aligned blocks of the ciphertext are identical"""
    blocks = [ciphertext[i:i + block_size] for i in range(0, len(ciphertext), block_size)]
    return len(blocks) != len(set(blocks))


def detect_encryption_mode(oracle, block_size: Optional[int] = None) -> Mode:
    """Guesses ECB or CBC from repeated blocks in the encryption of zeros"""
    if block_size is None:
        block_size = detect_blocksize(oracle)

    ciphertext = query(oracle, bytes(3 * block_size))
    return Mode.ECB if detect_ecb(ciphertext, block_size) else Mode.CBC


def detect_padding(oracle, block_size: Optional[int] = None) -> bool:
    """
    True if the oracle pads to whole blocks.

    One extra input byte changes a padded ciphertext by 0 or one block, so the
    length difference is a multiple of the block size. A non-standard padding
    scheme can be misclassified by this test.
    """
    if block_size is None:
        block_size = detect_blocksize(oracle)
    if block_size <= 0:
        raise OracleAttackError(f"Invalid block size: {block_size}")
    if block_size == 1:
        # length follows the input byte for byte: stream cipher, no padding
        return False

    delta = len(query(oracle, b"")) - len(query(oracle, b"\x00"))
    return delta % block_size == 0

#!/usr/bin/env python3
"""
AES encryption oracle - Simulates a vulnerable encryption service

Every call encrypts  prefix || plaintext || suffix  under a secret key with
AES-ECB or AES-CBC (PKCS#7 padding). Key, mode, IV, prefix and suffix are
chosen once, from an OracleConfig, and never change afterwards.

Usage: python3 -m oracrack.oracle.aes_oracle
"""

import base64
import random
from typing import Optional, Tuple

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad

from oracrack.modes import Mode

BLOCK_SIZE = AES.block_size
KEY_SIZE = 16

# Set 2 - Challenge 12/14 unknown string
CHALLENGE_SUFFIX = base64.b64decode(
    "Um9sbGluJyBpbiBteSA1LjAKV2l0aCBteSByYWctdG9wIGRvd24gc28gbXkgaGFpciBjYW4gYmxvdwpUaGUg"
    "Z2lybGllcyBvbiBzdGFuZGJ5IHdhdmluZyBqdXN0IHRvIHNheSBoaQpEaWQgeW91IHN0b3A/IE5vLCBJIGp1"
    "c3QgZHJvdmUgYnkK"
)


class OracleConfig:
    """Hidden state of an oracle: key, mode, optional IV, prefix and suffix."""

    def __init__(self, key: bytes, mode: Mode, iv: Optional[bytes] = None,
                 prefix: bytes = b"", suffix: bytes = b""):
        if len(key) not in AES.key_size:
            raise ValueError(f"Invalid AES key length: {len(key)}")
        if mode is Mode.CBC and (iv is None or len(iv) != BLOCK_SIZE):
            raise ValueError("CBC mode needs a 16-byte IV")
        self.key = bytes(key)
        self.mode = mode
        self.iv = bytes(iv) if mode is Mode.CBC else None
        self.prefix = bytes(prefix)
        self.suffix = bytes(suffix)


def _random_bytes(rng: random.Random, bounds: Tuple[int, int]) -> bytes:
    low, high = bounds
    return get_random_bytes(rng.randrange(low, high))


def random_config(mode: Optional[Mode] = None, suffix: Optional[bytes] = None,
                  prefix_range: Tuple[int, int] = (5, 10),
                  suffix_range: Tuple[int, int] = (5, 10),
                  rng: Optional[random.Random] = None) -> OracleConfig:
    """
    Sample a random oracle configuration.

    mode:   fixed mode, or None to pick ECB/CBC at random
    suffix: fixed suffix (then no prefix is added), or None for random
            prefix and suffix lengths drawn from prefix_range / suffix_range
    """
    rng = rng or random.SystemRandom()

    if mode is None:
        mode = rng.choice((Mode.ECB, Mode.CBC))

    iv = get_random_bytes(BLOCK_SIZE) if mode is Mode.CBC else None

    if suffix is None:
        suffix = _random_bytes(rng, suffix_range)
        prefix = _random_bytes(rng, prefix_range)
    else:
        prefix = b""

    return OracleConfig(get_random_bytes(KEY_SIZE), mode, iv, prefix, suffix)


class AesOracle:
    """Encrypts attacker data wrapped between the hidden prefix and suffix."""

    def __init__(self, config: OracleConfig):
        self._key = config.key
        self._mode = config.mode
        self._iv = config.iv
        self._prefix = config.prefix
        self._suffix = config.suffix

    def _cipher(self):
        if self._mode is Mode.ECB:
            return AES.new(self._key, AES.MODE_ECB)
        return AES.new(self._key, AES.MODE_CBC, self._iv)

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypts prefix + plaintext + suffix with PKCS#7 padding"""
        data = self._prefix + bytes(plaintext) + self._suffix
        return self._cipher().encrypt(pad(data, BLOCK_SIZE))

    def __repr__(self):
        return "<AesOracle>"


def new_oracle(config: Optional[OracleConfig] = None) -> AesOracle:
    """Build an oracle from config, or from a freshly sampled random one."""
    return AesOracle(config if config is not None else random_config())


def challenge_oracle(rng: Optional[random.Random] = None) -> AesOracle:
    """ECB oracle with a random 5-24 byte prefix and the challenge suffix"""
    rng = rng or random.SystemRandom()
    prefix = _random_bytes(rng, (5, 25))
    config = OracleConfig(get_random_bytes(KEY_SIZE), Mode.ECB,
                          prefix=prefix, suffix=CHALLENGE_SUFFIX)
    return AesOracle(config)


if __name__ == "__main__":
    oracle = new_oracle(random_config(suffix=b"FLAG{f4k3_f0r_t3st1ng}"))
    for message in (b"", b"A" * 16, b"A" * 48):
        print(f"{message!r:>52} -> {oracle.encrypt(message).hex()}")

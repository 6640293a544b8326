import pytest

from conftest import XorStreamOracle, random_bytes
from oracrack.attack.ecb.affixes import (
    detect_prefix_blocks_count,
    detect_prefix_len,
    detect_prefix_plus_suffix_len,
    detect_suffix_len,
)
from oracrack.errors import IndeterminateBlockSize, OracleAttackError
from oracrack.oracle.aes_oracle import Mode

AFFIX_LENGTHS = [0, 1, 15, 16, 35]


@pytest.mark.parametrize("suffix_len", AFFIX_LENGTHS)
@pytest.mark.parametrize("prefix_len", AFFIX_LENGTHS)
def test_affix_lengths(make_oracle, prefix_len, suffix_len):
    oracle = make_oracle(prefix=random_bytes(prefix_len, seed=3),
                         suffix=random_bytes(suffix_len, seed=4))

    assert detect_prefix_blocks_count(oracle) == prefix_len // 16
    assert detect_prefix_len(oracle) == prefix_len
    assert detect_suffix_len(oracle) == suffix_len
    assert detect_prefix_plus_suffix_len(oracle) == prefix_len + suffix_len


@pytest.mark.parametrize("suffix", [b"\x00\x01abc", b"\x01\x00abc", b"\x00", b"\x01"])
@pytest.mark.parametrize("prefix_len", [3, 16, 21])
def test_prefix_len_filler_collision(make_oracle, prefix_len, suffix):
    # suffix starting with a filler value keeps that filler's block stable longer
    oracle = make_oracle(prefix=random_bytes(prefix_len, seed=5), suffix=suffix)
    assert detect_prefix_len(oracle) == prefix_len
    assert detect_suffix_len(oracle) == len(suffix)


def test_affix_lengths_cbc(make_oracle):
    oracle = make_oracle(Mode.CBC, prefix=random_bytes(7), suffix=random_bytes(20))
    assert detect_prefix_len(oracle) == 7
    assert detect_suffix_len(oracle) == 20


def test_suffix_len_with_known_prefix(make_oracle):
    oracle = make_oracle(prefix=b"0123456789", suffix=b"secret")
    assert detect_suffix_len(oracle, prefix_len=10, block_size=16) == 6


def test_suffix_len_with_wrong_prefix(make_oracle):
    oracle = make_oracle(prefix=b"0123", suffix=b"ab")
    with pytest.raises(OracleAttackError):
        detect_suffix_len(oracle, prefix_len=20)


def test_suffix_len_bounded(make_oracle):
    class ConstantOracle:
        def encrypt(self, plaintext):
            return bytes(32)

    with pytest.raises(IndeterminateBlockSize):
        detect_suffix_len(ConstantOracle(), prefix_len=0, max_probe=4)


def test_prefix_verbose(make_oracle, capsys):
    detect_prefix_len(make_oracle(prefix=random_bytes(20)), verbose=True)
    out = capsys.readouterr().out
    assert "[+] Prefix length: 20" in out


def test_prefix_plus_suffix_unpadded():
    oracle = XorStreamOracle(prefix=b"12345", suffix=b"abcdefgh")
    assert detect_prefix_plus_suffix_len(oracle) == 13
    assert detect_prefix_plus_suffix_len(oracle, padded=False) == 13


def test_prefix_plus_suffix_length_never_changes():
    class ConstantOracle:
        def encrypt(self, plaintext):
            return bytes(32)

    with pytest.raises(OracleAttackError):
        detect_prefix_plus_suffix_len(ConstantOracle(), padded=True, block_size=16)


@pytest.mark.parametrize("total", range(0, 34))
def test_prefix_plus_suffix_exact_length(make_oracle, total):
    prefix_len = total // 3
    oracle = make_oracle(prefix=b"p" * prefix_len, suffix=b"s" * (total - prefix_len))
    assert detect_prefix_plus_suffix_len(oracle, padded=True, block_size=16) == total

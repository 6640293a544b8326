import subprocess
import sys

import pytest

from conftest import XorStreamOracle, random_bytes
from oracrack.attack.ecb.detection import (
    detect_blocksize,
    detect_ecb,
    detect_encryption_mode,
    detect_padding,
    query,
)
from oracrack.errors import IndeterminateBlockSize, OracleQueryFailed
from oracrack.oracle.aes_oracle import Mode, new_oracle, random_config

AFFIX_LENGTHS = [0, 1, 15, 16, 35]


class ConstantOracle:
    def encrypt(self, plaintext):
        return b"\x00" * 16


class BrokenOracle:
    def encrypt(self, plaintext):
        raise RuntimeError("encoding error")


@pytest.mark.parametrize("suffix_len", AFFIX_LENGTHS)
@pytest.mark.parametrize("mode", [Mode.ECB, Mode.CBC])
def test_detect_blocksize(make_oracle, mode, suffix_len):
    oracle = make_oracle(mode, suffix=random_bytes(suffix_len))
    assert detect_blocksize(oracle) == 16


@pytest.mark.parametrize("prefix_len", AFFIX_LENGTHS)
def test_detect_blocksize_with_prefix(make_oracle, prefix_len):
    oracle = make_oracle(prefix=random_bytes(prefix_len, seed=1), suffix=b"tail")
    assert detect_blocksize(oracle) == 16


def test_detect_blocksize_stream_oracle():
    assert detect_blocksize(XorStreamOracle(b"pre", b"suf")) == 1


def test_detect_blocksize_indeterminate():
    with pytest.raises(IndeterminateBlockSize):
        detect_blocksize(ConstantOracle(), max_probe=8)


def test_detect_ecb():
    block = bytes(range(16))
    assert detect_ecb(block + bytes(16) + block)
    assert not detect_ecb(block + bytes(16))
    assert not detect_ecb(b"")


@pytest.mark.parametrize("prefix_len", AFFIX_LENGTHS)
def test_detect_encryption_mode(make_oracle, prefix_len):
    prefix = random_bytes(prefix_len, seed=2)
    assert detect_encryption_mode(make_oracle(Mode.ECB, prefix, b"suffix")) is Mode.ECB
    assert detect_encryption_mode(make_oracle(Mode.CBC, prefix, b"suffix")) is Mode.CBC


def test_detect_encryption_mode_random_oracles():
    for _ in range(20):
        config = random_config()
        assert detect_encryption_mode(new_oracle(config)) is config.mode


def test_detect_encryption_mode_given_block_size(make_oracle):
    assert detect_encryption_mode(make_oracle(), block_size=16) is Mode.ECB


def test_detect_padding(make_oracle):
    assert detect_padding(make_oracle(suffix=b"abc"))
    assert detect_padding(make_oracle(Mode.CBC, suffix=random_bytes(16)))
    assert not detect_padding(XorStreamOracle(b"pre", b"suf"))


def test_query_wraps_oracle_failures():
    with pytest.raises(OracleQueryFailed) as excinfo:
        query(BrokenOracle(), b"abc")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_query_propagates_through_detection():
    with pytest.raises(OracleQueryFailed):
        detect_blocksize(BrokenOracle())


def test_attack_modules_do_not_import_network_clients():
    code = "import sys, oracrack.attack.ecb; print('requests' in sys.modules, 'flask' in sys.modules)"
    result = subprocess.run([sys.executable, "-c", code], capture_output=True, text=True, check=True)
    assert result.stdout.split() == ["False", "False"]

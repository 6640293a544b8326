import random
import socket
import threading

import pytest

from oracrack.attack.xor.frequency import build_charstat_dict, do_vigenere
from oracrack.oracle.aes_oracle import AesOracle, Mode, OracleConfig
from oracrack.oracle.server import bind_server, serve

KEY = bytes(range(16))
IV = bytes(range(16, 32))

ENGLISH = b"""
It was a bright cold day in the early spring, and the people of the little town
were walking down to the market with their baskets and their children. The baker
had opened his shop before the sun came up, and the smell of fresh bread filled
the narrow streets. Nobody was in a hurry that morning. An old man sat on the
bench near the fountain and read his newspaper, while two girls argued about the
price of apples with a farmer who had driven in from the hills. When the church
bell rang nine times, the young music master hurried across the square, holding his
hat with one hand and a pile of books with the other. He did not notice the
stranger who was standing in the shadow of the town hall, watching everyone who
passed. He had arrived the night before on the last train, and he had asked the
station master for the name of a good hotel. The station master told him that
there was only one hotel in town, and that it was not very good, but that the
food was honest and the beds were clean. The stranger thanked him, picked up his
heavy leather bag, and walked slowly into the dark. In the morning he had come
down to the square to wait for somebody, and he would wait there for most of the
day, because the person he was waiting for was not going to come at all.
"""


class XorStreamOracle:
    """Unpadded stream oracle: prefix + data + suffix XOR a fixed keystream"""

    def __init__(self, prefix=b"", suffix=b""):
        self.prefix = prefix
        self.suffix = suffix
        self.keystream = random_bytes(64, seed=99)

    def encrypt(self, plaintext):
        return do_vigenere(self.prefix + plaintext + self.suffix, self.keystream)


def random_bytes(n, seed=0):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(n))


@pytest.fixture
def make_oracle():
    def factory(mode=Mode.ECB, prefix=b"", suffix=b""):
        iv = IV if mode is Mode.CBC else None
        return AesOracle(OracleConfig(KEY, mode, iv, prefix, suffix))
    return factory


@pytest.fixture(scope="session")
def english_table():
    return build_charstat_dict(ENGLISH)


@pytest.fixture
def serve_oracle():
    """Runs oracles behind the TCP server, returns (host, port)"""
    sockets = []
    threads = []

    def start(oracle):
        sock = bind_server("127.0.0.1", 0)
        thread = threading.Thread(target=serve, args=(sock, oracle, False), daemon=True)
        thread.start()
        sockets.append(sock)
        threads.append(thread)
        return sock.getsockname()[:2]

    yield start

    for sock in sockets:
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
    for thread in threads:
        thread.join(timeout=1)

"""
Clients for remote encryption oracles

SocketOracle talks to oracrack.oracle.server (base64 lines over TCP),
HttpOracle to oracrack.oracle.web or any service answering
GET <base>/encrypt/<hex>/ with {"ciphertext": "<hex>"}.
"""

import base64
import binascii
import socket

import requests

from oracrack.errors import OracleQueryFailed


class SocketOracle:
    def __init__(self, host: str = "localhost", port: int = 1337, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    def encrypt(self, plaintext: bytes) -> bytes:
        """Sends message to server and returns the ciphertext"""
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as s:
                s.sendall(base64.b64encode(plaintext) + b"\n")
                with s.makefile("rb") as reader:
                    response = reader.readline().strip()
        except OSError as e:
            raise OracleQueryFailed(f"Connection to {self.host}:{self.port} failed: {e}") from e

        if response.startswith(b"ERROR"):
            raise OracleQueryFailed(response.decode(errors="replace"))
        try:
            return base64.b64decode(response, validate=True)
        except binascii.Error as e:
            raise OracleQueryFailed(f"Invalid response from server: {response[:32]!r}") from e


class HttpOracle:
    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def encrypt(self, plaintext: bytes) -> bytes:
        hex_text = plaintext.hex()
        url = f"{self.base_url}/encrypt/{hex_text}/" if hex_text else f"{self.base_url}/encrypt/"

        try:
            r = requests.get(url, timeout=self.timeout)
            r.raise_for_status()
            j = r.json()
        except (requests.RequestException, ValueError) as e:
            raise OracleQueryFailed(f"Request to {url} failed: {e}") from e

        if "ciphertext" not in j:
            raise OracleQueryFailed("No ciphertext in response")
        try:
            return bytes.fromhex(j["ciphertext"])
        except (TypeError, ValueError) as e:
            raise OracleQueryFailed(f"Invalid ciphertext in response: {e}") from e

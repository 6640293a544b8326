#!/usr/bin/env python3
"""
Oracle Server - Exposes an encryption oracle over TCP
Runs on localhost:1337 and encrypts every line it receives

Protocol (one request per line):
  client -> base64(plaintext) + "\\n"
  server -> base64(ciphertext) + "\\n"   or   "ERROR <reason>\\n"

Usage: python3 -m oracrack.oracle.server
"""

import base64
import binascii
import socket

from oracrack.oracle.aes_oracle import Mode, new_oracle, random_config

# Server configuration
HOST = "localhost"
PORT = 1337


def handle_client(conn, addr, oracle, verbose: bool = True):
    """Handles a single client connection"""
    if verbose:
        print(f"[+] Connection from {addr}")

    try:
        with conn.makefile("rb") as reader:
            for line in reader:
                try:
                    plaintext = base64.b64decode(line.strip(), validate=True)
                except binascii.Error as e:
                    conn.sendall(f"ERROR invalid base64: {e}\n".encode())
                    continue

                # Encrypt prefix + message + suffix
                try:
                    ciphertext = oracle.encrypt(plaintext)
                except Exception as e:
                    if verbose:
                        print(f"[-] Error: {e}")
                    conn.sendall(f"ERROR {e}\n".encode())
                    continue
                conn.sendall(base64.b64encode(ciphertext) + b"\n")

    except OSError as e:
        if verbose:
            print(f"[-] Error: {e}")
    finally:
        conn.close()
        if verbose:
            print(f"[-] Connection closed {addr}")


def bind_server(host: str = HOST, port: int = PORT) -> socket.socket:
    """Creates the listening socket (port 0 picks a free port)"""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    s.bind((host, port))
    s.listen(5)
    return s


def serve(sock: socket.socket, oracle, verbose: bool = True):
    """Accepts connections until the listening socket is closed"""
    if verbose:
        host, port = sock.getsockname()[:2]
        print(f"[*] Oracle Server started on {host}:{port}")
        print("[*] Waiting for connections...")

    while True:
        try:
            conn, addr = sock.accept()
        except OSError:
            # listening socket closed
            break
        handle_client(conn, addr, oracle, verbose)


def start_server(oracle, host: str = HOST, port: int = PORT):
    """Starts the oracle server until interrupted"""
    with bind_server(host, port) as s:
        try:
            serve(s, oracle)
        except KeyboardInterrupt:
            print("\n[*] Server shutting down...")


if __name__ == "__main__":
    start_server(new_oracle(random_config(mode=Mode.ECB, suffix=b"FLAG{f4k3_f0r_t3st1ng}")))

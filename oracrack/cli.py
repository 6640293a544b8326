#!/usr/bin/env python3
"""
oracrack - block cipher oracle attacks and XOR frequency analysis

Usage:
  oracrack serve [--mode ECB|CBC] [--suffix TEXT | --challenge] [--http] [--host H] [--port P]
  oracrack attack (--host H --port P | --url URL) [--workers N] [--progress]
  oracrack xor HEX --corpus FILE
  oracrack vigenere FILE --corpus FILE [--key-size N] [--raw]
"""

import argparse
import base64
import binascii
import sys
from pathlib import Path

from oracrack.attack.ecb.byte_at_a_time import ecb_oracle_attack
from oracrack.attack.xor.frequency import (
    crack_single_xor,
    crack_vigenere,
    do_single_xor,
    do_vigenere,
    load_charstat_dict,
)
from oracrack.errors import OracleAttackError
from oracrack.oracle.aes_oracle import Mode, challenge_oracle, new_oracle, random_config
from oracrack.oracle.remote import HttpOracle, SocketOracle
from oracrack.oracle import server, web


def cmd_serve(args):
    if args.challenge:
        oracle = challenge_oracle()
    else:
        mode = Mode(args.mode) if args.mode else None
        suffix = args.suffix.encode() if args.suffix is not None else None
        oracle = new_oracle(random_config(mode=mode, suffix=suffix))

    if args.http:
        port = args.port or web.PORT
        print(f"Starting server on http://{args.host}:{port}")
        web.create_app(oracle).run(host=args.host, port=port)
    else:
        server.start_server(oracle, args.host, args.port or server.PORT)
    return 0


def cmd_attack(args):
    if args.url:
        oracle = HttpOracle(args.url)
    else:
        oracle = SocketOracle(args.host, args.port or server.PORT)

    result = ecb_oracle_attack(oracle, workers=args.workers, progress=args.progress, verbose=True)
    print(f"\n[+] Recovered suffix: {result['suffix']!r}")
    return 0


def cmd_xor(args):
    try:
        ciphertext = bytes.fromhex(args.ciphertext)
    except ValueError as e:
        raise ValueError(f"Ciphertext must be hex: {e}")

    table = load_charstat_dict(args.corpus)
    key, score = crack_single_xor(ciphertext, table)
    print(f"[+] Key: 0x{key:02x} (score {score:.3f})")
    print(f"[+] Plaintext: {do_single_xor(ciphertext, key)!r}")
    return 0


def cmd_vigenere(args):
    data = Path(args.file).read_bytes()
    if not args.raw:
        try:
            data = base64.b64decode(data)
        except binascii.Error as e:
            raise ValueError(f"{args.file} is not valid base64 (use --raw): {e}")

    table = load_charstat_dict(args.corpus)
    key = crack_vigenere(data, table, key_size=args.key_size, verbose=True)
    print(f"[+] Key: {key!r}")
    print(f"[+] Plaintext:\n{do_vigenere(data, key).decode(errors='replace')}")
    return 0


def build_argparser():
    p = argparse.ArgumentParser(prog="oracrack", description="Block cipher oracle attacks and XOR frequency analysis.")
    sub = p.add_subparsers(dest="cmd", required=True)

    srv = sub.add_parser("serve", help="Run a vulnerable encryption oracle.")
    srv.add_argument("--mode", choices=[m.value for m in Mode], default=None, help="Cipher mode (default: random)")
    group = srv.add_mutually_exclusive_group()
    group.add_argument("--suffix", default=None, help="Fixed secret suffix (no prefix). Default: random prefix and suffix")
    group.add_argument("--challenge", action="store_true", help="ECB oracle with random prefix and the challenge suffix")
    srv.add_argument("--http", action="store_true", help="Serve over HTTP instead of raw TCP")
    srv.add_argument("--host", default="localhost")
    srv.add_argument("--port", type=int, default=None)
    srv.set_defaults(func=cmd_serve)

    atk = sub.add_parser("attack", help="Recover the hidden suffix of an ECB oracle.")
    atk.add_argument("--host", default="localhost")
    atk.add_argument("--port", type=int, default=None)
    atk.add_argument("--url", default=None, help="Base URL of an HTTP oracle (overrides --host/--port)")
    atk.add_argument("-w", "--workers", type=int, default=1, help="Processes used to build each dictionary")
    atk.add_argument("--progress", action="store_true", help="Show a progress bar")
    atk.set_defaults(func=cmd_attack)

    xor = sub.add_parser("xor", help="Crack single-byte XOR.")
    xor.add_argument("ciphertext", help="Hex-encoded ciphertext")
    xor.add_argument("--corpus", required=True, help="Reference text for byte frequencies")
    xor.set_defaults(func=cmd_xor)

    vig = sub.add_parser("vigenere", help="Crack repeating-key XOR.")
    vig.add_argument("file", help="Ciphertext file (base64 unless --raw)")
    vig.add_argument("--corpus", required=True, help="Reference text for byte frequencies")
    vig.add_argument("-k", "--key-size", type=int, default=None, help="Key size (default: guessed)")
    vig.add_argument("--raw", action="store_true", help="File holds raw bytes")
    vig.set_defaults(func=cmd_vigenere)
    return p


def main(argv=None):
    parser = build_argparser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (OracleAttackError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
HTTP encryption oracle service

Endpoints:
  GET /encrypt/<plaintext hex>/  ->  {"ciphertext": "<hex>"}
  GET /encrypt/                  ->  encryption of the empty plaintext
  GET /status                    ->  service status check
"""

import threading

from flask import Flask, jsonify

from oracrack.oracle.aes_oracle import Mode, new_oracle, random_config

HOST, PORT = "localhost", 5000


def create_app(oracle) -> Flask:
    app = Flask(__name__)
    stats = {"queries": 0}
    lock = threading.Lock()

    @app.route("/encrypt/", defaults={"plaintext_hex": ""}, methods=["GET"])
    @app.route("/encrypt/<plaintext_hex>/", methods=["GET"])
    def encrypt(plaintext_hex):
        """Encrypt the hex-encoded plaintext with the hidden oracle state"""
        try:
            plaintext = bytes.fromhex(plaintext_hex)
        except ValueError as e:
            return jsonify({"error": f"Invalid hex: {e}"}), 400

        with lock:
            stats["queries"] += 1
        return jsonify({"ciphertext": oracle.encrypt(plaintext).hex()})

    @app.route("/status", methods=["GET"])
    def health_check():
        return jsonify({
            "status": "running",
            "queries": stats["queries"],
            "service": "Encryption Oracle",
        })

    return app


if __name__ == "__main__":
    app = create_app(new_oracle(random_config(mode=Mode.ECB, suffix=b"FLAG{f4k3_f0r_t3st1ng}")))
    print("-" * 60)
    print(f"Starting server on http://{HOST}:{PORT}")
    print("Endpoints: /encrypt/<hex>/, /status")
    app.run(host=HOST, port=PORT)

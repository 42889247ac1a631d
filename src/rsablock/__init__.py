"""Textbook RSA from first principles, in an Academic Sense.

Provides seeded key-pair generation on top of a Miller-Rabin prime search, block-chunked encryption and decryption of
byte streams into hex lines, and signing/verification of user names for lightweight sender authentication. No
padding scheme is applied and no effort is made against side channels: do not protect real secrets with it.

Typical usage example:

    with RandState(42) as state:
        pk = PrivateKey.generate(256, 50, state, "alice")
    text = encrypt_bytes(b"hello world", pk.pub)
    r = decrypt_bytes(text, pk)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsablock.codec import Block
from rsablock.codec import block_size
from rsablock.codec import BlockError
from rsablock.codec import decrypt_bytes
from rsablock.codec import decrypt_file
from rsablock.codec import encrypt_bytes
from rsablock.codec import encrypt_file
from rsablock.keygen import generate_key_pair
from rsablock.keygen import generate_private_key
from rsablock.keygen import generate_public_key
from rsablock.keygen import username_to_int
from rsablock.numtheory import gcd
from rsablock.numtheory import is_prime
from rsablock.numtheory import make_prime
from rsablock.numtheory import mod_inverse
from rsablock.numtheory import NotInvertibleError
from rsablock.numtheory import pow_mod
from rsablock.randstate import RandState
from rsablock.rsa import decrypt
from rsablock.rsa import encrypt
from rsablock.rsa import KeyParseError
from rsablock.rsa import PrivateKey
from rsablock.rsa import PublicKey
from rsablock.rsa import sign
from rsablock.rsa import verify

__version__ = "0.1.0"
__all__ = [
    "Block",
    "BlockError",
    "KeyParseError",
    "NotInvertibleError",
    "PrivateKey",
    "PublicKey",
    "RandState",
    "block_size",
    "decrypt",
    "decrypt_bytes",
    "decrypt_file",
    "encrypt",
    "encrypt_bytes",
    "encrypt_file",
    "gcd",
    "generate_key_pair",
    "generate_private_key",
    "generate_public_key",
    "is_prime",
    "make_prime",
    "mod_inverse",
    "pow_mod",
    "sign",
    "username_to_int",
    "verify",
]

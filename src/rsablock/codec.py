"""Block-chunked encryption and decryption of byte streams.

The plaintext is cut into chunks of at most k-1 bytes, where k is the key's block size. Each chunk is prefixed with a
0xFF marker byte so leading zero bytes survive the trip through an integer, encrypted, and written as one lowercase
hex line. Decryption reverses this line by line.

Typical usage example:

    with open("secret.txt", "rb") as src, open("secret.enc", "w", encoding="ascii") as dst:
        encrypt_file(src, dst, pubkey)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import dataclasses
import io
import logging
import re
from typing import BinaryIO, TextIO

from rsablock.rsa import PrivateKey
from rsablock.rsa import PublicKey

logger = logging.getLogger(__name__)

MARKER: int = 0xFF

_CIPHER_LINE = re.compile(r"[0-9a-fA-F]+")


class BlockError(ValueError):
    """Raised when a ciphertext line cannot be turned back into a plaintext block."""


def block_size(mod: int) -> int:
    """Computes the block size k for a modulus.

    Args:
        mod: The key modulus.

    Returns:
        floor((bits(mod) - 1) / 8), so any k-byte value stays below `mod`.

    Raises:
        ValueError: If the blocks would have no room for a payload byte.
    """
    k = (mod.bit_length() - 1) // 8
    if k < 2:
        raise ValueError(f"A {mod.bit_length()}-bit modulus is too small to carry any payload.")
    return k


@dataclasses.dataclass(frozen=True)
class Block:
    """One plaintext block: the marker byte followed by up to `size - 1` payload bytes.

    Attributes:
        payload: The payload bytes.
        size: The block size k of the key in use.
    """
    payload: bytes
    size: int

    def __post_init__(self) -> None:
        if len(self.payload) > self.size - 1:
            raise BlockError(f"Payload of {len(self.payload)} bytes does not fit a {self.size}-byte block.")

    def to_bytes(self) -> bytes:
        return bytes([MARKER]) + self.payload

    def to_int(self) -> int:
        return int.from_bytes(self.to_bytes(), byteorder="big", signed=False)

    @classmethod
    def from_int(cls, value: int, size: int) -> "Block":
        """Rebuilds a block from its integer value.

        Raises:
            BlockError: If the value does not start with the marker byte or is too long for the block size.
        """
        raw = value.to_bytes((value.bit_length() + 7) // 8, byteorder="big", signed=False)
        if not raw or raw[0] != MARKER:
            raise BlockError("Decrypted block lacks the 0xFF marker, is the right key in use?")
        return cls(raw[1:], size)


def encrypt_file(infile: BinaryIO, outfile: TextIO, key: PublicKey) -> int:
    """Encrypts the contents of `infile`, writing one hex line per block to `outfile`.

    Args:
        infile: Binary stream of plaintext.
        outfile: Text stream receiving the ciphertext lines.
        key: The public key to encrypt with.

    Returns:
        The number of blocks written. Empty input gives no blocks at all.
    """
    k = block_size(key.mod)
    count = 0
    while True:
        chunk = infile.read(k - 1)
        if not chunk:
            break
        c = key.encrypt(Block(chunk, k).to_int())
        outfile.write(f"{c:x}\n")
        count += 1
    logger.debug("Encrypted %d blocks of up to %d bytes", count, k - 1)
    return count


def decrypt_file(infile: TextIO, outfile: BinaryIO, key: PrivateKey) -> int:
    """Decrypts hex lines from `infile`, writing the recovered bytes to `outfile`.

    Blank lines are skipped.

    Args:
        infile: Text stream of ciphertext lines.
        outfile: Binary stream receiving the plaintext.
        key: The private key to decrypt with.

    Returns:
        The number of blocks read.

    Raises:
        BlockError: On a line that is not hex, a ciphertext not below the modulus, or a block without marker.
    """
    k = block_size(key.mod)
    count = 0
    for lineno, line in enumerate(infile, start=1):
        text = line.strip()
        if not text:
            continue
        if not _CIPHER_LINE.fullmatch(text):
            raise BlockError(f"Line {lineno} is not a hex ciphertext block.")
        c = int(text, 16)
        if c >= key.mod:
            raise BlockError(f"Ciphertext on line {lineno} is not below the modulus.")
        block = Block.from_int(key.decrypt(c), k)
        outfile.write(block.payload)
        count += 1
    logger.debug("Decrypted %d blocks", count)
    return count


def encrypt_bytes(data: bytes, key: PublicKey) -> str:
    """In-memory variant of `encrypt_file`."""
    out = io.StringIO()
    encrypt_file(io.BytesIO(data), out, key)
    return out.getvalue()


def decrypt_bytes(text: str, key: PrivateKey) -> bytes:
    """In-memory variant of `decrypt_file`."""
    out = io.BytesIO()
    decrypt_file(io.StringIO(text), out, key)
    return out.getvalue()

# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import io
import os

import pytest

from rsablock import codec
from rsablock.randstate import RandState
from rsablock.rsa import PrivateKey

standard_payload = b"The quick brown fox jumps over the lazy dog1234567890!@#$%^&*()-_=+[{}];:\\|<>,./?~`'\""


@pytest.fixture(scope="module", params=[64, 256, 521])
def keyset(request) -> PrivateKey:
    with RandState(request.param * 7) as state:
        return PrivateKey.generate(request.param, 50, state, "alice")


@pytest.fixture(scope="module")
def key256() -> PrivateKey:
    with RandState(42) as state:
        return PrivateKey.generate(256, 50, state, "alice")


@pytest.mark.parametrize("mod,expected", [(2**16 + 1, 2), (2**24 - 1, 2), (2**24 + 1, 3), (2**256 + 1, 32)])
def test_block_size(mod, expected):
    assert codec.block_size(mod) == expected


@pytest.mark.parametrize("mod", [1, 255, 2**15 + 1, 2**16 - 1])
def test_block_size_too_small(mod):
    with pytest.raises(ValueError):
        codec.block_size(mod)


def test_block_layout():
    block = codec.Block(b"\x00\x01", 4)
    assert block.to_bytes() == b"\xff\x00\x01"
    assert block.to_int() == 0xff0001
    assert codec.Block.from_int(0xff0001, 4) == block


def test_block_empty_payload():
    assert codec.Block(b"", 4).to_int() == 0xff
    assert codec.Block.from_int(0xff, 4).payload == b""


def test_block_too_long():
    with pytest.raises(codec.BlockError):
        codec.Block(b"abcd", 4)


@pytest.mark.parametrize("value", [0, 0x7f0001, 0x01ff])
def test_block_missing_marker(value):
    with pytest.raises(codec.BlockError):
        codec.Block.from_int(value, 4)


def test_block_stays_below_modulus(keyset):
    k = codec.block_size(keyset.mod)
    assert codec.Block(b"\xff" * (k - 1), k).to_int() < keyset.mod


@pytest.mark.parametrize("size_in_blocks", [0, 1, 3])
def test_round_exact_multiple(keyset, size_in_blocks):
    k = codec.block_size(keyset.mod)
    data = os.urandom((k - 1) * size_in_blocks)
    text = codec.encrypt_bytes(data, keyset.pub)
    assert len(text.splitlines()) == size_in_blocks
    assert codec.decrypt_bytes(text, keyset) == data


@pytest.mark.parametrize("payload", [
    b"",
    b"a",
    b"\x00",
    b"\x00\x00\x00hello",
    b"\xff" * 40,
    standard_payload,
    bytes(range(256)),
])
def test_round(keyset, payload):
    assert codec.decrypt_bytes(codec.encrypt_bytes(payload, keyset.pub), keyset) == payload


def test_empty_input_writes_nothing(key256):
    out = io.StringIO()
    assert codec.encrypt_file(io.BytesIO(b""), out, key256.pub) == 0
    assert out.getvalue() == ""


def test_wire_format(key256):
    k = codec.block_size(key256.mod)
    data = b"x" * (2 * (k - 1) + 3)
    out = io.StringIO()
    assert codec.encrypt_file(io.BytesIO(data), out, key256.pub) == 3
    text = out.getvalue()
    assert text.endswith("\n")
    lines = text.splitlines()
    assert len(lines) == 3
    for line in lines:
        assert line == line.lower()
        assert not line.startswith("0x")
        int(line, 16)
    assert int(lines[2], 16) == pow(int.from_bytes(b"\xffxxx", "big"), key256.pub.expo, key256.mod)


def test_hello_world_end_to_end():
    with RandState(42) as state:
        key = PrivateKey.generate(256, 50, state, "alice")
    text = codec.encrypt_bytes(b"hello world", key.pub)
    assert len(text.splitlines()) == 1
    assert codec.decrypt_bytes(text, key) == b"hello world"


def test_files_round(key256, tmp_path):
    (tmp_path / "plain").write_bytes(standard_payload * 10)
    with open(tmp_path / "plain", "rb") as src, open(tmp_path / "enc", "w", encoding="ascii") as dst:
        blocks = codec.encrypt_file(src, dst, key256.pub)
    with open(tmp_path / "enc", "r", encoding="ascii") as src, open(tmp_path / "dec", "wb") as dst:
        assert codec.decrypt_file(src, dst, key256) == blocks
    assert (tmp_path / "dec").read_bytes() == standard_payload * 10


def test_decrypt_skips_blank_lines(key256):
    text = codec.encrypt_bytes(b"spaced out", key256.pub)
    assert codec.decrypt_bytes("\n" + text + "\n\n", key256) == b"spaced out"


@pytest.mark.parametrize("line", ["xyz", "0x1f", "-1f", "12 34"])
def test_decrypt_rejects_malformed(key256, line):
    with pytest.raises(codec.BlockError):
        codec.decrypt_bytes(line + "\n", key256)


def test_decrypt_rejects_out_of_range(key256):
    with pytest.raises(codec.BlockError):
        codec.decrypt_bytes(f"{key256.mod:x}\n", key256)


def test_decrypt_wrong_key(key256):
    with RandState(43) as state:
        other = PrivateKey.generate(256, 50, state, "alice")
    text = codec.encrypt_bytes(standard_payload, key256.pub)
    # Reduce the ciphertexts so that only the missing marker can fail.
    reduced = "".join(f"{int(line, 16) % other.mod:x}\n" for line in text.splitlines())
    with pytest.raises(codec.BlockError):
        codec.decrypt_bytes(reduced, other)


def test_block_error_is_value_error(key256):
    with pytest.raises(ValueError):
        codec.decrypt_bytes("zz\n", key256)

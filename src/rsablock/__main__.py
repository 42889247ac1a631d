"""The Command Line Interface for the utility.

Wires the three classic tools to the library: `keygen` writes a key pair, `encrypt` authenticates the public key by
its username signature and encrypts a stream, `decrypt` reverses it.

Typical usage example:

    rsablock keygen -b 256 -s 42
    rsablock encrypt -i message.txt -o message.enc
    python -m rsablock decrypt -i message.enc
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import contextlib
import getpass
import logging
import pathlib
import sys
import time
import typing
import warnings

import rsablock
from rsablock.codec import BlockError
from rsablock.codec import decrypt_file
from rsablock.codec import encrypt_file
from rsablock.randstate import RandState
from rsablock.rsa import KeyParseError
from rsablock.rsa import PrivateKey
from rsablock.rsa import PublicKey

logger = logging.getLogger(__name__)

DEFAULT_BITS: int = 256
DEFAULT_ITERS: int = 50
DEFAULT_PUBLIC_KEY: str = "rsa.pub"
DEFAULT_PRIVATE_KEY: str = "rsa.priv"
SAFE_BITS: int = 64


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "keygen": HelpData("Generates an RSA public/private key pair."),
    "encrypt": HelpData("Encrypts data using RSA encryption."),
    "decrypt": HelpData("Decrypts data using RSA decryption."),
    "bits": HelpData("Minimum bits needed for public key n.", int, DEFAULT_BITS),
    "iters": HelpData("Miller-Rabin iterations for testing primes.", int, DEFAULT_ITERS),
    "pbfile": HelpData("Public key file.", pathlib.Path, DEFAULT_PUBLIC_KEY),
    "pvfile": HelpData("Private key file.", pathlib.Path, DEFAULT_PRIVATE_KEY),
    "seed": HelpData("Random seed for testing. Defaults to the current time.", int),
    "pem": HelpData("Also write both keys as PEM next to the key files."),
    "infile": HelpData("Input file (default: stdin).", pathlib.Path),
    "outfile": HelpData("Output file (default: stdout).", pathlib.Path),
    "verbose": HelpData("Display verbose program output."),
}


def _described(name: str) -> dict[str, typing.Any]:
    data = help_dict[name]
    text = data.description
    if data.default is not None:
        text += f" (default: {data.default})"
    return {"type": data.format, "default": data.default, "help": text}


verbose = argparse.ArgumentParser(add_help=False)
verbose.add_argument("--verbose", "-v", action="store_true", help=help_dict["verbose"].description)
streams = argparse.ArgumentParser(add_help=False)
streams.add_argument("--infile", "-i", **_described("infile"))
streams.add_argument("--outfile", "-o", **_described("outfile"))
corep = argparse.ArgumentParser(prog="rsablock")
corep.add_argument("--version", action="version", version=f"%(prog)s {rsablock.__version__}")
corep.add_argument("--log-level",
                   default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                   help="Logging verbosity on stderr.")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen = commands.add_parser("keygen", parents=[verbose], help=help_dict["keygen"].description)
keygen.add_argument("--bits", "-b", **_described("bits"))
keygen.add_argument("--iters", "-i", **_described("iters"))
keygen.add_argument("--pbfile", "-n", **_described("pbfile"))
keygen.add_argument("--pvfile", "-d", **_described("pvfile"))
keygen.add_argument("--seed", "-s", **_described("seed"))
keygen.add_argument("--pem", action="store_true", help=help_dict["pem"].description)

encrypt = commands.add_parser("encrypt", parents=[verbose, streams], help=help_dict["encrypt"].description)
encrypt.add_argument("--pbfile", "-n", **_described("pbfile"))
decrypt = commands.add_parser("decrypt", parents=[verbose, streams], help=help_dict["decrypt"].description)
decrypt.add_argument("--pvfile", "-n", **_described("pvfile"))


class CommandError(Exception):
    """Fatal condition reported to the user as a one-line message."""


def dump(lines: list[str]) -> None:
    """Verbose output goes to stderr so it never mixes with data on stdout."""
    for line in lines:
        print(line, file=sys.stderr)


def run_keygen(args: argparse.Namespace) -> None:
    if args.bits < SAFE_BITS:
        warnings.warn(f"A {args.bits}-bit modulus is for experiments only.", RuntimeWarning)
    seed = args.seed if args.seed is not None else int(time.time())
    try:
        username = getpass.getuser()
    except (OSError, KeyError) as exc:
        raise CommandError("Cannot determine the login name to sign the key with.") from exc
    with RandState(seed) as state:
        logger.info("Generating %d-bit key pair with seed %d", args.bits, seed)
        key = PrivateKey.generate(args.bits, args.iters, state, username)
    try:
        key.pub.export(args.pbfile)
        key.export(args.pvfile)
        if args.pem:
            key.pub.export_pem(args.pbfile.with_name(args.pbfile.name + ".pem"))
            key.export_pem(args.pvfile.with_name(args.pvfile.name + ".pem"))
    except OSError as exc:
        raise CommandError(f"Failed to write key file: {exc}") from exc
    if args.verbose:
        dump(key.pub.describe()[:2] + key.describe())


def _open(stack: contextlib.ExitStack, path: pathlib.Path | None, mode: str,
          default: typing.Callable[[], typing.IO]) -> typing.IO:
    """Opens `path` within `stack`, falling back to a standard stream when no path was given."""
    if path is None:
        return default()
    try:
        if "b" in mode:
            return stack.enter_context(open(path, mode))
        return stack.enter_context(open(path, mode, encoding="ascii"))
    except OSError as exc:
        raise CommandError(f"Failed to open {path}: {exc}") from exc


def _load_key(cls: type[PublicKey] | type[PrivateKey], path: pathlib.Path) -> PublicKey | PrivateKey:
    try:
        return cls.import_key(path)
    except KeyParseError as exc:
        raise CommandError(f"Malformed key file {path}: {exc}") from exc
    except OSError as exc:
        raise CommandError(f"Failed to open {path}: {exc}") from exc


def run_encrypt(args: argparse.Namespace) -> None:
    pub = _load_key(PublicKey, args.pbfile)
    if args.verbose:
        dump(pub.describe())
    if not pub.verify_username():
        raise CommandError("Error: Cannot be verified")
    with contextlib.ExitStack() as stack:
        src = _open(stack, args.infile, "rb", lambda: sys.stdin.buffer)
        dst = _open(stack, args.outfile, "w", lambda: sys.stdout)
        encrypt_file(src, dst, pub)


def run_decrypt(args: argparse.Namespace) -> None:
    priv = _load_key(PrivateKey, args.pvfile)
    if args.verbose:
        dump(priv.describe())
    with contextlib.ExitStack() as stack:
        src = _open(stack, args.infile, "r", lambda: sys.stdin)
        dst = _open(stack, args.outfile, "wb", lambda: sys.stdout.buffer)
        decrypt_file(src, dst, priv)


def main(argv: list[str] | None = None) -> int:
    """Parses `argv` and runs the subcommand. Returns the process exit status."""
    args = corep.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    match args.subcommand:
        case "keygen":
            runner = run_keygen
        case "encrypt":
            runner = run_encrypt
        case _:
            runner = run_decrypt
    try:
        runner(args)
    except (CommandError, BlockError) as exc:
        print(exc, file=sys.stderr)
        return 1
    except ValueError as exc:
        logger.debug("Rejected arguments", exc_info=True)
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

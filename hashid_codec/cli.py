import argparse
import logging
import os
import sys
from typing import List, Optional

from .codec import CodecKey, HashidCodec, load_codec_key, save_codec_key

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write_text(path: str, text: str) -> None:
    if path == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)


def _parse_numbers(line: str) -> List[int]:
    numbers: List[int] = []
    for token in line.replace(",", " ").split():
        try:
            numbers.append(int(token))
        except ValueError:
            raise ValueError(f"not an integer: {token!r}") from None
    return numbers


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Encode integer sequences as short salted hashids"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--salt")
    common.add_argument("--min-length", type=int, default=None)
    common.add_argument("--alphabet")
    common.add_argument(
        "--key",
        help="Path to the codec key (loads existing values; encode writes updates)",
    )
    common.add_argument("--verbose", action="store_true")

    enc = subparsers.add_parser("encode", parents=[common])
    enc.add_argument(
        "--input-numbers",
        default="-",
        help="One sequence per line, integers separated by spaces or commas",
    )
    enc.add_argument("--output-text", default="-")

    dec = subparsers.add_parser("decode", parents=[common])
    dec.add_argument("--input-text", default="-", help="One hashid per line")
    dec.add_argument("--output-numbers", default="-")
    dec.add_argument(
        "--strict",
        action="store_true",
        help="Drop hashids that do not re-encode to the same text",
    )

    return parser


def _resolve_key(args, key_from_input: Optional[CodecKey]) -> CodecKey:
    salt = (
        args.salt
        if args.salt is not None
        else key_from_input.salt if key_from_input else ""
    )
    min_length = (
        args.min_length
        if args.min_length is not None
        else key_from_input.min_length if key_from_input else 0
    )
    if min_length < 0:
        raise ValueError("min-length must be >= 0")
    alphabet = (
        args.alphabet
        if args.alphabet is not None
        else key_from_input.alphabet if key_from_input else None
    )
    return CodecKey(salt=salt, min_length=min_length, alphabet=alphabet)


def run_encode(args) -> None:
    key_from_input = (
        load_codec_key(args.key) if args.key and os.path.exists(args.key) else None
    )
    key = _resolve_key(args, key_from_input)
    codec = HashidCodec.from_key(key)

    lines = [line for line in _read_text(args.input_numbers).splitlines() if line.strip()]
    hashids = [codec.encode(_parse_numbers(line)) for line in lines]
    logger.debug("encoded %d sequences", len(hashids))

    if args.key:
        save_codec_key(key, args.key)
    _write_text(args.output_text, "".join(f"{h}\n" for h in hashids))


def run_decode(args) -> None:
    if args.key and os.path.exists(args.key):
        key_from_input = load_codec_key(args.key)
    elif args.salt is not None:
        key_from_input = None
    else:
        raise ValueError("either an existing --key file or --salt is required")
    key = _resolve_key(args, key_from_input)
    codec = HashidCodec.from_key(key)
    decode = codec.decode_strict if args.strict else codec.decode

    lines = [line for line in _read_text(args.input_text).splitlines() if line.strip()]
    out: List[str] = []
    for line in lines:
        values = decode(line)
        if not values:
            logger.warning("could not decode %r", line.strip())
        out.append(" ".join(str(v) for v in values) + "\n")
    _write_text(args.output_numbers, "".join(out))


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "encode":
            run_encode(args)
        elif args.command == "decode":
            run_decode(args)
        else:
            parser.error("Unknown command")
    except ValueError as exc:
        parser.error(str(exc))


__all__ = ["build_arg_parser", "run_encode", "run_decode", "main"]

"""Reversible salted encoding of integer sequences into short strings."""

from .codec import (
    DEFAULT_ALPHABET,
    DEFAULT_SEPARATORS,
    MAX_VALUE,
    MIN_ALPHABET_LENGTH,
    CodecKey,
    CodecTables,
    HashidCodec,
    build_tables,
    load_codec_key,
    salted_shuffle,
    save_codec_key,
)

__all__ = [
    "DEFAULT_ALPHABET",
    "DEFAULT_SEPARATORS",
    "MAX_VALUE",
    "MIN_ALPHABET_LENGTH",
    "CodecKey",
    "CodecTables",
    "HashidCodec",
    "build_tables",
    "load_codec_key",
    "salted_shuffle",
    "save_codec_key",
]

__version__ = "0.1.0"

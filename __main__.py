"""CLI shim for running the codec directly from the repository checkout."""

from hashid_codec.cli import main
from hashid_codec.codec import (
    CodecKey,
    HashidCodec,
    build_tables,
    load_codec_key,
    salted_shuffle,
    save_codec_key,
)

__all__ = [
    "CodecKey",
    "HashidCodec",
    "build_tables",
    "load_codec_key",
    "main",
    "salted_shuffle",
    "save_codec_key",
]


if __name__ == "__main__":
    main()

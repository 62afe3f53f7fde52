import dataclasses
import json
import logging
import math
from typing import Dict, Iterable, List, MutableSequence, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890"
DEFAULT_SEPARATORS = "cfhistuCFHISTU"
MIN_ALPHABET_LENGTH = 16
SEPARATOR_RATIO = 3.5
GUARD_RATIO = 12.0
MAX_VALUE = 2**63 - 1


@dataclasses.dataclass
class CodecKey:
    salt: str = ""
    min_length: int = 0
    alphabet: Optional[str] = None
    version: str = "v1"

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "salt": self.salt,
            "min_length": self.min_length,
            "alphabet": self.alphabet,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodecKey":
        version = data.get("version", "v1")
        if version != "v1":
            raise ValueError(f"Unsupported codec key version: {version}")
        salt = data.get("salt") or ""
        if not isinstance(salt, str):
            raise ValueError("salt must be a string")
        min_length = _check_min_length(data.get("min_length", 0))
        alphabet = data.get("alphabet")
        if alphabet is not None and not isinstance(alphabet, str):
            raise ValueError("alphabet must be a string or null")
        return cls(
            salt=salt,
            min_length=min_length,
            alphabet=alphabet,
            version=version,
        )


def save_codec_key(key: CodecKey, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(key.to_dict(), f, indent=2)
        f.write("\n")


def load_codec_key(path: str) -> CodecKey:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError("codec key must be a JSON object")
    return CodecKey.from_dict(raw)


def _check_min_length(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"min_length must be an integer, got {value!r}")
    if value < 0:
        raise ValueError("min_length must be >= 0")
    return value


def salted_shuffle(
    source: MutableSequence[str],
    salt: Sequence[str],
    salt_start: int = 0,
    salt_count: Optional[int] = None,
) -> MutableSequence[str]:
    """Permute ``source`` in place, driven only by the code points of ``salt``.

    Only ``salt[salt_start:salt_start + salt_count]`` is read. An empty salt
    range leaves ``source`` unchanged.
    """
    if salt_count is None:
        salt_count = len(salt) - salt_start
    if salt_count <= 0:
        return source
    v = 0
    p = 0
    for index in range(len(source) - 1, 0, -1):
        v %= salt_count
        i = ord(salt[salt_start + v])
        p += i
        j = (i + v + p) % index
        source[index], source[j] = source[j], source[index]
        v += 1
    return source


def _unique(chars: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for c in chars:
        if c not in seen:
            seen.add(c)
            result.append(c)
    return result


@dataclasses.dataclass(frozen=True)
class CodecTables:
    alphabet: str
    separators: str
    guards: str


def build_tables(
    salt: str,
    alphabet: Optional[str] = None,
    separators: str = DEFAULT_SEPARATORS,
) -> CodecTables:
    chars = _unique(alphabet if alphabet is not None else DEFAULT_ALPHABET)
    if len(chars) < MIN_ALPHABET_LENGTH:
        logger.warning(
            "alphabet has %d unique characters; at least %d are recommended",
            len(chars),
            MIN_ALPHABET_LENGTH,
        )

    candidates = set(separators)
    seps = [c for c in chars if c in candidates]
    chars = [c for c in chars if c not in candidates]
    salted_shuffle(seps, salt)

    if not seps or len(chars) / len(seps) > SEPARATOR_RATIO:
        target = int(math.ceil(len(chars) / SEPARATOR_RATIO))
        if target == 1:
            target = 2
        if target > len(seps):
            diff = target - len(seps)
            seps += chars[:diff]
            chars = chars[diff:]
        else:
            seps = seps[:target]

    salted_shuffle(chars, salt)

    guard_count = int(math.ceil(len(chars) / GUARD_RATIO))
    if len(chars) < 3:
        guards = seps[:guard_count]
        seps = seps[guard_count:]
    else:
        guards = chars[:guard_count]
        chars = chars[guard_count:]

    if not chars or not seps or not guards:
        raise ValueError(
            "alphabet leaves no room for digits, separators and guards; "
            "add characters outside the separator set"
        )

    tables = CodecTables(
        alphabet="".join(chars),
        separators="".join(seps),
        guards="".join(guards),
    )
    logger.debug(
        "built tables: alphabet=%d separators=%d guards=%d",
        len(tables.alphabet),
        len(tables.separators),
        len(tables.guards),
    )
    return tables


def _split(text: str, delimiters: str) -> List[str]:
    # Keeps empty segments, like str.split with a single separator
    parts: List[str] = []
    current: List[str] = []
    for c in text:
        if c in delimiters:
            parts.append("".join(current))
            current = []
        else:
            current.append(c)
    parts.append("".join(current))
    return parts


def _to_digits(value: int, alphabet: Sequence[str]) -> List[str]:
    base = len(alphabet)
    digits: List[str] = []
    while True:
        value, rem = divmod(value, base)
        digits.append(alphabet[rem])
        if value == 0:
            break
    digits.reverse()
    return digits


def _from_digits(digits: str, alphabet: Sequence[str]) -> int:
    base = len(alphabet)
    positions: Dict[str, int] = {c: idx for idx, c in enumerate(alphabet)}
    value = 0
    for c in digits:
        # Characters outside the alphabet count as digit zero
        value = value * base + positions.get(c, 0)
    return value


def _check_value(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"can only encode integers, got {value!r}")
    if value < 0 or value > MAX_VALUE:
        raise ValueError(f"value {value} out of range [0, {MAX_VALUE}]")
    return value


class HashidCodec:
    """Encodes sequences of non-negative integers as short salted strings.

    The tables derived from the salt and alphabet are computed once and never
    modified, so a single instance can be shared between threads.
    """

    def __init__(
        self, salt: str = "", min_length: int = 0, alphabet: Optional[str] = None
    ):
        self.salt = salt
        self.min_length = _check_min_length(min_length)
        self.alphabet = alphabet
        self.tables = build_tables(salt, alphabet)

    @classmethod
    def from_key(cls, key: CodecKey) -> "HashidCodec":
        return cls(salt=key.salt, min_length=key.min_length, alphabet=key.alphabet)

    @property
    def key(self) -> CodecKey:
        return CodecKey(
            salt=self.salt, min_length=self.min_length, alphabet=self.alphabet
        )

    def _salt_buffer(self, lottery: str, alphabet: Sequence[str]) -> List[str]:
        return [lottery, *self.salt, *alphabet]

    def encode(self, values: Iterable[int]) -> str:
        numbers = [_check_value(v) for v in values]
        if not numbers:
            return ""

        tables = self.tables
        alphabet = list(tables.alphabet)
        separators = tables.separators
        guards = tables.guards

        values_hash = sum(v % (i + 100) for i, v in enumerate(numbers))
        lottery = alphabet[values_hash % len(alphabet)]
        encoded = [lottery]

        buffer = self._salt_buffer(lottery, alphabet)
        region = slice(len(self.salt) + 1, len(buffer))
        for i, value in enumerate(numbers):
            salted_shuffle(alphabet, buffer, 0, len(alphabet))
            digits = _to_digits(value, alphabet)
            encoded.extend(digits)
            if i + 1 < len(numbers):
                number = value % (ord(digits[0]) + i)
                encoded.append(separators[number % len(separators)])
            buffer[region] = alphabet

        if len(encoded) < self.min_length:
            guard_index = (values_hash + ord(encoded[0])) % len(guards)
            encoded.insert(0, guards[guard_index])
            if len(encoded) < self.min_length:
                # Index 2 is fixed, whatever the hash length
                guard_index = (values_hash + ord(encoded[2])) % len(guards)
                encoded.append(guards[guard_index])

        half = len(alphabet) // 2
        while len(encoded) < self.min_length:
            salted_shuffle(alphabet, list(alphabet))
            encoded = alphabet[half:] + encoded + alphabet[:half]
            excess = len(encoded) - self.min_length
            if excess > 0:
                start = excess // 2
                encoded = encoded[start : start + self.min_length]

        return "".join(encoded)

    def encode_one(self, value: int) -> str:
        return self.encode([value])

    def decode(self, hashid: str) -> List[int]:
        if not isinstance(hashid, str):
            return []
        hashid = hashid.strip()
        if not hashid:
            return []

        tables = self.tables
        segments = _split(hashid, tables.guards)
        segment = segments[1] if len(segments) in (2, 3) else segments[0]
        if not segment:
            return []

        lottery = segment[0]
        alphabet = list(tables.alphabet)
        buffer = self._salt_buffer(lottery, alphabet)
        region = slice(len(self.salt) + 1, len(buffer))

        values: List[int] = []
        for chunk in _split(segment[1:], tables.separators):
            salted_shuffle(alphabet, buffer, 0, len(alphabet))
            value = _from_digits(chunk, alphabet)
            if value > MAX_VALUE:
                return []
            values.append(value)
            buffer[region] = alphabet
        return values

    def decode_strict(self, hashid: str) -> List[int]:
        """Decode ``hashid``, returning ``[]`` unless it re-encodes identically."""
        values = self.decode(hashid)
        if not values:
            return []
        try:
            reencoded = self.encode(values)
        except ValueError:
            return []
        return values if reencoded == hashid.strip() else []


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

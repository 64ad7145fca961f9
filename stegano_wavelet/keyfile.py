from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Tuple

from .errors import KeyFormatError, KeyMismatchError
from .wavelet import Band


KEY_MAGIC = b"SWKY"
KEY_FORMAT_VERSION = 1

_HEADER_SIZE = len(KEY_MAGIC) + 1 + 4 + 4 + 4
_ENTRY_SIZE = 4 + 1 + 4


class KeyEntry(NamedTuple):
    """Where one difference block was written: detail band and block index."""

    band: Band
    index: int


def as_entries(key2: Iterable) -> Tuple[KeyEntry, ...]:
    """Normalize ``(band, index)`` pairs into :class:`KeyEntry` tuples."""
    entries = []
    for position, pair in enumerate(key2):
        try:
            band, index = pair
        except (TypeError, ValueError) as e:
            raise KeyMismatchError(f"key2 entry {position} is not a (band, index) pair: {pair!r}") from e
        try:
            band = Band(band)
        except ValueError as e:
            raise KeyMismatchError(f"Unknown band tag {band!r} in key2 entry {position}") from e
        try:
            index = int(index)
        except (TypeError, ValueError) as e:
            raise KeyMismatchError(f"Bad block index {index!r} in key2 entry {position}") from e
        entries.append(KeyEntry(band, index))
    return tuple(entries)


@dataclass(frozen=True)
class StegoKey:
    """Everything extraction needs besides the watermarked image."""

    key1: Tuple[int, ...]
    key2: Tuple[KeyEntry, ...]
    secret_width: int
    secret_height: int

    def __post_init__(self):
        object.__setattr__(self, "key1", tuple(int(i) for i in self.key1))
        object.__setattr__(self, "key2", as_entries(self.key2))
        if len(self.key1) != len(self.key2):
            raise KeyMismatchError(
                f"key1 has {len(self.key1)} entries but key2 has {len(self.key2)}"
            )


def key_to_bytes(key: StegoKey) -> bytes:
    """Serialize a key.

    Output format (big-endian): magic(4) || version(1) || width(4) ||
    height(4) || count(4) || count * [key1(4) || band(1) || index(4)]
    """
    out = bytearray(KEY_MAGIC)
    out.append(KEY_FORMAT_VERSION)
    out += key.secret_width.to_bytes(4, "big")
    out += key.secret_height.to_bytes(4, "big")
    out += len(key.key1).to_bytes(4, "big")
    for matched, entry in zip(key.key1, key.key2):
        out += matched.to_bytes(4, "big")
        out.append(int(entry.band))
        out += entry.index.to_bytes(4, "big")
    return bytes(out)


def key_from_bytes(blob: bytes) -> StegoKey:
    """Parse bytes produced by :func:`key_to_bytes`."""
    if len(blob) < _HEADER_SIZE:
        raise KeyFormatError("Key data too short for header")
    if blob[:4] != KEY_MAGIC:
        raise KeyFormatError("Not a key file (bad magic)")
    version = blob[4]
    if version != KEY_FORMAT_VERSION:
        raise KeyFormatError(f"Unsupported key format version {version}")
    width = int.from_bytes(blob[5:9], "big")
    height = int.from_bytes(blob[9:13], "big")
    count = int.from_bytes(blob[13:17], "big")
    if len(blob) != _HEADER_SIZE + count * _ENTRY_SIZE:
        raise KeyFormatError(
            f"Key header announces {count} entries but {len(blob) - _HEADER_SIZE} payload bytes follow"
        )

    key1 = []
    key2 = []
    for offset in range(_HEADER_SIZE, len(blob), _ENTRY_SIZE):
        key1.append(int.from_bytes(blob[offset:offset + 4], "big"))
        tag = blob[offset + 4]
        try:
            band = Band(tag)
        except ValueError as e:
            raise KeyFormatError(f"Unknown band tag {tag}") from e
        key2.append(KeyEntry(band, int.from_bytes(blob[offset + 5:offset + 9], "big")))
    return StegoKey(tuple(key1), tuple(key2), width, height)


def save_key(path: str, key: StegoKey) -> None:
    with open(path, "wb") as f:
        f.write(key_to_bytes(key))


def load_key(path: str) -> StegoKey:
    with open(path, "rb") as f:
        return key_from_bytes(f.read())

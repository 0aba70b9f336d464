"""BCS encoding of pure call arguments.

Pure arguments are passed to an entry point as BCS bytes. Only the primitive
types the contract's entry points take are supported: unsigned integers, bool,
address, UTF-8 strings, and vectors / options of those.

Format reference: https://github.com/diem/bcs
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from .utils import normalize_address

_UINT_BITS: Dict[str, int] = {"u8": 8, "u16": 16, "u32": 32, "u64": 64, "u128": 128, "u256": 256}

_STRING_TYPES = ("string", "0x1::string::String", "String")


def uleb128(n: int) -> bytes:
    if n < 0:
        raise ValueError("uleb128 of a negative number")
    out = bytearray()
    while True:
        byte = n & 0x7F
        n >>= 7
        if n:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def read_uleb128(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Return (value, new_offset)."""
    value = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise ValueError("truncated uleb128")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7


def _inner(type_name: str, prefix: str) -> str:
    return type_name[len(prefix):-1].strip()


def _encode_uint(type_name: str, value: Any) -> bytes:
    bits = _UINT_BITS[type_name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{type_name} expects an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{type_name} must be non-negative, got {value}")
    if value >= 1 << bits:
        raise ValueError(f"{type_name} out of range: {value}")
    return value.to_bytes(bits // 8, "little")


def encode(type_name: str, value: Any) -> bytes:
    """Encode ``value`` as the Move type ``type_name``. Raises ValueError."""
    t = type_name.strip()

    if t.startswith("vector<") and t.endswith(">"):
        inner = _inner(t, "vector<")
        if inner == "u8" and isinstance(value, (bytes, bytearray)):
            return uleb128(len(value)) + bytes(value)
        if isinstance(value, (str, bytes, dict)) or value is None:
            raise ValueError(f"{t} expects a sequence, got {type(value).__name__}")
        items = list(value)
        return uleb128(len(items)) + b"".join(encode(inner, it) for it in items)

    if t.startswith("option<") and t.endswith(">"):
        if value is None:
            return b"\x00"
        return b"\x01" + encode(_inner(t, "option<"), value)

    if t in _UINT_BITS:
        return _encode_uint(t, value)

    if t == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"bool expects a bool, got {type(value).__name__}")
        return b"\x01" if value else b"\x00"

    if t == "address":
        return bytes.fromhex(normalize_address(str(value))[2:])

    if t in _STRING_TYPES:
        if not isinstance(value, str):
            raise ValueError(f"string expects a str, got {type(value).__name__}")
        raw = value.encode("utf-8")
        return uleb128(len(raw)) + raw

    raise ValueError(f"unsupported pure type {type_name!r}")


def decode(type_name: str, data: bytes, offset: int = 0) -> Tuple[Any, int]:
    """Decode one value of ``type_name`` from ``data``; returns (value, new_offset)."""
    t = type_name.strip()

    if t.startswith("vector<") and t.endswith(">"):
        inner = _inner(t, "vector<")
        length, offset = read_uleb128(data, offset)
        items = []
        for _ in range(length):
            item, offset = decode(inner, data, offset)
            items.append(item)
        return items, offset

    if t.startswith("option<") and t.endswith(">"):
        tag = data[offset]
        if tag == 0:
            return None, offset + 1
        return decode(_inner(t, "option<"), data, offset + 1)

    if t in _UINT_BITS:
        width = _UINT_BITS[t] // 8
        chunk = data[offset:offset + width]
        if len(chunk) != width:
            raise ValueError(f"truncated {t}")
        return int.from_bytes(chunk, "little"), offset + width

    if t == "bool":
        return data[offset] == 1, offset + 1

    if t == "address":
        chunk = data[offset:offset + 32]
        if len(chunk) != 32:
            raise ValueError("truncated address")
        return "0x" + chunk.hex(), offset + 32

    if t in _STRING_TYPES:
        length, offset = read_uleb128(data, offset)
        chunk = data[offset:offset + length]
        if len(chunk) != length:
            raise ValueError("truncated string")
        return chunk.decode("utf-8"), offset + length

    raise ValueError(f"unsupported pure type {type_name!r}")

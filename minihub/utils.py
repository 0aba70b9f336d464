"""Utility helpers shared across the SDK."""

from __future__ import annotations

import re
import time
from typing import Any, Optional

U64_MAX = 2**64 - 1

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def normalize_address(value: str) -> str:
    """Return the canonical form of a ledger address or object id.

    Addresses are compared after lowercasing and left-padding to 64 hex digits,
    so ``0x6`` and ``0x000...006`` refer to the same object.
    """
    v = (value or "").strip()
    if not _HEX_RE.match(v):
        raise ValueError(f"not a hex address: {value!r}")
    return "0x" + v[2:].lower().rjust(64, "0")


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Compare two addresses, tolerating short or mixed-case forms."""
    if not a or not b:
        return False
    try:
        return normalize_address(a) == normalize_address(b)
    except ValueError:
        return False


def coerce_u64(value: Any) -> int:
    """Coerce a ledger integer (JSON number or decimal string) to ``int``.

    The ledger renders u64 values as strings. Python ints do not wrap, so the
    only check needed is that the value is integral and inside the u64 range.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a u64")
    if isinstance(value, int):
        n = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"non-integral value for u64: {value!r}")
        n = int(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s.isdigit():
            raise ValueError(f"not a decimal u64: {value!r}")
        n = int(s)
    else:
        raise ValueError(f"unsupported u64 representation: {type(value).__name__}")

    if n < 0 or n > U64_MAX:
        raise ValueError(f"u64 out of range: {n}")
    return n


def _option_vec(vec: Any) -> Any:
    if vec is None:
        return None
    if not isinstance(vec, (list, tuple)):
        raise ValueError(f"option vector must be a list, got {type(vec).__name__}")
    if len(vec) > 1:
        raise ValueError(f"option vector holds {len(vec)} elements")
    return vec[0] if vec else None


def unwrap_option(value: Any) -> Any:
    """Unwrap a Move ``Option<T>`` as rendered by the ledger.

    Depending on node version an option arrives as ``null`` / the bare value,
    or as ``{"vec": []}`` / ``{"vec": [x]}``. Returns None when unset.
    Raises ValueError when the vector is not a list of at most one element.
    """
    if isinstance(value, dict) and "vec" in value:
        return _option_vec(value["vec"])
    if isinstance(value, (list, tuple)):
        return _option_vec(value)
    if value == "":
        return None
    return value


def struct_name(type_tag: str) -> str:
    """Return the struct name of a Move type tag (``0x..::mod::Name<..>`` -> ``Name``)."""
    base = (type_tag or "").split("<", 1)[0]
    return base.rsplit("::", 1)[-1]

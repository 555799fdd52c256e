"""Byte magnitudes as git prints them (`5.68 MiB`, `250 bytes`)."""

import math
from typing import Final

KIB: Final = 1024
MIB: Final = KIB * 1024
GIB: Final = MIB * 1024
TIB: Final = GIB * 1024

_UNITS: Final[dict[str, int]] = {
    "b": 1,
    "byte": 1,
    "bytes": 1,
    "kib": KIB,
    "mib": MIB,
    "gib": GIB,
    "tib": TIB,
}

_SCALES: Final = ((TIB, "TiB"), (GIB, "GiB"), (MIB, "MiB"), (KIB, "KiB"))


def parse_magnitude(value: str, unit: str) -> int:
    """Convert a value and binary unit into a byte count.

    Args:
        value: Decimal number text, e.g. "5.68".
        unit: Unit text, e.g. "MiB" or "bytes" (case-insensitive).

    Returns:
        The number of bytes, rounded down. Unknown units count as bytes.
    """
    try:
        amount = float(value)
    except ValueError:
        return 0
    if not math.isfinite(amount):
        return 0
    return max(0, int(amount * _UNITS.get(unit.lower(), 1)))


def format_magnitude(count: int) -> str:
    """Render a byte count with the largest binary unit that fits."""
    for scale, name in _SCALES:
        if count >= scale:
            return f"{count / scale:.2f} {name}"
    return f"{count} byte" if count == 1 else f"{count} bytes"

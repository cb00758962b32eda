from __future__ import annotations

import re


# Kubernetes quantity: number, then a binary suffix, a decimal exponent or a decimal suffix
_QUANTITY_PATTERN = re.compile(
    r"^(?P<val>\d+(?:\.\d*)?|\.\d+)"
    r"(?:(?P<binary>Ki|Mi|Gi|Ti|Pi|Ei)|[eE](?P<exp>[+-]?\d+)|(?P<decimal>[mkMGTPE]))?$"
)

_BINARY = {"Ki": 1, "Mi": 2, "Gi": 3, "Ti": 4, "Pi": 5, "Ei": 6}
_DECIMAL = {"m": -1, "k": 1, "M": 2, "G": 3, "T": 4, "P": 5, "E": 6}


def parse_storage_gb(value: str | int | float) -> float:
    """Parse a Kubernetes storage quantity to GB (decimal, 1 GB = 1e9 bytes).

    - 10Gi => 10.737418240
    - 500M => 0.5
    - 1e9 => 1.0
    - 1000000000 => 1.0 (plain bytes)
    """
    s = str(value).strip()
    m = _QUANTITY_PATTERN.match(s)
    if not m:
        raise ValueError(f"Unknown storage quantity: {value}")
    val = float(m.group("val"))

    if m.group("binary"):
        bytes_val = val * 1024.0 ** _BINARY[m.group("binary")]
    elif m.group("exp") is not None:
        bytes_val = val * 10.0 ** int(m.group("exp"))
    elif m.group("decimal"):
        bytes_val = val * 1000.0 ** _DECIMAL[m.group("decimal")]
    else:
        bytes_val = val

    return bytes_val / 1_000_000_000.0

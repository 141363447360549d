# mcspice/utils/si_prefix.py
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from mcspice.utils.errors import SiPrefixError

# suffix -> power of ten. Case-sensitive: m = milli, M = mega.
SI_PREFIXES: dict[str, int] = {
    "a": -18,
    "f": -15,
    "p": -12,
    "n": -9,
    "u": -6,
    "m": -3,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
}

_SI_RE = re.compile(
    r"^(?P<mantissa>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)(?P<suffix>[A-Za-z]?)$"
)


def parse_si(token: str) -> Decimal:
    """
    Decode an SI-prefixed decimal such as ``1.5n`` or ``2k``.

    Raises SiPrefixError for a malformed mantissa or an unknown suffix.
    """
    m = _SI_RE.match(token.strip())
    if m is None:
        raise SiPrefixError(f"not an SI-prefixed decimal: {token!r}")

    suffix = m.group("suffix")
    if suffix and suffix not in SI_PREFIXES:
        raise SiPrefixError(f"unknown SI suffix {suffix!r} in {token!r}")

    try:
        value = Decimal(m.group("mantissa"))
    except InvalidOperation as e:
        raise SiPrefixError(f"bad mantissa in {token!r}") from e

    if suffix:
        value = value.scaleb(SI_PREFIXES[suffix])
    return value


def try_parse_si(token: str) -> Optional[Decimal]:
    try:
        return parse_si(token)
    except SiPrefixError:
        return None

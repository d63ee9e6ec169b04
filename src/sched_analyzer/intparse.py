"""Integer parsing with C ``strtol(text, &end, 0)`` semantics.

sched-analyzer has always accepted numeric arguments the way ``strtol``
reads them with base 0:

- leading whitespace is skipped and an optional sign is accepted
- ``0x``/``0X`` followed by a hex digit selects base 16
- a leading ``0`` selects base 8, anything else base 10
- the longest valid prefix is consumed and trailing text is ignored

A string in which no digit can be consumed is an error, as is a value
that does not fit a signed 64-bit ``long``.
"""

from __future__ import annotations

import re

from .errors import NumberOutOfRangeError, UnparseableNumberError

LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

# The hex branch must come first so "0x1f" is not read as octal "0".
_STRTOL_RE = re.compile(
    r"[ \t\n\v\f\r]*(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))"
)


def parse_c_long(option: str, text: str) -> int:
    """Parse *text* as a base-flexible C ``long``.

    Args:
        option: Name of the option the text belongs to, for error reporting.
        text: The raw argument text.

    Returns:
        The parsed integer.

    Raises:
        UnparseableNumberError: If no digits were found.
        NumberOutOfRangeError: If the value overflows a signed 64-bit long.
    """
    match = _STRTOL_RE.match(text)
    if match is None:
        raise UnparseableNumberError(option, text)

    if match.group("hex") is not None:
        value = int(match.group("hex"), 16)
    elif match.group("oct") is not None:
        value = int(match.group("oct"), 8)
    else:
        value = int(match.group("dec"), 10)

    if match.group("sign") == "-":
        value = -value

    if not (LONG_MIN <= value <= LONG_MAX):
        raise NumberOutOfRangeError(option, text)
    return value


def parse_bounded(option: str, text: str, minimum: int, maximum: int) -> int:
    """Parse *text* with :func:`parse_c_long` and check it lies in ``[minimum, maximum]``."""
    value = parse_c_long(option, text)
    if not (minimum <= value <= maximum):
        raise NumberOutOfRangeError(option, text)
    return value

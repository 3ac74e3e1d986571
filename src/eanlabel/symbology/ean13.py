"""
EAN-13 / JAN symbol encoding.

Turns a 12- or 13-digit identifier into the 95-module bar pattern defined
by the EAN-13 symbology. Each character of the pattern is "1" (bar) or
"0" (space):

    101 | 6 x 7 left-half modules | 01010 | 6 x 7 right-half modules | 101

The first digit is not encoded directly; it selects which of tables A and
B encodes each left-half digit. Right-half digits always use table C.

Basic usage:
    >>> encode("400638133393")[:3]
    '101'
    >>> normalize("400638133393")
    '4006381333931'
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

from eanlabel.errors import CheckDigitMismatch, InvalidDigit, InvalidFormat

SYMBOL_MODULES = 95

EDGE_GUARD = "101"
CENTER_GUARD = "01010"

ENCODING_TABLES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "A": ("0001101", "0011001", "0010011", "0111101", "0100011",
              "0110001", "0101111", "0111011", "0110111", "0001011"),
        "B": ("0100111", "0110011", "0011011", "0100001", "0011101",
              "0111001", "0000101", "0010001", "0001001", "0010111"),
        "C": ("1110010", "1100110", "1101100", "1000010", "1011100",
              "1001110", "1010000", "1000100", "1001000", "1110100"),
    }
)

# Indexed by the leading digit.
LEFT_PATTERNS: tuple[str, ...] = (
    "AAAAAA", "AABABB", "AABBAB", "AABBBA", "ABAABB",
    "ABBAAB", "ABBBAA", "ABABAB", "ABABBA", "ABBABA",
)

# Ink only where the three guard patterns sit; used for the extended guard bars.
GUARD_MASK = EDGE_GUARD + "0" * 42 + CENTER_GUARD + "0" * 42 + EDGE_GUARD

_CANDIDATE_RE = re.compile(r"[0-9]{12,13}")
_DIGITS_RE = re.compile(r"[0-9]+")


def is_candidate(value: str) -> bool:
    """Return True if value (already trimmed) is 12 or 13 ASCII digits."""
    return _CANDIDATE_RE.fullmatch(value) is not None


def check_digit(digits: str) -> int:
    """
    Compute the EAN-13 check digit for the first 12 digits of `digits`.

    Digits at even 0-based positions weigh 1, odd positions weigh 3; the
    check digit brings the weighted sum up to a multiple of 10.

    Parameters:
        digits: At least 12 decimal digits; only the first 12 are used

    Returns:
        Check digit 0-9

    Raises:
        InvalidFormat: If the first 12 characters are not all decimal digits

    Example:
        >>> check_digit("400638133393")
        1
    """
    body = digits[:12]
    if len(body) != 12 or not _DIGITS_RE.fullmatch(body):
        raise InvalidFormat(
            f"Invalid non-numeric characters for checksum: '{body}'", identifier=digits
        )
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(body))
    return (10 - total % 10) % 10


def normalize(identifier: str, *, verify_check_digit: bool = True) -> str:
    """
    Trim an identifier and return its 13-digit form.

    A 12-digit identifier gets its check digit appended. A 13-digit
    identifier is returned as-is, after its check digit is verified when
    `verify_check_digit` is set.

    Raises:
        InvalidFormat: If the result is not exactly 13 decimal digits
        CheckDigitMismatch: If verification is on and the 13th digit is wrong
    """
    code = identifier.strip()
    if len(code) == 12 and _DIGITS_RE.fullmatch(code):
        code += str(check_digit(code))
    elif verify_check_digit and len(code) == 13 and _DIGITS_RE.fullmatch(code):
        expected = check_digit(code)
        if int(code[12]) != expected:
            raise CheckDigitMismatch(code, expected)

    if len(code) != 13 or not _DIGITS_RE.fullmatch(code):
        raise InvalidFormat(
            f"Invalid JAN code format: '{code}' (input: '{identifier}')",
            identifier=identifier,
        )
    return code


def _lookup(table: str, digit: str) -> str:
    try:
        return ENCODING_TABLES[table][int(digit)]
    except (KeyError, IndexError, ValueError) as e:
        raise InvalidDigit(f"Invalid digit/pattern: table={table}, digit={digit!r}") from e


def encode_normalized(code: str) -> str:
    """
    Encode an already-normalized 13-digit code into its 95-module pattern.

    Raises:
        InvalidDigit: If a digit falls outside a table's domain
        RuntimeError: If the assembled pattern is not 95 modules long
    """
    try:
        pattern = LEFT_PATTERNS[int(code[0])]
    except (IndexError, ValueError) as e:
        raise InvalidDigit(f"Invalid first digit: {code[:1]!r}") from e

    parts = [EDGE_GUARD]
    for i in range(6):
        parts.append(_lookup(pattern[i], code[i + 1]))
    parts.append(CENTER_GUARD)
    for i in range(7, 13):
        parts.append(_lookup("C", code[i]))
    parts.append(EDGE_GUARD)

    symbol = "".join(parts)
    if len(symbol) != SYMBOL_MODULES:
        raise RuntimeError(f"Internal encoding error: {len(symbol)} modules for '{code}'")
    return symbol


def encode(identifier: str, *, verify_check_digit: bool = True) -> str:
    """
    Encode a 12- or 13-digit identifier into its 95-module EAN-13 pattern.

    Parameters:
        identifier: Raw identifier; surrounding whitespace is ignored
        verify_check_digit: Reject 13-digit input whose check digit is wrong

    Returns:
        String of 95 "0"/"1" characters

    Raises:
        InvalidFormat: If the identifier is not 12 or 13 decimal digits
        CheckDigitMismatch: If verification is on and the check digit is wrong
        InvalidDigit: If a digit falls outside a table's domain

    Example:
        >>> symbol = encode("4006381333931")
        >>> len(symbol), symbol[:3], symbol[-3:]
        (95, '101', '101')
    """
    return encode_normalized(normalize(identifier, verify_check_digit=verify_check_digit))

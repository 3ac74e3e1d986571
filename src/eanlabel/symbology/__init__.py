"""
Barcode symbologies.

Only EAN-13 (and its JAN variant) is supported.
"""

from .ean13 import (
    SYMBOL_MODULES,
    ENCODING_TABLES,
    LEFT_PATTERNS,
    GUARD_MASK,
    check_digit,
    normalize,
    encode,
    encode_normalized,
    is_candidate,
)

__all__ = [
    "SYMBOL_MODULES",
    "ENCODING_TABLES",
    "LEFT_PATTERNS",
    "GUARD_MASK",
    "check_digit",
    "normalize",
    "encode",
    "encode_normalized",
    "is_candidate",
]

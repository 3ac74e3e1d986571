"""Tests for EAN-13 symbol encoding."""

import random

import pytest

from eanlabel.errors import CheckDigitMismatch, InvalidDigit, InvalidFormat
from eanlabel.symbology import (
    ENCODING_TABLES,
    GUARD_MASK,
    LEFT_PATTERNS,
    SYMBOL_MODULES,
    check_digit,
    encode,
    encode_normalized,
    is_candidate,
    normalize,
)


# Published EAN-13 / JAN / ISBN-13 numbers with known-good check digits.
REFERENCE_CODES = [
    "4006381333931",
    "5901234123457",
    "9780306406157",
    "4901234567894",
    "0000000000000",
    "9780201379624",
]


class TestTables:
    """Tests for the encoding tables and left-pattern selector."""

    def test_every_pattern_is_seven_modules(self):
        """Test that every table entry is a 7-module 0/1 string."""
        for table in ENCODING_TABLES.values():
            assert len(table) == 10
            for pattern in table:
                assert len(pattern) == 7
                assert set(pattern) <= {"0", "1"}

    def test_table_c_is_complement_of_table_a(self):
        """Test that right-half patterns invert the left-hand odd-parity patterns."""
        for a, c in zip(ENCODING_TABLES["A"], ENCODING_TABLES["C"]):
            assert c == "".join("1" if m == "0" else "0" for m in a)

    def test_table_b_is_reversed_table_c(self):
        """Test that even-parity patterns mirror the right-half patterns."""
        for b, c in zip(ENCODING_TABLES["B"], ENCODING_TABLES["C"]):
            assert b == c[::-1]

    def test_left_patterns(self):
        """Test left-pattern selector shape; leading 0 is plain UPC-A parity."""
        assert len(LEFT_PATTERNS) == 10
        assert LEFT_PATTERNS[0] == "AAAAAA"
        for pattern in LEFT_PATTERNS:
            assert len(pattern) == 6
            assert pattern[0] == "A"

    def test_tables_are_read_only(self):
        """Test that the shared tables cannot be modified."""
        with pytest.raises(TypeError):
            ENCODING_TABLES["D"] = ("0000000",) * 10  # type: ignore[index]

    def test_guard_mask(self):
        """Test guard mask has ink only at the guard patterns."""
        assert len(GUARD_MASK) == SYMBOL_MODULES
        ink = [i for i, m in enumerate(GUARD_MASK) if m == "1"]
        assert ink == [0, 2, 46, 48, 92, 94]


class TestCheckDigit:
    """Tests for check_digit() function."""

    @pytest.mark.parametrize("code", REFERENCE_CODES)
    def test_matches_reference_codes(self, code):
        """Test computed check digit against known-good numbers."""
        assert check_digit(code[:12]) == int(code[12])

    @pytest.mark.parametrize("code", REFERENCE_CODES)
    def test_reapplying_to_full_code_reproduces_last_digit(self, code):
        """Test that the same 12-digit window is used for 12- and 13-digit input."""
        assert check_digit(code) == int(code[12])

    def test_known_example(self):
        """Test the 400638133393 example appends 1."""
        assert check_digit("400638133393") == 1

    def test_rejects_short_input(self):
        """Test that fewer than 12 digits raises InvalidFormat."""
        with pytest.raises(InvalidFormat):
            check_digit("12345")

    def test_rejects_non_digits(self):
        """Test that non-digit characters raise InvalidFormat."""
        with pytest.raises(InvalidFormat):
            check_digit("40063813339X")


class TestNormalize:
    """Tests for normalize() function."""

    def test_appends_check_digit_to_twelve_digits(self):
        """Test 12-digit input gets its check digit."""
        assert normalize("400638133393") == "4006381333931"

    def test_trims_whitespace(self):
        """Test surrounding whitespace is ignored."""
        assert normalize("  4006381333931\n") == "4006381333931"

    def test_valid_thirteen_digits_pass_through(self):
        """Test a correct 13-digit code is returned unchanged."""
        assert normalize("4901234567894") == "4901234567894"

    def test_wrong_check_digit_rejected(self):
        """Test that verification catches a bad 13th digit."""
        with pytest.raises(CheckDigitMismatch) as exc_info:
            normalize("4006381333932")
        assert exc_info.value.expected == 1

    def test_mismatch_is_an_invalid_format(self):
        """Test CheckDigitMismatch can be handled as InvalidFormat."""
        with pytest.raises(InvalidFormat):
            normalize("4006381333932")

    def test_wrong_check_digit_passes_without_verification(self):
        """Test pass-through when verification is disabled."""
        assert normalize("4006381333932", verify_check_digit=False) == "4006381333932"

    @pytest.mark.parametrize(
        "value",
        ["", "12345", "40063813339", "40063813339311", "4006381333a31", "400638133393 1", "abcdefghijkl"],
    )
    def test_malformed_input_rejected(self, value):
        """Test wrong lengths and non-digits raise InvalidFormat."""
        with pytest.raises(InvalidFormat):
            normalize(value)

    def test_non_ascii_digits_rejected(self):
        """Test full-width digits are not accepted as decimal digits."""
        with pytest.raises(InvalidFormat):
            normalize("４００６３８１３３３９３")


class TestIsCandidate:
    """Tests for is_candidate() function."""

    def test_accepts_twelve_and_thirteen_digits(self):
        assert is_candidate("400638133393")
        assert is_candidate("4006381333931")

    def test_rejects_other_lengths_and_characters(self):
        assert not is_candidate("12345")
        assert not is_candidate("40063813339311")
        assert not is_candidate("4006381333931\n")
        assert not is_candidate("400638133393a")
        assert not is_candidate("")


class TestEncode:
    """Tests for encode() function."""

    def test_reference_symbol(self):
        """Test the full module pattern of 4006381333931 (leading 4 selects ABAABB)."""
        expected = (
            "101"
            + "0001101" + "0100111" + "0101111" + "0111101" + "0001001" + "0110011"
            + "01010"
            + "1000010" + "1000010" + "1000010" + "1110100" + "1000010" + "1100110"
            + "101"
        )
        assert encode("4006381333931") == expected

    def test_twelve_digit_example(self):
        """Test 400638133393 encodes like its 13-digit form."""
        symbol = encode("400638133393")
        assert len(symbol) == 95
        assert symbol.startswith("101")
        assert symbol.endswith("101")
        assert symbol == encode("4006381333931")

    def test_random_twelve_digit_inputs(self):
        """Test 12-digit input equals explicit check-digit input for many values."""
        rng = random.Random(1234)
        for _ in range(200):
            digits = "".join(rng.choice("0123456789") for _ in range(12))
            symbol = encode(digits)
            assert len(symbol) == 95
            assert set(symbol) <= {"0", "1"}
            assert symbol == encode(digits + str(check_digit(digits)))

    @pytest.mark.parametrize("code", REFERENCE_CODES)
    def test_guard_patterns_are_fixed(self, code):
        """Test start, center and end guards sit at fixed module positions."""
        symbol = encode(code)
        assert symbol[0:3] == "101"
        assert symbol[45:50] == "01010"
        assert symbol[92:95] == "101"
        for i, m in enumerate(GUARD_MASK):
            if m == "1":
                assert symbol[i] == "1"

    def test_deterministic(self):
        """Test identical input yields identical output."""
        assert encode("5901234123457") == encode("5901234123457")

    def test_each_left_digit_uses_selected_table(self):
        """Test left-half digits follow the leading digit's parity pattern."""
        code = "5901234123457"
        symbol = encode(code)
        pattern = LEFT_PATTERNS[5]
        for i in range(6):
            chunk = symbol[3 + 7 * i: 10 + 7 * i]
            assert chunk == ENCODING_TABLES[pattern[i]][int(code[i + 1])]

    def test_rejects_non_digit(self):
        """Test non-digit input raises InvalidFormat."""
        with pytest.raises(InvalidFormat):
            encode("40063813339X1")

    def test_rejects_wrong_length(self):
        """Test 11 and 14 digit input raises InvalidFormat."""
        with pytest.raises(InvalidFormat):
            encode("40063813339")
        with pytest.raises(InvalidFormat):
            encode("40063813339311")

    def test_encode_normalized_rejects_out_of_domain_digit(self):
        """Test table lookups outside 0-9 raise InvalidDigit."""
        with pytest.raises(InvalidDigit):
            encode_normalized("400638133393x")
        with pytest.raises(InvalidDigit):
            encode_normalized("x006381333931")

"""
Tests for dkalc.DecimalEngine

Covers:
1. Construction and decimal / hexadecimal rendering
2. Signed comparison
3. add / sub / mul / div / div_mod with every sign combination
4. Overflow and division by zero
5. factorial and bit_and
6. Number literal parsing (decimal, hex, binary, separators)
"""

import itertools

import pytest

from dkalc import error as E
from dkalc.DecimalEngine import (
    FRAC_LEN,
    INT_LEN,
    MAX_LEN,
    CharStream,
    FixedDecimal,
)


def num(text):
    return FixedDecimal.parse_str(text)


def i(value):
    return FixedDecimal.from_integer(value)


TWENTY_NINES = "9" * INT_LEN


# =============================================================================
# CONSTRUCTION AND RENDERING
# =============================================================================


class TestConstruction:
    def test_zero_renders_as_zero(self):
        assert FixedDecimal.zero().to_decimal_string() == "0"
        assert FixedDecimal.zero().is_zero()

    def test_from_integer(self):
        assert str(i(0)) == "0"
        assert str(i(7)) == "7"
        assert str(i(1402)) == "1402"
        assert str(i(-1402)) == "-1402"

    def test_from_integer_too_large(self):
        with pytest.raises(E.Overflow):
            i(10 ** INT_LEN)

    def test_digits_are_fixed_length(self):
        assert len(i(123).digits) == MAX_LEN
        with pytest.raises(ValueError):
            FixedDecimal([1, 2, 3])

    def test_negative_zero_is_normalised(self):
        """A zero built with the sign set behaves like plain zero."""
        negative_zero = FixedDecimal([0] * MAX_LEN, negative=True)
        assert negative_zero.negative is False
        assert negative_zero == FixedDecimal.zero()
        assert str(negative_zero) == "0"
        assert str(-FixedDecimal.zero()) == "0"

    def test_smallest_fraction(self):
        digits = [0] * MAX_LEN
        digits[FRAC_LEN - 1] = 1
        assert str(FixedDecimal(digits)) == "0.1"

    def test_decimal_string_window(self):
        assert str(num("1402.658")) == "1402.658"
        assert str(num("0.05")) == "0.05"
        assert str(num("100.500")) == "100.5"
        assert str(num("-0.25")) == "-0.25"

    def test_repr(self):
        assert repr(num("1.5")) == "FixedDecimal('1.5')"


class TestHexString:
    def test_positive(self):
        assert i(255).to_hex_string() == "0xFF"
        assert i(65535).to_hex_string() == "0xFFFF"
        assert i(720).to_hex_string() == "0x2D0"

    def test_zero(self):
        assert FixedDecimal.zero().to_hex_string() == "0x0"

    def test_fraction_is_ignored(self):
        assert num("12.7").to_hex_string() == "0xC"

    def test_negative_uses_four_nibbles_minimum(self):
        assert i(-1).to_hex_string() == "0xFFFF"
        assert i(-2).to_hex_string() == "0xFFFE"
        assert i(-256).to_hex_string() == "0xFF00"

    def test_negative_keeps_at_least_one_leading_f(self):
        assert i(-4096).to_hex_string() == "0xFFFFF000"

    def test_negative_widens_to_eight_and_sixteen(self):
        assert i(-65536).to_hex_string() == "0xFFFF0000"
        assert i(-4294967296).to_hex_string() == "0xFFFFFFFF00000000"


# =============================================================================
# COMPARISON
# =============================================================================


class TestCompare:
    VALUES = ["-100", "-2", "-1.5", "-1", "-0.00000000000000000001", "0",
              "0.5", "1", "1.5", "2", "100"]

    def test_sorted_order(self):
        values = [num(v) for v in self.VALUES]
        for smaller, larger in zip(values, values[1:]):
            assert FixedDecimal.compare(smaller, larger) == -1
            assert smaller < larger
            assert larger > smaller

    def test_antisymmetry(self):
        values = [num(v) for v in self.VALUES]
        for a, b in itertools.product(values, repeat=2):
            assert FixedDecimal.compare(a, b) == -FixedDecimal.compare(b, a)

    def test_equality(self):
        assert num("2.50") == num("2.5")
        assert FixedDecimal.compare(i(3), i(3)) == 0
        assert i(3) != i(-3)
        assert hash(num("2.50")) == hash(num("2.5"))

    def test_magnitude_compare_ignores_sign(self):
        assert FixedDecimal.compare_magnitude(i(-5), i(3)) == 1

    def test_not_comparable_with_int(self):
        assert (i(1) == 1) is False


# =============================================================================
# ARITHMETIC
# =============================================================================


class TestAddSub:
    def test_add_sign_combinations(self):
        assert str(FixedDecimal.add(i(1), i(2))) == "3"
        assert str(FixedDecimal.add(i(-1), i(-2))) == "-3"
        assert str(FixedDecimal.add(i(-1), i(2))) == "1"
        assert str(FixedDecimal.add(i(1), i(-2))) == "-1"

    def test_sub_sign_combinations(self):
        assert str(FixedDecimal.sub(i(2), i(1))) == "1"
        assert str(FixedDecimal.sub(i(-2), i(-1))) == "-1"
        assert str(FixedDecimal.sub(i(-2), i(1))) == "-3"
        assert str(FixedDecimal.sub(i(2), i(-1))) == "3"

        assert str(FixedDecimal.sub(i(1), i(2))) == "-1"
        assert str(FixedDecimal.sub(i(-1), i(-2))) == "1"
        assert str(FixedDecimal.sub(i(-1), i(2))) == "-3"
        assert str(FixedDecimal.sub(i(1), i(-2))) == "3"

    def test_carry_and_borrow_across_decimal_point(self):
        assert str(num("0.99") + num("0.01")) == "1"
        assert str(num("1") - num("0.00000000000000000001")) == "0.99999999999999999999"
        assert str(num("1000") - num("0.5")) == "999.5"

    def test_add_negation_is_zero(self):
        for text in ["0", "1", "-7.25", "12345.6789", TWENTY_NINES]:
            a = num(text)
            total = FixedDecimal.add(a, a.negate())
            assert total.is_zero()
            assert total.negative is False

    def test_add_overflow(self):
        with pytest.raises(E.Overflow):
            FixedDecimal.add(num(TWENTY_NINES), num(TWENTY_NINES))

    def test_negative_add_overflow(self):
        with pytest.raises(E.Overflow):
            FixedDecimal.sub(num("-" + TWENTY_NINES), num(TWENTY_NINES))

    def test_mixed_signs_never_overflow(self):
        assert (num(TWENTY_NINES) - num(TWENTY_NINES)).is_zero()


class TestMul:
    def test_integers(self):
        assert str(FixedDecimal.mul(i(3), i(5))) == "15"
        assert str(FixedDecimal.mul(i(30), i(5))) == "150"
        assert str(FixedDecimal.mul(i(30), i(50))) == "1500"
        assert str(FixedDecimal.mul(i(99), i(99))) == "9801"

    def test_sign_is_xor(self):
        assert str(FixedDecimal.mul(i(4), i(7))) == "28"
        assert str(FixedDecimal.mul(i(-4), i(7))) == "-28"
        assert str(FixedDecimal.mul(i(4), i(-7))) == "-28"
        assert str(FixedDecimal.mul(i(-4), i(-7))) == "28"

    def test_fractions(self):
        assert str(num("0.5") * num("0.5")) == "0.25"
        assert str(num("1.5") * i(-2)) == "-3"
        assert str(num("2.25") * num("4")) == "9"

    def test_product_below_precision_is_truncated(self):
        tiny = num("0.00000000000000000001")
        assert (tiny * num("0.5")).is_zero()

    def test_zero_product_is_not_negative(self):
        product = i(-5) * FixedDecimal.zero()
        assert product.negative is False
        assert str(product) == "0"

    def test_top_digit_carry_is_kept(self):
        """The carry out of the highest digit of a partial product lands in the result."""
        big = num("9" + "0" * (INT_LEN - 1))
        assert str(big * num("0.2")) == "18" + "0" * (INT_LEN - 2)

    def test_overflow(self):
        with pytest.raises(E.Overflow):
            FixedDecimal.mul(num(TWENTY_NINES), num(TWENTY_NINES))

    def test_overflow_by_one_digit(self):
        with pytest.raises(E.Overflow):
            num("1" + "0" * (INT_LEN - 1)) * i(10)


class TestDiv:
    def test_exact_quotients(self):
        assert str(FixedDecimal.div(i(1000), i(64))) == "15.625"
        assert str(FixedDecimal.div(i(-1000), i(64))) == "-15.625"
        assert str(FixedDecimal.div(i(1000), i(-64))) == "-15.625"
        assert str(FixedDecimal.div(i(-1000), i(-64))) == "15.625"

    def test_fractional_divisor(self):
        assert str(FixedDecimal.div(i(2), num("1.6"))) == "1.25"

    def test_quotient_is_truncated(self):
        assert str(i(1) / i(3)) == "0." + "3" * FRAC_LEN
        assert str(i(2) / i(3)) == "0." + "6" * FRAC_LEN

    def test_divide_by_zero(self):
        with pytest.raises(E.DivideByZero):
            FixedDecimal.div(i(5), FixedDecimal.zero())

    def test_quotient_too_large(self):
        with pytest.raises(E.Overflow):
            num("1" + "0" * (INT_LEN - 1)) / num("0.001")

    def test_large_divisor(self):
        assert str(num(TWENTY_NINES) / num(TWENTY_NINES)) == "1"

    @pytest.mark.parametrize("a, b", [
        ("10", "3"),
        ("1", "7"),
        ("-22", "7"),
        ("123.456", "0.789"),
    ])
    def test_mul_after_div_is_close(self, a, b):
        a, b = num(a), num(b)
        quotient = a / b
        error = a - quotient * b
        tolerance = num("0.0000000000000000001")
        assert -tolerance <= error <= tolerance


class TestDivMod:
    def test_sign_follows_divisor(self):
        assert str(FixedDecimal.div_mod(i(100), i(48))) == "4"
        assert str(FixedDecimal.div_mod(i(-100), i(48))) == "4"
        assert str(FixedDecimal.div_mod(i(100), i(-48))) == "-4"
        assert str(FixedDecimal.div_mod(i(-100), i(-48))) == "-4"

    def test_fractional_remainder(self):
        assert str(num("7.5") % i(2)) == "1.5"

    def test_exact_division_has_no_sign(self):
        remainder = i(96) % i(-48)
        assert remainder.is_zero()
        assert remainder.negative is False

    def test_divide_by_zero(self):
        with pytest.raises(E.DivideByZero):
            FixedDecimal.div_mod(i(5), FixedDecimal.zero())


class TestFactorial:
    def test_small_values(self):
        assert FixedDecimal.factorial(i(0)) == i(1)
        assert FixedDecimal.factorial(i(1)) == i(1)
        assert FixedDecimal.factorial(i(5)) == i(120)
        assert str(FixedDecimal.factorial(i(6))) == "720"

    def test_negative_keeps_sign(self):
        assert FixedDecimal.factorial(i(-5)) == i(-120)

    def test_fraction_is_truncated(self):
        assert FixedDecimal.factorial(num("3.9")) == i(6)
        assert FixedDecimal.factorial(num("0.5")) == i(1)

    def test_largest_factorial_that_fits(self):
        assert str(FixedDecimal.factorial(i(21))) == "51090942171709440000"

    def test_overflow(self):
        with pytest.raises(E.Overflow):
            FixedDecimal.factorial(i(22))


class TestBitAnd:
    def test_positive(self):
        assert FixedDecimal.bit_and(i(12), i(10)) == i(8)
        assert (i(0xFF) & i(0x0F)) == i(15)
        assert FixedDecimal.bit_and(i(0), i(12345)) == i(0)

    def test_fraction_is_truncated(self):
        assert FixedDecimal.bit_and(num("255.9"), i(15)) == i(15)

    def test_one_negative_operand(self):
        assert FixedDecimal.bit_and(i(-1), i(5)) == i(5)
        assert FixedDecimal.bit_and(i(-16), i(0xFF)) == i(0xF0)

    def test_both_negative(self):
        assert FixedDecimal.bit_and(i(-2), i(-3)) == i(-4)
        assert FixedDecimal.bit_and(i(-1), i(-1)) == i(-1)


# =============================================================================
# PARSING
# =============================================================================


class TestParse:
    def test_decimal(self):
        assert str(num("1.02")) == "1.02"
        assert str(num("0")) == "0"
        assert str(num("007")) == "7"

    def test_integer_part_limit(self):
        assert str(num("1" * (INT_LEN - 1) + "2")) == "1" * (INT_LEN - 1) + "2"
        with pytest.raises(E.IntegerPartOverflow):
            num("1" * (INT_LEN - 1) + "23")

    def test_fractional_part_limit(self):
        assert str(num("0." + "1" * FRAC_LEN)) == "0." + "1" * FRAC_LEN
        with pytest.raises(E.FractionalPartOverflow):
            num("0." + "1" * (FRAC_LEN + 1))

    def test_underscore_separators(self):
        assert str(num("1_000")) == "1000"
        assert str(num("1_234_567")) == "1234567"
        assert str(num("14_950.234_845")) == "14950.234845"

    def test_double_underscore(self):
        with pytest.raises(E.BadCharacter):
            num("1__000")

    def test_hex(self):
        assert str(num("0xffff")) == "65535"
        assert str(num("0xFF")) == "255"
        assert str(num("0xab")) == "171"
        assert str(num("0x0")) == "0"

    def test_hex_too_large(self):
        with pytest.raises(E.Overflow):
            num("0x" + "f" * 17)

    def test_binary(self):
        assert str(num("0b0001")) == "1"
        assert str(num("0b1001")) == "9"
        assert str(num("0b11110000")) == "240"
        assert str(num("0b1111_0000")) == "240"

    def test_bad_radix_marker(self):
        with pytest.raises(E.BadRadixMarker):
            num("12x")
        with pytest.raises(E.BadRadixMarker):
            num("0x1x")
        with pytest.raises(E.BadRadixMarker):
            num("0b101b")
        with pytest.raises(E.BadRadixMarker):
            num("1b")

    def test_nothing_to_parse(self):
        stream = CharStream("abc")
        with pytest.raises(E.NoInput):
            FixedDecimal.parse(stream)
        assert stream.position == 0

        with pytest.raises(E.NoInput):
            FixedDecimal.parse(CharStream(""))

    def test_stops_at_first_non_number_character(self):
        stream = CharStream("12+3")
        assert str(FixedDecimal.parse(stream)) == "12"
        assert stream.peek() == "+"

    def test_second_dot_ends_the_number(self):
        stream = CharStream("1.2.3")
        assert str(FixedDecimal.parse(stream)) == "1.2"
        assert stream.position == 3

    def test_parse_str_requires_full_input(self):
        with pytest.raises(E.BadCharacter):
            num("12a")

    def test_parse_str_accepts_minus(self):
        assert num("-4.5") == FixedDecimal.zero() - num("4.5")

    def test_round_trip_of_arithmetic_results(self):
        results = [
            i(1) / i(3),
            i(-22) / i(7),
            num("123.456") * num("-0.789"),
            FixedDecimal.factorial(i(20)),
            num(TWENTY_NINES) - num("0.00000000000000000001"),
            i(100) % i(-48),
        ]
        for value in results:
            assert num(value.to_decimal_string()) == value

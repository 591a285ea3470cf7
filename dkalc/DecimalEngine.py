# DecimalEngine.py
"""""
Fixed-point decimal numbers for the calculator.

A FixedDecimal stores a sign flag and a fixed list of decimal digits,
least significant digit first. The first FRAC_LEN digits are the
fractional part, the next INT_LEN digits the integer part:

    1402.658 -> 0,0,...,0,8,5,6 | 2,0,4,1,0,...,0
                fractional part   integer part

Every operation works digit by digit (carry, borrow, long division) and
returns a new value. The whole number is never handed to int/Decimal
arithmetic, so precision and overflow behave the same on every platform.
"""""

import functools

from . import error as E


FRAC_LEN = 20   # number of digits used for the fractional part
INT_LEN = 20    # number of digits used for the integer part

MAX_LEN = FRAC_LEN + INT_LEN
MAX_LEN_MUL = MAX_LEN * 2 + 1   # room for a full product plus the last carry

INT_START = FRAC_LEN

DIGITS = "0123456789"
HEX_DIGITS = "0123456789ABCDEF"

DIGIT_VALUES = {c: i for i, c in enumerate(DIGITS)}
HEX_VALUES = {c: i for i, c in enumerate(HEX_DIGITS)}
HEX_VALUES.update({c.lower(): i for c, i in HEX_VALUES.items()})


# -----------------------------
# Digit list helpers
# -----------------------------

def find_bounds(digits):
    """Return (start_at, stop_at), the slice of digits worth printing.

    start_at is the lowest non-zero fractional digit (FRAC_LEN if none),
    stop_at is one past the highest non-zero integer digit, but always
    keeps the units digit.
    """
    start_at = 0
    while start_at < FRAC_LEN and digits[start_at] == 0:
        start_at += 1

    stop_at = len(digits)
    while stop_at > FRAC_LEN + 1 and digits[stop_at - 1] == 0:
        stop_at -= 1
    return start_at, stop_at


def compare_digits(digits0, digits1):
    """Compare two digit lists of the same length (little-endian) by magnitude."""
    for i in reversed(range(len(digits0))):
        if digits0[i] < digits1[i]:
            return -1
        elif digits0[i] > digits1[i]:
            return 1
    return 0


def accumulate(digits0, digits1):
    """Add two digit lists of the same length; a final carry means overflow."""
    result = []
    carry = 0
    for x, y in zip(digits0, digits1):
        z = x + y + carry
        carry = z // 10
        result.append(z % 10)
    if carry != 0:
        raise E.Overflow()
    return result


def subtract_digits(digits0, digits1):
    """digits0 - digits1, both little-endian. digits0 must not be smaller."""
    result = []
    borrow = 0
    for x, y in zip(digits0, digits1):
        y += borrow
        if x >= y:
            result.append(x - y)
            borrow = 0
        else:
            result.append(10 + x - y)
            borrow = 1
    return result


def multiply_line(digits, digit, shift):
    """Multiply a digit list by one digit; the partial product is shifted by `shift`."""
    line = [0] * MAX_LEN_MUL
    carry = 0
    for i, d in enumerate(digits):
        z = digit * d + carry
        carry = z // 10
        line[shift + i] = z % 10
    line[shift + len(digits)] = carry
    return line


def long_divide(dividend, divisor, extra_steps):
    """Long division of two MAX_LEN digit lists by repeated subtraction.

    The dividend is brought down one digit at a time, most significant
    first, followed by `extra_steps` zeros. Returns (quotient, remainder):
    the quotient is little-endian with MAX_LEN + extra_steps digits, the
    remainder has MAX_LEN + 1 digits.

    Internally the running remainder is kept most-significant-first so two
    lists of the same length compare like the numbers they hold.
    """
    divisor_be = [0] + list(reversed(divisor))
    remainder_be = [0] * (MAX_LEN + 1)
    quotient = []

    for step in range(MAX_LEN + extra_steps):
        incoming = dividend[MAX_LEN - 1 - step] if step < MAX_LEN else 0
        # remainder * 10 + incoming; the top digit is always 0 here
        remainder_be = remainder_be[1:] + [incoming]

        counter = 0
        while remainder_be >= divisor_be:
            remainder_be = subtract_be(remainder_be, divisor_be)
            counter += 1
        quotient.append(counter)

    quotient.reverse()
    remainder_be.reverse()
    return quotient, remainder_be


def subtract_be(digits0, digits1):
    """Same as subtract_digits for most-significant-first lists."""
    result = subtract_digits(digits0[::-1], digits1[::-1])
    result.reverse()
    return result


def twos_complement(nibbles):
    """Negate a little-endian list of hex nibbles (invert, then add one)."""
    result = []
    carry = 1
    for nibble in nibbles:
        z = (0x0F - nibble) + carry
        carry = z // 16
        result.append(z % 16)
    return result


# -----------------------------
# Character stream
# -----------------------------

class CharStream:
    """Peekable cursor over the input text, shared by the number parser and the tokenizer."""

    def __init__(self, text):
        self.text = text
        self.position = 0

    def peek(self):
        if self.position < len(self.text):
            return self.text[self.position]
        return None

    def next(self):
        current_char = self.peek()
        if current_char is not None:
            self.position += 1
        return current_char

    def __repr__(self):
        return f"CharStream({self.text!r}, position={self.position})"


# -----------------------------
# FixedDecimal
# -----------------------------

@functools.total_ordering
class FixedDecimal:
    """Sign-magnitude fixed-point decimal value.

    Instances are immutable: `digits` is a tuple and every operation
    returns a new FixedDecimal. A zero magnitude is always stored as
    non-negative.
    """

    def __init__(self, digits=None, negative=False):
        if digits is None:
            digits = (0,) * MAX_LEN
        digits = tuple(digits)
        if len(digits) != MAX_LEN:
            raise ValueError(f"FixedDecimal needs {MAX_LEN} digits, got {len(digits)}")
        self.digits = digits
        self.negative = bool(negative) and any(digits)

    # --- construction ---

    @classmethod
    def zero(cls):
        return cls()

    @classmethod
    def from_integer(cls, value):
        """Exact conversion of a Python int."""
        negative = value < 0
        if negative:
            value = -value

        digits = [0] * MAX_LEN
        index = INT_START
        while value != 0:
            if index == MAX_LEN:
                raise E.Overflow()
            digits[index] = value % 10
            value //= 10
            index += 1
        return cls(digits, negative)

    @classmethod
    def from_nibbles(cls, nibbles):
        """Build a value from unsigned little-endian hex nibbles.

        Uses repeated multiply-and-add with powers of sixteen, so a value
        too large for the integer part raises Overflow.
        """
        top = len(nibbles)
        while top > 0 and nibbles[top - 1] == 0:
            top -= 1

        sixteen = cls.from_integer(16)
        power_of_16 = cls.from_integer(1)
        result = cls.zero()
        for i in range(top):
            if nibbles[i] != 0:
                term = cls.mul(cls.from_integer(nibbles[i]), power_of_16)
                result = cls.add(result, term)
            if i + 1 < top:
                power_of_16 = cls.mul(power_of_16, sixteen)
        return result

    # --- inspection ---

    def is_zero(self):
        return not any(self.digits)

    def negate(self):
        return FixedDecimal(self.digits, not self.negative)

    @staticmethod
    def compare(nv0, nv1):
        """Signed total order: -1, 0 or 1."""
        if nv0.negative != nv1.negative:
            return -1 if nv0.negative else 1
        magnitude = compare_digits(nv0.digits, nv1.digits)
        return -magnitude if nv0.negative else magnitude

    @staticmethod
    def compare_magnitude(nv0, nv1):
        return compare_digits(nv0.digits, nv1.digits)

    # --- unsigned building blocks ---

    @staticmethod
    def _add_u(nv0, nv1):
        """Add magnitudes, ignoring signs."""
        return FixedDecimal(accumulate(nv0.digits, nv1.digits))

    @staticmethod
    def _sub_u(nv0, nv1):
        """Subtract magnitudes; the result is negative when |nv0| < |nv1|."""
        swap = compare_digits(nv0.digits, nv1.digits) == -1
        if swap:
            nv0, nv1 = nv1, nv0
        return FixedDecimal(subtract_digits(nv0.digits, nv1.digits), swap)

    @staticmethod
    def _mul_u(nv0, nv1):
        """Schoolbook multiplication of the magnitudes."""
        result = [0] * MAX_LEN_MUL
        for i, digit in enumerate(nv1.digits):
            if digit == 0:
                continue
            line = multiply_line(nv0.digits, digit, i)
            result = accumulate(line, result)

        # Both operands carry FRAC_LEN decimals, so the product carries twice
        # as many. Keep the window that lines up with a single FRAC_LEN.
        if any(result[FRAC_LEN + MAX_LEN:]):
            raise E.Overflow()
        return FixedDecimal(result[FRAC_LEN:FRAC_LEN + MAX_LEN])

    # --- arithmetic ---

    @staticmethod
    def add(nv0, nv1):
        if not nv0.negative and not nv1.negative:
            return FixedDecimal._add_u(nv0, nv1)
        elif nv0.negative and nv1.negative:
            return FixedDecimal._add_u(nv0, nv1).negate()
        elif nv0.negative:
            return FixedDecimal._sub_u(nv1, nv0)
        # not nv0.negative and nv1.negative
        return FixedDecimal._sub_u(nv0, nv1)

    @staticmethod
    def sub(nv0, nv1):
        if nv0.negative and not nv1.negative:
            return FixedDecimal._add_u(nv0, nv1).negate()
        elif nv0.negative and nv1.negative:
            return FixedDecimal._sub_u(nv1, nv0)
        elif not nv0.negative and nv1.negative:
            return FixedDecimal._add_u(nv0, nv1)
        # not nv0.negative and not nv1.negative
        return FixedDecimal._sub_u(nv0, nv1)

    @staticmethod
    def mul(nv0, nv1):
        product = FixedDecimal._mul_u(nv0, nv1)
        return FixedDecimal(product.digits, nv0.negative != nv1.negative)

    @staticmethod
    def div(nv0, nv1):
        """Quotient truncated to FRAC_LEN decimals."""
        if nv1.is_zero():
            raise E.DivideByZero()

        quotient, _ = long_divide(nv0.digits, nv1.digits, FRAC_LEN)
        if any(quotient[MAX_LEN:]):
            raise E.Overflow()
        return FixedDecimal(quotient[:MAX_LEN], nv0.negative != nv1.negative)

    @staticmethod
    def div_mod(nv0, nv1):
        """Remainder of |nv0| / |nv1| (integer quotient), with the divisor's sign."""
        if nv1.is_zero():
            raise E.DivideByZero()

        _, remainder = long_divide(nv0.digits, nv1.digits, 0)
        return FixedDecimal(remainder[:MAX_LEN], nv1.negative)

    @staticmethod
    def factorial(n):
        """n! of the integer part of n.

        The sign of n is put back on the result, so (-5)! gives -120.
        """
        sign = n.negative
        n = FixedDecimal((0,) * FRAC_LEN + n.digits[INT_START:])
        one = FixedDecimal.from_integer(1)
        if n.is_zero():
            return one

        value = n
        while True:
            n = FixedDecimal._sub_u(n, one)
            if n.is_zero():
                break
            value = FixedDecimal._mul_u(value, n)
        return FixedDecimal(value.digits, sign)

    @staticmethod
    def bit_and(left, right):
        """Bitwise AND on the 80-bit two's complement form of the integer parts."""
        nibbles = [x & y for x, y in zip(left.to_nibbles(), right.to_nibbles())]
        if left.negative and right.negative:
            # Sign bits are both set: the result is negative too
            return FixedDecimal.from_nibbles(twos_complement(nibbles)).negate()
        return FixedDecimal.from_nibbles(nibbles)

    # --- conversion ---

    def to_nibbles(self):
        """Integer part as INT_LEN little-endian hex nibbles (two's complement if negative)."""
        sixteen = FixedDecimal.from_integer(16)
        nibbles = [0] * INT_LEN
        value = self.digits
        for i in range(INT_LEN):
            quotient, remainder = long_divide(value, sixteen.digits, 0)
            nibbles[i] = remainder[INT_START + 1] * 10 + remainder[INT_START]
            value = [0] * FRAC_LEN + quotient[:INT_LEN]
            if not any(value):
                break

        if self.negative:
            nibbles = twos_complement(nibbles)
        return nibbles

    def to_decimal_string(self):
        start_at, stop_at = find_bounds(self.digits)

        text = "-" if self.negative else ""
        text += "".join(DIGITS[d] for d in reversed(self.digits[FRAC_LEN:stop_at]))
        if start_at < FRAC_LEN:
            text += "."
            text += "".join(DIGITS[d] for d in reversed(self.digits[start_at:FRAC_LEN]))
        return text

    def to_hex_string(self):
        """Hexadecimal rendering of the integer part.

        Negative values show a limited run of leading F nibbles: the
        width is rounded up to 4, 8 or 16 nibbles, with at least one F.
        """
        nibbles = self.to_nibbles()

        if self.negative:
            stop_at = len(nibbles)
            while stop_at > 1 and nibbles[stop_at - 1] == 0x0F:
                stop_at -= 1

            # + 1 because we want at least one F
            min_len = stop_at + 1
            if min_len < 4:
                limit = 4
            elif min_len < 8:
                limit = 8
            elif min_len < 16:
                limit = 16
            else:
                limit = min_len
            nibbles = nibbles[:limit]

        stop_at = len(nibbles)
        while stop_at > 1 and nibbles[stop_at - 1] == 0:
            stop_at -= 1
        return "0x" + "".join(HEX_DIGITS[n] for n in reversed(nibbles[:stop_at]))

    # --- parsing ---

    @classmethod
    def parse(cls, stream):
        """Parse a positive number from a CharStream.

        Accepts decimal (14_950.234_845), hexadecimal (0xffff) and binary
        (0b1010) literals. Digits can be grouped with single underscores.
        Raises NoInput without consuming anything when the stream does not
        start with a digit.
        """
        current_char = stream.peek()
        if current_char is None or current_char not in DIGIT_VALUES:
            raise E.NoInput()
        first_digit = DIGIT_VALUES[current_char]
        stream.next()

        digits = [0] * MAX_LEN
        digits[INT_START] = first_digit
        hex_digits = [first_digit]
        binary = cls.zero()
        two = cls.from_integer(2)

        shift_count = 1
        dot_found = False
        sep_found = False
        radix = 10
        radix_found = False
        frac_index = FRAC_LEN

        while True:
            current_char = stream.peek()
            if current_char is None:
                break

            if current_char == "x" or (current_char == "b" and radix != 16):
                # Only valid right after a single leading '0'
                if radix_found or dot_found or shift_count != 1 or first_digit != 0:
                    raise E.BadRadixMarker(f"Bad radix marker: '{current_char}'")
                radix = 16 if current_char == "x" else 2
                radix_found = True

            elif current_char == ".":
                if dot_found or radix != 10:
                    break
                dot_found = True

            elif current_char == "_":
                if sep_found:
                    raise E.BadCharacter("Bad character: '_' (double separator)")
                sep_found = True

            elif radix == 2:
                if current_char not in ("0", "1"):
                    break
                sep_found = False
                binary = cls._add_u(cls._mul_u(binary, two), cls.from_integer(DIGIT_VALUES[current_char]))

            else:
                values = HEX_VALUES if radix == 16 else DIGIT_VALUES
                if current_char not in values:
                    break
                digit = values[current_char]
                sep_found = False

                if not dot_found:
                    if shift_count == INT_LEN:
                        raise E.IntegerPartOverflow()
                    shift_count += 1
                    if radix == 16:
                        hex_digits.append(digit)
                    else:
                        # Multiply by 10, then insert the new units digit
                        digits = [0] + digits[:-1]
                        digits[INT_START] = digit
                else:
                    if frac_index == 0:
                        raise E.FractionalPartOverflow()
                    frac_index -= 1
                    digits[frac_index] = digit

            stream.next()

        if radix == 16:
            return cls.from_nibbles(hex_digits[::-1])
        elif radix == 2:
            return binary
        return cls(digits)

    @classmethod
    def parse_str(cls, text):
        """Parse a whole string, with an optional leading '-'."""
        stream = CharStream(text)
        negative = stream.peek() == "-"
        if negative:
            stream.next()
        value = cls.parse(stream)
        if stream.peek() is not None:
            raise E.BadCharacter(f"Bad character: '{stream.peek()}'")
        return value.negate() if negative else value

    # --- Python protocol ---

    def __add__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.add(self, other)

    def __sub__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.sub(self, other)

    def __mul__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.mul(self, other)

    def __truediv__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.div(self, other)

    def __mod__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.div_mod(self, other)

    def __and__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.bit_and(self, other)

    def __neg__(self):
        return self.negate()

    def __eq__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.compare(self, other) == 0

    def __lt__(self, other):
        if not isinstance(other, FixedDecimal):
            return NotImplemented
        return FixedDecimal.compare(self, other) < 0

    def __hash__(self):
        return hash((self.negative, self.digits))

    def __str__(self):
        return self.to_decimal_string()

    def __repr__(self):
        return f"FixedDecimal('{self.to_decimal_string()}')"

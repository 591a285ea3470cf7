# ScientificEngine
"""""
Named unary functions that can be called from an expression as name(argument).

All functions are built from FixedDecimal operations only, so results are
truncated to the same fixed precision as the rest of the calculator.
"""""

from . import error as E
from .DecimalEngine import FixedDecimal


SQRT_MAX_ITERATIONS = 100
COS_MAX_TERMS = 40


def zero(argument, **options):
    return FixedDecimal.zero()


def same(argument, **options):
    return argument


def sqrt(argument, sqrt_max_iterations=SQRT_MAX_ITERATIONS, **options):
    """Newton's method: r = (r + x/r) / 2, starting from r = 1.

    Stops when two successive guesses are equal or after
    sqrt_max_iterations steps.
    """
    if argument.negative:
        raise E.DomainError(f"Square root of a negative number: {argument}")
    if argument.is_zero():
        return FixedDecimal.zero()

    two = FixedDecimal.from_integer(2)
    root = FixedDecimal.from_integer(1)
    for _ in range(sqrt_max_iterations):
        previous = root
        root = (root + argument / root) / two
        if root == previous:
            break
    return root


def cos(argument, cos_max_terms=COS_MAX_TERMS, **options):
    """Taylor series 1 - x^2/2! + x^4/4! - ...

    Each term comes from the previous one: t(n) = t(n-1) * -x^2 / ((2n)(2n-1)).
    Stops once a term no longer changes the partial sum.
    """
    minus_x_squared = -(argument * argument)
    term = FixedDecimal.from_integer(1)
    total = term
    for n in range(1, cos_max_terms):
        term = term * minus_x_squared / FixedDecimal.from_integer((2 * n) * (2 * n - 1))
        previous = total
        total = total + term
        if total == previous:
            break
    return total


# Resolved by linear name comparison
FUNCTION_TABLE = [
    ("zero", zero),
    ("same", same),
    ("sqrt", sqrt),
    ("cos", cos),
]


def find_function(name):
    """Return the function registered under `name`."""
    for function_name, function in FUNCTION_TABLE:
        if function_name == name:
            return function
    raise E.UnknownFunction(f"Unknown function: '{name}'")


def call_function(name, argument, settings=None):
    """Look up `name` and apply it to `argument`, passing the iteration limits from settings."""
    function = find_function(name)
    options = {}
    if settings:
        options["sqrt_max_iterations"] = settings.get("sqrt_max_iterations", SQRT_MAX_ITERATIONS)
        options["cos_max_terms"] = settings.get("cos_max_terms", COS_MAX_TERMS)
    return function(argument, **options)

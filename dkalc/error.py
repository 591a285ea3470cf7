


class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

class SyntaxError(MathError):
    pass

class CalculationError(MathError):
    pass



# --- Lexing / number parsing ---

class NoInput(SyntaxError):
    def __init__(self, message="No number found.", code="3100", equation=None):
        super().__init__(message, code, equation)

class BadCharacter(SyntaxError):
    def __init__(self, message, code="3101", equation=None):
        super().__init__(message, code, equation)

class IntegerPartOverflow(SyntaxError):
    def __init__(self, message="Too many digits.", code="3102", equation=None):
        super().__init__(message, code, equation)

class FractionalPartOverflow(SyntaxError):
    def __init__(self, message="Too many decimals.", code="3103", equation=None):
        super().__init__(message, code, equation)

class BadRadixMarker(SyntaxError):
    def __init__(self, message, code="3104", equation=None):
        super().__init__(message, code, equation)

class FunctionNameTooLong(SyntaxError):
    def __init__(self, message, code="3105", equation=None):
        super().__init__(message, code, equation)

class MissingFunctionParenthesis(SyntaxError):
    def __init__(self, message, code="3106", equation=None):
        super().__init__(message, code, equation)

class InputTooLong(SyntaxError):
    def __init__(self, message, code="3107", equation=None):
        super().__init__(message, code, equation)


# --- Parser ---

class MissingOperand(SyntaxError):
    def __init__(self, message, code="3200", equation=None):
        super().__init__(message, code, equation)

class MissingClosingParenthesis(SyntaxError):
    def __init__(self, message, code="3201", equation=None):
        super().__init__(message, code, equation)

class UnexpectedToken(SyntaxError):
    def __init__(self, message, code="3202", equation=None):
        super().__init__(message, code, equation)


# --- Arithmetic / evaluation ---

class DivideByZero(CalculationError):
    def __init__(self, message="Division by zero", code="3003", equation=None):
        super().__init__(message, code, equation)

class Overflow(CalculationError):
    def __init__(self, message="Number too big.", code="3026", equation=None):
        super().__init__(message, code, equation)

class UnknownFunction(CalculationError):
    def __init__(self, message, code="2004", equation=None):
        super().__init__(message, code, equation)

class DomainError(CalculationError):
    def __init__(self, message, code="2005", equation=None):
        super().__init__(message, code, equation)




Error_Dictionary= {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "9" : "Runtime Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Stage (1 = lexer, 2 = parser, 0 = arithmetic)
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "2004" : "Unknown function: ", # + function name
    "2005" : "Argument outside the function domain: ", # + function name


    "3003" : "Division by zero",
    "3026" : "Number too big.",

    "3100" : "No number found.",
    "3101" : "Bad character: ", # + character
    "3102" : "Too many digits.",
    "3103" : "Too many decimals.",
    "3104" : "Bad radix marker: ", # + marker
    "3105" : "Function name too long: ", # + name
    "3106" : "Missing '(' after function: ", # + name
    "3107" : "Input too long.",

    "3200" : "Missing operand after: ", # + token
    "3201" : "Missing ')'. ",
    "3202" : "Unexpected Token: ", # + token


    "9999" : "Unexpected Error: " #+error
}


def describe(error):
    """Render a MathError the way it is shown to the user: 'Error <code>: <message>'."""
    return f"Error {error.code}: {error.message}"

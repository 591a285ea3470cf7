# MathEngine.py
"""""
Core calculation engine for dkalc.

Pipeline
--------
1) Tokenizer: converts a raw input string into a flat list of Tokens.
   Number literals are read by FixedDecimal.parse.
2) Parser (tree): builds the expression tree in an arena
   (recursive-descent, precedence aware, left-associative).
3) Evaluator: post-order walk of the tree producing one FixedDecimal.
4) Formatter: renders the result as decimal and hexadecimal strings.
"""""

import enum

from . import config_manager as config_manager
from . import ScientificEngine
from . import error as E
from .DecimalEngine import CharStream, FixedDecimal


FUNCTION_NAME_MAX_LEN = 16


# -----------------------------
# Tokens
# -----------------------------

class TokenKind(enum.Enum):
    NOTHING = "_"
    NUMBER = "number"
    PAREN_OPEN = "("
    PAREN_CLOSE = ")"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    FACTORIAL = "!"
    FUNCTION_NAME = "function"


# Single character tokens
Operations = {
    "(": TokenKind.PAREN_OPEN,
    ")": TokenKind.PAREN_CLOSE,
    "+": TokenKind.ADD,
    "-": TokenKind.SUB,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "%": TokenKind.MOD,
    "!": TokenKind.FACTORIAL,
}

Sum_Operations = (TokenKind.ADD, TokenKind.SUB)
Term_Operations = (TokenKind.MUL, TokenKind.DIV, TokenKind.MOD)


class Token:
    """One lexical unit. `value` holds the FixedDecimal of a number or the name of a function."""
    def __init__(self, kind, value=None):
        self.kind = kind
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __str__(self):
        if self.kind == TokenKind.NUMBER:
            return self.value.to_decimal_string()
        elif self.kind == TokenKind.FUNCTION_NAME:
            return self.value
        return self.kind.value

    def __repr__(self):
        return f"Token({self.kind.name}, {str(self)!r})"


# -----------------------------
# Tokenizer
# -----------------------------

def read_function_name(stream):
    """Read a lowercase identifier and the '(' that must follow it.

    Returns None (consuming nothing) when the stream is not at a letter.
    """
    name = ""
    while stream.peek() is not None and "a" <= stream.peek() <= "z":
        name += stream.next()

    if not name:
        return None
    if len(name) > FUNCTION_NAME_MAX_LEN:
        raise E.FunctionNameTooLong(f"Function name too long: '{name[:FUNCTION_NAME_MAX_LEN]}...'")
    if stream.peek() != "(":
        raise E.MissingFunctionParenthesis(f"Missing '(' after function: '{name}'")
    stream.next()
    return Token(TokenKind.FUNCTION_NAME, name)


def next_token(stream):
    """Return the next Token, or None once the input is used up."""
    while True:
        try:
            return Token(TokenKind.NUMBER, FixedDecimal.parse(stream))
        except E.NoInput:
            pass  # no number at this position

        function_token = read_function_name(stream)
        if function_token is not None:
            return function_token

        current_char = stream.next()
        if current_char is None:
            return None
        elif current_char in Operations:
            return Token(Operations[current_char])
        elif current_char.isspace():
            continue
        raise E.BadCharacter(f"Bad character: '{current_char}' at position {stream.position - 1}")


def tokenize(problem):
    """Convert raw input into a list of Tokens. Whitespace is skipped."""
    stream = CharStream(problem)
    tokens = []
    token = next_token(stream)
    while token is not None:
        tokens.append(token)
        token = next_token(stream)
    return tokens


# -----------------------------
# Tree arena
# -----------------------------

class Node:
    """Tree node; children are indices into the arena. Unary nodes only use `left`."""
    def __init__(self, token, left=None, right=None):
        self.token = token
        self.left = left
        self.right = right

    def __repr__(self):
        return f"Node({self.token}, left={self.left}, right={self.right})"


class TreeArena:
    """Append-only node store. A node only refers to nodes pushed before it."""
    def __init__(self):
        self.nodes = []

    def push_single(self, token):
        self.nodes.append(Node(token))
        return len(self.nodes) - 1

    def push_unary(self, token, child):
        self.nodes.append(Node(token, left=child))
        return len(self.nodes) - 1

    def push_dual(self, token, left, right):
        self.nodes.append(Node(token, left=left, right=right))
        return len(self.nodes) - 1

    def __len__(self):
        return len(self.nodes)


class Tree:
    def __init__(self, arena, root):
        self.arena = arena
        self.root = root

    @property
    def nodes(self):
        return self.arena.nodes

    def get_node(self, node_id):
        return self.arena.nodes[node_id]

    def dump(self):
        """One line per arena node: index, token text and child indices."""
        lines = []
        for node_id, node in enumerate(self.nodes):
            marker = "*" if node_id == self.root else " "
            line = f"{marker}{node_id:3}: {node.token}"
            if node.left is not None:
                line += f"  left={node.left}"
            if node.right is not None:
                line += f"  right={node.right}"
            lines.append(line)
        return "\n".join(lines)

    # -----------------------------
    # Evaluator
    # -----------------------------

    def eval(self, settings=None):
        return self.eval_node(self.root, settings)

    def eval_node(self, node_id, settings=None):
        """Post-order evaluation of the subtree rooted at node_id."""
        node = self.get_node(node_id)
        token = node.token

        # Leaves: literals, or zero for Nothing / parenthesis markers
        if node.left is None and node.right is None:
            if token.kind == TokenKind.NUMBER:
                return token.value
            return FixedDecimal.zero()

        left_value = self.eval_node(node.left, settings)

        # Unary: factorial and function calls
        if node.right is None:
            if token.kind == TokenKind.FACTORIAL:
                return FixedDecimal.factorial(left_value)
            elif token.kind == TokenKind.FUNCTION_NAME:
                return ScientificEngine.call_function(token.value, left_value, settings)
            raise E.CalculationError(f"Unknown unary operator: {token}", code="9999")

        right_value = self.eval_node(node.right, settings)

        if token.kind == TokenKind.ADD:
            return left_value + right_value
        elif token.kind == TokenKind.SUB:
            return left_value - right_value
        elif token.kind == TokenKind.MUL:
            return left_value * right_value
        elif token.kind == TokenKind.DIV:
            return left_value / right_value
        elif token.kind == TokenKind.MOD:
            return left_value % right_value
        raise E.CalculationError(f"Unknown operator: {token}", code="9999")

    def __repr__(self):
        return f"Tree(root={self.root}, nodes={len(self.arena)})"


# -----------------------------
# Parser (recursive descent)
# -----------------------------

class TokenGetter:
    """Cursor over the token list; `last` is the most recently consumed token."""
    def __init__(self, tokens):
        self.tokens = tokens
        self.index = 0
        self.last = None

    def peek(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def next(self):
        token = self.peek()
        if token is not None:
            self.index += 1
            self.last = token
        return token

    def peek_kind(self):
        token = self.peek()
        return token.kind if token is not None else None


def make_tree(tokens):
    """Parse a token list into a Tree.

    Grammar (precedence low to high):
        Expression := Term {(+|-) Term}*
        Term       := Factor {(*|/|%) Factor}*
        Factor     := Subfactor ['!']
        Subfactor  := ['-'] Number | '(' Expression ')' | FunctionName Expression ')'

    The function token already contains its '('. Empty input gives a single
    Nothing leaf.
    """
    arena = TreeArena()
    tg = TokenGetter(tokens)

    def missing_operand():
        after = f"'{tg.last}'" if tg.last is not None else "start of input"
        return E.MissingOperand(f"Missing operand after: {after}")

    def expect_closing(opening):
        closing = tg.next()
        if closing is None:
            raise E.MissingClosingParenthesis(f"Missing ')' to close '{opening}'")
        if closing.kind != TokenKind.PAREN_CLOSE:
            raise E.UnexpectedToken(f"Unexpected Token: '{closing}' (expected ')')")

    def parse_subfactor():
        """Numbers (with optional unary minus), '(' sub-expressions and function calls."""
        token = tg.next()
        if token is None:
            raise missing_operand()

        if token.kind == TokenKind.SUB:
            # Unary minus only applies directly to a literal
            number = tg.next()
            if number is None:
                raise missing_operand()
            if number.kind != TokenKind.NUMBER:
                raise E.UnexpectedToken(f"Unexpected Token: '{number}' (expected a number after '-')")
            return arena.push_single(Token(TokenKind.NUMBER, number.value.negate()))

        elif token.kind == TokenKind.NUMBER:
            return arena.push_single(token)

        elif token.kind == TokenKind.PAREN_OPEN:
            inside = parse_expression()
            expect_closing(token)
            return inside

        elif token.kind == TokenKind.FUNCTION_NAME:
            argument = parse_expression()
            expect_closing(token)
            return arena.push_unary(token, argument)

        raise E.UnexpectedToken(f"Unexpected Token: '{token}'")

    def parse_factor():
        """Postfix factorial."""
        node = parse_subfactor()
        if tg.peek_kind() == TokenKind.FACTORIAL:
            node = arena.push_unary(tg.next(), node)
        return node

    def parse_term():
        """Multiplication, division and modulo."""
        current_tree = parse_factor()
        while tg.peek_kind() in Term_Operations:
            operator = tg.next()
            right_part = parse_factor()
            current_tree = arena.push_dual(operator, current_tree, right_part)
        return current_tree

    def parse_expression():
        """Addition and subtraction."""
        current_tree = parse_term()
        while tg.peek_kind() in Sum_Operations:
            operator = tg.next()
            right_side = parse_term()
            current_tree = arena.push_dual(operator, current_tree, right_side)
        return current_tree

    if not tokens:
        root = arena.push_single(Token(TokenKind.NOTHING))
        return Tree(arena, root)

    root = parse_expression()
    leftover = tg.peek()
    if leftover is not None:
        raise E.UnexpectedToken(f"Unexpected Token: '{leftover}'")
    return Tree(arena, root)


# -----------------------------
# Public entry points
# -----------------------------

class Result:
    """Outcome of one evaluation; error_message is empty on success."""
    def __init__(self, decimal_result, hex_result, error_message="", error=None):
        self.decimal_result = decimal_result
        self.hex_result = hex_result
        self.error_message = error_message
        self.error = error

    @property
    def ok(self):
        return self.error is None

    def __repr__(self):
        if self.error is not None:
            return f"Result(error={self.error_message!r})"
        return f"Result({self.decimal_result!r}, {self.hex_result!r})"


def check_input_length(problem, settings):
    max_input_length = settings["max_input_length"]
    if len(problem) > max_input_length:
        raise E.InputTooLong(f"Input too long: {len(problem)} characters (max {max_input_length})")


def run(problem, settings, debug=False):
    """tokenize -> make_tree -> eval. Raises MathError subclasses."""
    check_input_length(problem, settings)

    tokens = tokenize(problem)
    if debug:
        print("Tokens:", " ".join(f"[{token}]" for token in tokens))

    tree = make_tree(tokens)
    if debug:
        print("Final tree:")
        print(tree.dump())

    return tree.eval(settings)


def evaluate(problem, debug=False, settings=None):
    """Main API: parse and evaluate one expression, never raises for bad input.

    settings defaults to the config file (see config_manager); a partial
    dict is completed with DEFAULT_SETTINGS.
    """
    if settings is None:
        settings = config_manager.load_setting_value("all")
    else:
        settings = dict(config_manager.DEFAULT_SETTINGS, **settings)
    debug = debug or settings["debug"]
    placeholder = settings["placeholder"]

    try:
        result = run(problem, settings, debug)
        return Result(result.to_decimal_string(), result.to_hex_string())

    # Known errors: attach the source equation
    except E.MathError as e:
        e.equation = problem
        return Result(placeholder, placeholder, E.describe(e), e)
    # Convert unexpected Python exceptions to our unified error type
    except Exception as e:
        error = E.MathError(message=f"Unexpected Error: {e}", code="9999", equation=problem)
        return Result(placeholder, placeholder, E.describe(error), error)


def calculate(problem):
    """String API: returns '= <decimal result>' or raises the MathError."""
    result = evaluate(problem)
    if result.error is not None:
        raise result.error
    return "= " + result.decimal_result


def test_main():
    """Simple REPL-like runner for manual testing of the engine."""
    print("Enter the problem: ")
    problem = input()
    result = evaluate(problem, debug=True)
    if result.error is not None:
        print(result.error_message)
    else:
        print(f"= {result.decimal_result}  ({result.hex_result})")


if __name__ == "__main__":
    # Allow running this module directly for quick CLI tests:
    #   python -m dkalc.MathEngine
    test_main()

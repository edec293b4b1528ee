"""Lexer for payroll formulas.

Formulas are made of decimal literals, identifiers, the four arithmetic
operators and parentheses. Condition formulas additionally accept comparison
operators. Anything else is rejected as soon as it is seen; nothing is ever
stripped or sanitized.
"""
import regex
from collections import namedtuple

from payengine.formula.utils.exceptions import FormulaSyntaxError
from payengine.formula.utils.helpers import get_max_expression_length

(
    NUMBER,
    IDENTIFIER,
    OPERATOR,
    COMPARISON,
    LPAREN,
    RPAREN
) = (
    'NUMBER',
    'IDENTIFIER',
    'OPERATOR',
    'COMPARISON',
    'LPAREN',
    'RPAREN'
)

Token = namedtuple('Token', ['type', 'value', 'position'])

# order matters: two character comparisons before their one character prefix
TOKEN_PATTERN = regex.compile(
    r'(?P<WHITESPACE>[ \t\r\n]+)'
    r'|(?P<NUMBER>[0-9]+(?:\.[0-9]*)?|\.[0-9]+)'
    r'|(?P<IDENTIFIER>[A-Za-z_][A-Za-z0-9_]*)'
    r'|(?P<COMPARISON><=|>=|==|!=|<|>)'
    r'|(?P<OPERATOR>[-+*/])'
    r'|(?P<LPAREN>\()'
    r'|(?P<RPAREN>\))'
)


def tokenize(expression, allow_comparison=False, check_length=True):
    """Split `expression` into tokens.

    Whitespace is limited to space, tab, carriage return and newline.

    :param expression: raw or substituted formula text
    :param allow_comparison: accept ``< <= > >= == !=`` (condition formulas)
    :param check_length: enforce the maximum formula length; only the text an
        administrator wrote is limited, never its substituted copy
    :return: list of :class:`Token`
    :raises FormulaSyntaxError: on the first character that is not allowed
    """
    if expression is None:
        raise FormulaSyntaxError('Formula is empty.', expression=expression)

    max_length = get_max_expression_length()
    if check_length and len(expression) > max_length:
        raise FormulaSyntaxError(
            f'Formula exceeds maximum length of {max_length} characters.',
            expression=expression
        )

    tokens = []
    position = 0
    while position < len(expression):
        match = TOKEN_PATTERN.match(expression, position)
        if not match or (
            match.lastgroup == COMPARISON and not allow_comparison
        ):
            raise FormulaSyntaxError(
                f"Invalid character '{expression[position]}' at position {position}.",
                expression=expression,
                position=position
            )
        if match.lastgroup != 'WHITESPACE':
            tokens.append(Token(match.lastgroup, match.group(), position))
        position = match.end()
    return tokens


def validate_syntax(expression, allow_identifiers=True, allow_comparison=False):
    """Fail closed check that `expression` is made only of allowed tokens.

    With ``allow_identifiers=False`` the expression must be pure arithmetic,
    which is how substituted formulas are checked before evaluation.
    """
    if not expression or not expression.strip():
        return False
    try:
        tokens = tokenize(expression, allow_comparison=allow_comparison)
    except FormulaSyntaxError:
        return False

    if not allow_identifiers:
        return not any(token.type == IDENTIFIER for token in tokens)
    return True

"""Safe evaluation of payroll formulas.

Evaluation Workflow:
-------------------

    0) The raw formula is parsed with variables left as names. Grammar
       errors such as ``2BasicSalary`` fail here, and the length and nesting
       limits apply to this text only.

    1) :func:`~substitute_variables` replaces every variable token with its
       pool value formatted to two fraction digits. Matching is done on whole
       tokens, so ``Basic`` is never replaced inside ``BasicSalary``. A
       variable whose value is ``None`` is unresolved.

    2) :func:`~ensure_resolved` lexes the substituted text again. Any
       identifier left over means the formula referenced something the pool
       does not provide and the evaluation fails.

    3) :class:`~FormulaParser` builds a small expression tree with a
       recursive descent parser and the tree is evaluated with Decimal
       arithmetic.

    4) The amount is rounded to two places, half away from zero.

Using Evaluator:
---------------

    .. code-block:: python

        from payengine.formula.utils.evaluator import evaluate, evaluate_condition

        evaluate('BasicSalary * 0.1', {'BasicSalary': 50000})
        # Decimal('5000.00')

        evaluate_condition('WorkingDays >= 20 and not AbsentDays > 2', pool)
        # True
"""
import decimal
from decimal import Decimal

from payengine.formula.constants import LOGICAL_KEYWORDS, RESERVED_WORDS
from payengine.formula.utils.exceptions import (
    DivisionByZeroError,
    FormulaEvaluationError,
    FormulaSyntaxError,
    UnresolvedVariableError
)
from payengine.formula.utils.helpers import (
    format_amount,
    get_max_nesting_depth,
    round_amount
)
from payengine.formula.utils.tokenizer import (
    COMPARISON,
    IDENTIFIER,
    LPAREN,
    NUMBER,
    OPERATOR,
    RPAREN,
    tokenize
)

FORMULA_DECIMAL_CONTEXT = decimal.Context(
    prec=28,
    rounding=decimal.ROUND_HALF_EVEN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow]
)


def _as_number(value):
    if isinstance(value, bool):
        raise FormulaEvaluationError('Arithmetic on true/false values is not supported.')
    return value


def _as_boolean(value):
    if not isinstance(value, bool):
        raise FormulaEvaluationError('Logical operators need true/false operands.')
    return value


class Number(object):
    def __init__(self, value):
        self.value = value

    def evaluate(self):
        return self.value


class Boolean(object):
    def __init__(self, value):
        self.value = value

    def evaluate(self):
        return self.value


class Variable(object):
    """Only produced when parsing raw formulas for validation; substituted
    formulas never contain variables."""

    def __init__(self, name):
        self.name = name

    def evaluate(self):
        raise UnresolvedVariableError([self.name])


class UnaryOperation(object):
    def __init__(self, operator, operand):
        self.operator = operator
        self.operand = operand

    def evaluate(self):
        value = _as_number(self.operand.evaluate())
        return -value if self.operator == '-' else value


class BinaryOperation(object):
    def __init__(self, operator, left, right):
        self.operator = operator
        self.left = left
        self.right = right

    def evaluate(self):
        left = _as_number(self.left.evaluate())
        right = _as_number(self.right.evaluate())

        if self.operator == '+':
            return left + right
        if self.operator == '-':
            return left - right
        if self.operator == '*':
            return left * right
        if right == 0:
            raise DivisionByZeroError()
        return left / right


class Comparison(object):
    def __init__(self, operator, left, right):
        self.operator = operator
        self.left = left
        self.right = right

    def evaluate(self):
        left = _as_number(self.left.evaluate())
        right = _as_number(self.right.evaluate())
        return {
            '<': left < right,
            '<=': left <= right,
            '>': left > right,
            '>=': left >= right,
            '==': left == right,
            '!=': left != right,
        }[self.operator]


class LogicalOperation(object):
    def __init__(self, operator, left, right):
        self.operator = operator
        self.left = left
        self.right = right

    def evaluate(self):
        left = _as_boolean(self.left.evaluate())
        if self.operator == 'and' and not left:
            return False
        if self.operator == 'or' and left:
            return True
        return _as_boolean(self.right.evaluate())


class Negation(object):
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self):
        return not _as_boolean(self.operand.evaluate())


class FormulaParser(object):
    """Recursive descent parser.

    Arithmetic grammar::

        additive := term (('+' | '-') term)*
        term     := unary (('*' | '/') unary)*
        unary    := ('+' | '-') unary | primary
        primary  := NUMBER | '(' expression ')'

    With ``allow_logic`` the expression is a condition::

        or_expr    := and_expr ('or' and_expr)*
        and_expr   := not_expr ('and' not_expr)*
        not_expr   := 'not' not_expr | comparison
        comparison := additive (COMPARISON additive)?

    and ``true`` / ``false`` become primaries.

    :param expression: formula text
    :param allow_logic: parse a condition instead of an amount
    :param allow_variables: accept identifiers as variables
    :param check_limits: enforce the length and nesting limits, off for
        substituted text whose raw formula was already checked
    """

    def __init__(self, expression, allow_logic=False, allow_variables=False,
                 check_limits=True):
        self.expression = expression
        self.allow_logic = allow_logic
        self.allow_variables = allow_variables
        self.check_limits = check_limits
        self.tokens = tokenize(
            expression,
            allow_comparison=allow_logic,
            check_length=check_limits
        )
        self.index = 0
        self.depth = 0
        self.max_depth = get_max_nesting_depth()

    @property
    def current(self):
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def advance(self):
        token = self.current
        self.index += 1
        return token

    def error(self, message, token=None):
        return FormulaSyntaxError(
            message,
            expression=self.expression,
            position=getattr(token, 'position', None)
        )

    def is_keyword(self, keyword):
        token = self.current
        return (
            self.allow_logic and token is not None and
            token.type == IDENTIFIER and token.value.lower() == keyword
        )

    def descend(self):
        self.depth += 1
        if self.check_limits and self.depth > self.max_depth:
            raise self.error(
                f'Formula nesting exceeds maximum depth of {self.max_depth}.',
                self.current
            )

    def parse(self):
        if not self.tokens:
            raise self.error('Formula is empty.')

        node = self.parse_expression()

        token = self.current
        if token is not None:
            raise self.error(
                f"Unexpected '{token.value}' at position {token.position}.",
                token
            )
        return node

    def parse_expression(self):
        if self.allow_logic:
            return self.parse_or()
        return self.parse_additive()

    def parse_or(self):
        node = self.parse_and()
        while self.is_keyword('or'):
            self.advance()
            node = LogicalOperation('or', node, self.parse_and())
        return node

    def parse_and(self):
        node = self.parse_not()
        while self.is_keyword('and'):
            self.advance()
            node = LogicalOperation('and', node, self.parse_not())
        return node

    def parse_not(self):
        if self.is_keyword('not'):
            self.advance()
            self.descend()
            node = Negation(self.parse_not())
            self.depth -= 1
            return node
        return self.parse_comparison()

    def parse_comparison(self):
        node = self.parse_additive()
        token = self.current
        if token is not None and token.type == COMPARISON:
            self.advance()
            node = Comparison(token.value, node, self.parse_additive())

            following = self.current
            if following is not None and following.type == COMPARISON:
                raise self.error(
                    'Chained comparisons are not supported; combine them with and.',
                    following
                )
        return node

    def parse_additive(self):
        node = self.parse_term()
        while self.current is not None and self.current.type == OPERATOR and (
            self.current.value in ('+', '-')
        ):
            operator = self.advance().value
            node = BinaryOperation(operator, node, self.parse_term())
        return node

    def parse_term(self):
        node = self.parse_unary()
        while self.current is not None and self.current.type == OPERATOR and (
            self.current.value in ('*', '/')
        ):
            operator = self.advance().value
            node = BinaryOperation(operator, node, self.parse_unary())
        return node

    def parse_unary(self):
        token = self.current
        if token is not None and token.type == OPERATOR and token.value in ('+', '-'):
            self.advance()
            self.descend()
            node = UnaryOperation(token.value, self.parse_unary())
            self.depth -= 1
            return node
        return self.parse_primary()

    def parse_primary(self):
        token = self.advance()

        if token is None:
            raise self.error('Unexpected end of formula.')

        if token.type == NUMBER:
            return Number(Decimal(token.value))

        if token.type == LPAREN:
            self.descend()
            node = self.parse_expression()
            closing = self.advance()
            if closing is None:
                raise self.error(
                    f"Missing closing parenthesis for '(' at position {token.position}.",
                    token
                )
            if closing.type != RPAREN:
                raise self.error(
                    f"Unexpected '{closing.value}' at position {closing.position}.",
                    closing
                )
            self.depth -= 1
            return node

        if token.type == IDENTIFIER:
            return self.parse_identifier(token)

        raise self.error(
            f"Unexpected '{token.value}' at position {token.position}.",
            token
        )

    def parse_identifier(self, token):
        name = token.value
        lowered = name.lower()

        if self.allow_logic and lowered in ('true', 'false'):
            return Boolean(lowered == 'true')

        if self.current is not None and self.current.type == LPAREN:
            raise self.error(f"Function '{name}' is not supported.", token)

        if lowered in LOGICAL_KEYWORDS:
            raise self.error(
                f"Unexpected keyword '{name}' at position {token.position}.",
                token
            )

        if lowered in RESERVED_WORDS:
            raise self.error(f"'{name}' is a reserved word.", token)

        if not self.allow_variables:
            raise UnresolvedVariableError([name], expression=self.expression)

        return Variable(name)


def parse_formula(expression, allow_logic=False, allow_variables=False,
                  check_limits=True):
    return FormulaParser(
        expression,
        allow_logic=allow_logic,
        allow_variables=allow_variables,
        check_limits=check_limits
    ).parse()


def substitute_variables(expression, variables, allow_comparison=False):
    """Return a copy of `expression` with every known variable token replaced
    by its value formatted to two fraction digits.

    Tokens that are not in `variables` are left untouched.

    :raises UnresolvedVariableError: when a referenced variable is `None`
    """
    pieces = []
    last_position = 0

    for token in tokenize(expression, allow_comparison=allow_comparison):
        if token.type != IDENTIFIER or token.value not in variables:
            continue
        if token.value.lower() in RESERVED_WORDS:
            continue

        value = variables[token.value]
        if value is None:
            raise UnresolvedVariableError([token.value], expression=expression)

        try:
            text = format_amount(value)
        except ValueError as err:
            raise FormulaEvaluationError(
                f"Variable '{token.value}' is not numeric: {err}",
                expression=expression
            )
        if text.startswith('-'):
            text = f'({text})'

        pieces.append(expression[last_position:token.position])
        pieces.append(text)
        last_position = token.position + len(token.value)

    pieces.append(expression[last_position:])
    return ''.join(pieces)


def ensure_resolved(substituted, expression, allow_logic=False):
    """Validate a substituted formula: only literals, operators and (for
    conditions) logical keywords may remain."""
    tokens = tokenize(substituted, allow_comparison=allow_logic, check_length=False)
    allowed_words = LOGICAL_KEYWORDS if allow_logic else frozenset()

    residual = []
    for token in tokens:
        if token.type != IDENTIFIER or token.value.lower() in allowed_words:
            continue
        if token.value.lower() in RESERVED_WORDS:
            raise FormulaSyntaxError(
                f"'{token.value}' is not supported in formulas.",
                expression=expression,
                position=token.position
            )
        if token.value not in residual:
            residual.append(token.value)

    if residual:
        raise UnresolvedVariableError(residual, expression=expression)


def _evaluate(expression, variables, allow_logic):
    if expression is None or not expression.strip():
        raise FormulaSyntaxError('Formula is empty.', expression=expression)

    # the raw formula must parse on its own, substitution may not repair it
    parse_formula(expression, allow_logic=allow_logic, allow_variables=True)

    with decimal.localcontext(FORMULA_DECIMAL_CONTEXT):
        try:
            substituted = substitute_variables(
                expression,
                variables or {},
                allow_comparison=allow_logic
            )
            ensure_resolved(substituted, expression, allow_logic=allow_logic)

            value = parse_formula(
                substituted,
                allow_logic=allow_logic,
                check_limits=False
            ).evaluate()
            if allow_logic:
                return value
            return round_amount(_as_number(value))
        except decimal.DecimalException as err:
            raise FormulaEvaluationError(
                f'Formula result is out of range: {err!r}',
                expression=expression
            )


def evaluate(expression, variables=None):
    """Evaluate an arithmetic formula.

    :param expression: formula text, e.g. ``'BasicSalary * 0.1'``
    :param variables: mapping of variable name to numeric value
    :return: Decimal rounded to two places
    :raises FormulaEvaluationError: or one of its subclasses
    """
    return _evaluate(expression, variables, allow_logic=False)


def evaluate_condition(expression, variables=None):
    """Evaluate a condition formula to ``True`` or ``False``."""
    value = _evaluate(expression, variables, allow_logic=True)
    if not isinstance(value, bool):
        raise FormulaEvaluationError(
            'Condition must evaluate to true or false.',
            expression=expression
        )
    return value

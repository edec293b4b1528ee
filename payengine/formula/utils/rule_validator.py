import logging

from payengine.formula.utils.evaluator import parse_formula
from payengine.formula.utils.exceptions import FormulaEvaluationError
from payengine.formula.utils.helpers import is_reserved_word
from payengine.formula.utils.tokenizer import IDENTIFIER, tokenize

logger = logging.getLogger(__name__)


def extract_variables(expression, allow_comparison=True):
    """Variable names used in `expression`, in order of first use.

    Reserved words (math function names and logical keywords) are never
    reported, whatever their case.

    :raises FormulaSyntaxError: when `expression` has characters that are
        not allowed in formulas
    """
    if not expression or not expression.strip():
        return []

    variables = []
    for token in tokenize(expression, allow_comparison=allow_comparison):
        if token.type != IDENTIFIER or is_reserved_word(token.value):
            continue
        if token.value not in variables:
            variables.append(token.value)
    return variables


class Equation(object):

    allow_logic = False

    def __init__(self, *args, **kwargs):
        self.formula = kwargs.get('formula')
        self.equation = kwargs.get('equation')
        self.available_variables = set(args[0]) if args else set()
        self.used_variables = list()
        self.error_messages = list()

    def __repr__(self):
        return self.equation or ''

    def __str__(self):
        return self.equation or ''

    @property
    def is_valid(self):
        return not self.error_messages

    def validate_symbol_availability(self):
        errors = []
        not_defined_variables = [
            variable for variable in self.used_variables
            if variable not in self.available_variables
        ]
        if not_defined_variables:
            errors.append(f'{not_defined_variables}: Symbols not available')
        return errors

    def validate_grammar(self):
        try:
            parse_formula(
                self.equation,
                allow_logic=self.allow_logic,
                allow_variables=True
            )
        except FormulaEvaluationError as err:
            return [str(err.detail)]
        return []

    def validate(self):
        if not self.equation or not self.equation.strip():
            self.error_messages = ['Formula is empty.']
            return

        try:
            self.used_variables = extract_variables(
                self.equation,
                allow_comparison=self.allow_logic
            )
        except FormulaEvaluationError as err:
            self.error_messages = [str(err.detail)]
            return

        self.error_messages = self.validate_symbol_availability()

        if not self.error_messages:
            self.error_messages += self.validate_grammar()

        if self.error_messages:
            logger.debug(f"Invalid formula {self.equation}: {self.error_messages}")


class RuleEquation(Equation):
    """Amount formula, e.g. ``BasicSalary * 0.4``."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.validate()


class ConditionEquation(Equation):
    """Condition formula, e.g. ``WorkingDays >= 20 and AbsentDays == 0``."""

    allow_logic = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.validate()


class FormulaValidator(object):
    """Validates a :class:`~payengine.formula.utils.definitions.FormulaDefinition`
    against the variables it may use, both its expression and its conditions.
    """

    def __init__(self, formula, available_variables):
        self.formula = formula
        self.rule_equation = RuleEquation(
            available_variables,
            equation=formula.expression,
            formula=formula
        )
        self.condition_equation = None
        if formula.conditions and formula.conditions.strip():
            self.condition_equation = ConditionEquation(
                available_variables,
                equation=formula.conditions,
                formula=formula
            )
        self.is_valid, self.error_messages = self.validity_check()

    @property
    def used_variables(self):
        used = list(self.rule_equation.used_variables)
        if self.condition_equation is not None:
            used += [
                variable for variable in self.condition_equation.used_variables
                if variable not in used
            ]
        return used

    def validity_check(self):
        valid = self.rule_equation.is_valid
        errors = {
            'rule_equation_errors': self.rule_equation.error_messages,
            'condition_equation_errors': [],
        }
        if self.condition_equation is not None:
            valid = valid and self.condition_equation.is_valid
            errors['condition_equation_errors'] = self.condition_equation.error_messages
        return valid, errors


def validate(expression, declared_variables):
    """Whether `expression` is a well formed amount formula using only
    `declared_variables`."""
    return RuleEquation(declared_variables, equation=expression).is_valid

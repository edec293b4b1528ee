"""This file contains utils needed to evaluate payroll formulas for an employee.

Calculator Workflow:
-------------------

    :func:`~FormulaCalculator` Initializes Calculator and builds the seed
    variable pool from the evaluation context (once per run)

    :func:`~FormulaCalculator.start_calculation`  Starts Calculation

        Then for each formula, ascending by priority (ties keep input order)

            1) if formula is inactive, skip it

            2) if formula is out of scope or its conditions do not hold,
               skip it (no result is recorded)
                :func:`~payengine.formula.utils.scope.is_applicable`

            3) evaluate the formula against the current pool
                :func:`~payengine.formula.utils.evaluator.evaluate`

            4) store the amount under the formula name, both in the results
               and in the pool, so later formulas can refer to it

        A formula that can not be evaluated gets an amount of 0 and a
        :class:`~FormulaFailure` record; the remaining formulas still run.

Using Calculator:
----------------

    .. code-block:: python

        import datetime

        from payengine.formula.utils.calculator import FormulaCalculator
        from payengine.formula.utils.context import EvaluationContext
        from payengine.formula.utils.definitions import FormulaDefinition

        context = EvaluationContext(
            employee=employee,
            organization=organization,
            branch=branch,
            basic_salary=10000,
            payroll_period_start=datetime.date(2024, 1, 1),
        )

        formulas = [
            FormulaDefinition(name='HRA', expression='BasicSalary * 0.2', priority=1),
            FormulaDefinition(name='Gross', expression='BasicSalary + HRA', priority=2),
        ]

        calculation = FormulaCalculator(context, formulas)
        results = calculation.start_calculation()
        # {'HRA': Decimal('2000.00'), 'Gross': Decimal('12000.00')}

        for failure in calculation.failures:
            print(failure.name, failure.error)
"""
import logging
from collections import namedtuple
from decimal import Decimal

from payengine.formula.constants import (
    ALLOWANCE,
    DEDUCTION_FORMULA_TYPES,
    OVERTIME_DAYS_PER_MONTH,
    OVERTIME_HOURS_PER_DAY
)
from payengine.formula.utils.calculator_variable import build_variable_pool
from payengine.formula.utils.evaluator import evaluate
from payengine.formula.utils.exceptions import FormulaEvaluationError
from payengine.formula.utils.helpers import (
    is_valid_variable_name,
    round_amount,
    to_decimal
)
from payengine.formula.utils.scope import is_applicable

logger = logging.getLogger(__name__)

FormulaFailure = namedtuple('FormulaFailure', ['name', 'expression', 'error'])

ZERO = round_amount(0)


class FormulaCalculator(object):
    """One priority ordered evaluation pass over the formulas of a context.

    :param context: EvaluationContext instance
    :param formulas: iterable of FormulaDefinition; not modified

    :ivar pool: VariablePool, seed variables plus every result so far
    :ivar results: formula name to amount
    :ivar failures: list of FormulaFailure
    :ivar skipped: names of inactive or not applicable formulas
    """

    def __init__(self, context, formulas):
        self.context = context
        self.formulas = list(formulas)

        self.pool = build_variable_pool(context)
        self.results = dict()
        self.failures = list()
        self.skipped = list()

    def get_sorted_formulas(self):
        # sorted() is stable, equal priorities keep the given order
        return sorted(self.formulas, key=lambda formula: formula.priority)

    def record_failure(self, formula, error):
        logger.warning(
            f"Error evaluating formula {formula.name} ({formula.expression}): {error}"
        )
        self.failures.append(
            FormulaFailure(formula.name, formula.expression, str(error))
        )

    def set_result(self, formula, amount):
        self.results[formula.name] = amount

        if is_valid_variable_name(formula.name):
            self.pool[formula.name] = amount
        else:
            logger.warning(
                f"Result of {formula.name} can not be referenced by other formulas:"
                " name is not a valid variable name"
            )

    def process_formula(self, formula):
        if not formula.is_active:
            logger.debug(f"Skipping inactive formula {formula.name}")
            self.skipped.append(formula.name)
            return

        try:
            if not is_applicable(formula, self.context, self.pool):
                self.skipped.append(formula.name)
                return

            amount = evaluate(formula.expression, self.pool)
        except FormulaEvaluationError as err:
            self.record_failure(formula, err.detail)
            amount = ZERO

        logger.debug(f"Evaluated formula {formula.name}: {amount}")
        self.set_result(formula, amount)

    def start_calculation(self):
        for formula in self.get_sorted_formulas():
            self.process_formula(formula)
        return self.results


def run_batch(context, formulas):
    """Evaluate `formulas` for `context` and return name to amount."""
    return FormulaCalculator(context, formulas).start_calculation()


def calculate_overtime_amount(overtime_hours, basic_salary, overtime_rate):
    """Overtime pay with the hourly rate taken from a 8 hour, 30 day month.

    :return: Decimal rounded to two places, 0 when hours or salary is not
        positive
    """
    overtime_hours = to_decimal(overtime_hours)
    basic_salary = to_decimal(basic_salary)
    overtime_rate = to_decimal(overtime_rate)

    if overtime_hours <= 0 or basic_salary <= 0:
        return ZERO

    hourly_rate = basic_salary / (OVERTIME_HOURS_PER_DAY * OVERTIME_DAYS_PER_MONTH)
    return round_amount(overtime_hours * hourly_rate * overtime_rate)


class FormulaResultSummary(object):
    """Batch results grouped by formula type.

    :ivar allowances: name to amount of `Allowance` formulas
    :ivar deductions: name to amount of `Deduction` and `Tax` formulas
    :ivar custom: name to amount of every other formula
    """

    def __init__(self):
        self.allowances = dict()
        self.deductions = dict()
        self.custom = dict()

    def __repr__(self):
        return (
            f"FormulaResultSummary allowances={self.total_allowances} "
            f"deductions={self.total_deductions}"
        )

    @property
    def total_allowances(self):
        return round_amount(sum(self.allowances.values(), Decimal('0')))

    @property
    def total_deductions(self):
        return round_amount(sum(self.deductions.values(), Decimal('0')))


def summarize_results(results, formulas):
    summary = FormulaResultSummary()
    formula_types = {formula.name: formula.formula_type for formula in formulas}

    for name, amount in results.items():
        formula_type = formula_types.get(name)
        if formula_type == ALLOWANCE:
            summary.allowances[name] = amount
        elif formula_type in DEDUCTION_FORMULA_TYPES:
            summary.deductions[name] = amount
        else:
            summary.custom[name] = amount
    return summary

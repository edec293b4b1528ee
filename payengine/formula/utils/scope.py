import logging

from payengine.formula.constants import (
    BRANCH_SCOPE,
    DEPARTMENT_SCOPE,
    DESIGNATION_SCOPE,
    ORGANIZATION_SCOPE,
    SCOPE_DIMENSIONS
)
from payengine.formula.utils.calculator_variable import build_variable_pool
from payengine.formula.utils.evaluator import evaluate_condition

logger = logging.getLogger(__name__)


def _is_wildcard(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _same_text(expected, actual):
    if actual is None:
        return False
    return str(expected).strip().lower() == str(actual).strip().lower()


class ScopeSpec(object):
    """Where a formula applies.

    Each populated dimension must match the evaluation context; an empty
    dimension matches everything.
    """

    def __init__(self, organization_id=None, branch_id=None,
                 department=None, designation=None):
        self.values = {
            ORGANIZATION_SCOPE: organization_id,
            BRANCH_SCOPE: branch_id,
            DEPARTMENT_SCOPE: department,
            DESIGNATION_SCOPE: designation,
        }

    def __repr__(self):
        populated = {
            dimension: value for dimension, value in self.values.items()
            if not _is_wildcard(value)
        }
        return f"ScopeSpec {populated or 'everyone'}"

    @classmethod
    def from_formula(cls, formula):
        return cls(
            organization_id=formula.organization_id,
            branch_id=formula.branch_id,
            department=formula.department,
            designation=formula.designation
        )

    def get_context_value(self, dimension, context):
        if dimension == ORGANIZATION_SCOPE:
            return getattr(context.organization, 'id', None)
        if dimension == BRANCH_SCOPE:
            return getattr(context.branch, 'id', None)
        return getattr(context.employee, dimension, None)

    def matches(self, dimension, context):
        expected = self.values[dimension]
        if _is_wildcard(expected):
            return True

        actual = self.get_context_value(dimension, context)
        if dimension in (DEPARTMENT_SCOPE, DESIGNATION_SCOPE):
            return _same_text(expected, actual)
        return actual is not None and expected == actual

    def is_satisfied_by(self, context):
        return all(
            self.matches(dimension, context) for dimension in SCOPE_DIMENSIONS
        )


def is_applicable(formula, context, pool=None):
    """Whether `formula` applies to the employee of `context`.

    :param pool: variables the formula's `conditions` are checked against,
        defaults to the seed pool of `context`
    :raises FormulaEvaluationError: when `conditions` can not be evaluated
    """
    if not formula.scope.is_satisfied_by(context):
        logger.debug(f"{formula.name} out of scope for {context.employee}")
        return False

    if _is_wildcard(formula.conditions):
        return True

    if pool is None:
        pool = build_variable_pool(context)
    return evaluate_condition(formula.conditions, pool)

import calendar
import logging

from payengine.formula.constants import (
    CONTEXT_VARIABLES,
    DAYS_IN_MONTH,
    DAYS_IN_MONTH_DESCRIPTION
)
from payengine.formula.utils.context import FormulaVariable, VariablePool
from payengine.formula.utils.helpers import is_valid_variable_name, to_decimal

logger = logging.getLogger(__name__)


class CalculatorVariable:
    """Resolves the variables a formula batch can use from an
    :class:`~payengine.formula.utils.context.EvaluationContext`.

    Sources, in order, later ones winning on a name clash:

        * context facts (`BasicSalary`, `OvertimeHours`, ..., `DaysInMonth`)
        * ``context.variables``
        * ``context.custom_values``
    """

    def __init__(self, context):
        self.context = context

    @staticmethod
    def get_static_variables():
        return [name for name, _, _ in CONTEXT_VARIABLES] + [DAYS_IN_MONTH]

    def get_days_in_month(self):
        period_start = self.context.payroll_period_start
        if period_start is None:
            return to_decimal(0)
        return to_decimal(
            calendar.monthrange(period_start.year, period_start.month)[1]
        )

    def get_context_variables(self):
        variables = [
            FormulaVariable(name, getattr(self.context, attribute), description)
            for name, attribute, description in CONTEXT_VARIABLES
        ]
        variables.append(
            FormulaVariable(
                DAYS_IN_MONTH,
                self.get_days_in_month(),
                DAYS_IN_MONTH_DESCRIPTION
            )
        )
        return variables

    @staticmethod
    def get_overlay_variables(mapping, description_prefix):
        variables = []
        for name, value in mapping.items():
            if not is_valid_variable_name(name):
                logger.warning(
                    f"Ignoring '{name}' ({description_prefix}): not a valid formula variable name"
                )
                continue
            variables.append(
                FormulaVariable(
                    name,
                    to_decimal(value),
                    f'{description_prefix}: {name}'
                )
            )
        return variables

    def get_available_variables(self):
        variables = dict()
        for variable in (
            self.get_context_variables() +
            self.get_overlay_variables(self.context.variables, 'Custom variable') +
            self.get_overlay_variables(self.context.custom_values, 'Custom value')
        ):
            # re-assigning keeps the first position, last value
            variables[variable.name] = variable
        return list(variables.values())

    def build_variable_pool(self):
        return VariablePool(
            (variable.name, variable.value)
            for variable in self.get_available_variables()
        )


def build_variable_pool(context):
    return CalculatorVariable(context).build_variable_pool()


def list_available_variables(context):
    return CalculatorVariable(context).get_available_variables()

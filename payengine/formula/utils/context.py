from collections import namedtuple
from collections.abc import MutableMapping
from types import MappingProxyType

from payengine.formula.utils.helpers import is_valid_variable_name, to_decimal

FormulaVariable = namedtuple('FormulaVariable', ['name', 'value', 'description'])


class EvaluationContext(object):
    """Snapshot of the payroll facts a formula batch is evaluated against.

    :param employee: employee being evaluated, only used for scope filtering
        (``department`` and ``designation`` attributes)
    :param organization: organization, only used for scope filtering (``id``)
    :param branch: branch, only used for scope filtering (``id``)
    :param basic_salary: basic salary for the period
    :param overtime_hours: overtime hours worked in the period
    :param working_days: working days in the period
    :param actual_working_days: days actually worked
    :param absent_days: absent days
    :param leave_days: leave days
    :param payroll_period_start: first day of the period, decides `DaysInMonth`
    :param payroll_period_end: last day of the period
    :param variables: named numeric overrides
    :param custom_values: named numeric extras, applied after `variables`

    The context can not be changed once created.
    """

    def __init__(self, **kwargs):
        values = dict(
            employee=kwargs.get('employee'),
            organization=kwargs.get('organization'),
            branch=kwargs.get('branch'),
            basic_salary=to_decimal(kwargs.get('basic_salary')),
            overtime_hours=to_decimal(kwargs.get('overtime_hours')),
            working_days=to_decimal(kwargs.get('working_days')),
            actual_working_days=to_decimal(kwargs.get('actual_working_days')),
            absent_days=to_decimal(kwargs.get('absent_days')),
            leave_days=to_decimal(kwargs.get('leave_days')),
            payroll_period_start=kwargs.get('payroll_period_start'),
            payroll_period_end=kwargs.get('payroll_period_end'),
            variables=MappingProxyType(dict(kwargs.get('variables') or {})),
            custom_values=MappingProxyType(dict(kwargs.get('custom_values') or {})),
        )
        for attribute, value in values.items():
            object.__setattr__(self, attribute, value)

    def __setattr__(self, name, value):
        raise AttributeError(f'{self.__class__.__name__} is read only')

    def __delattr__(self, name):
        raise AttributeError(f'{self.__class__.__name__} is read only')

    def __repr__(self):
        return (
            f"EvaluationContext employee={self.employee} "
            f"period={self.payroll_period_start}"
        )


class VariablePool(MutableMapping):
    """Name to Decimal mapping a formula batch evaluates against.

    Values are stored as Decimal and names must be formula identifiers, so
    everything in the pool can be referenced from a formula.
    """

    def __init__(self, initial=None):
        self._variables = dict()
        if initial:
            self.update(initial)

    def __getitem__(self, name):
        return self._variables[name]

    def __setitem__(self, name, value):
        if not is_valid_variable_name(name):
            raise ValueError(f"'{name}' can not be used as a formula variable name")
        self._variables[name] = to_decimal(value)

    def __delitem__(self, name):
        del self._variables[name]

    def __iter__(self):
        return iter(self._variables)

    def __len__(self):
        return len(self._variables)

    def __contains__(self, name):
        return name in self._variables

    def __repr__(self):
        return f"VariablePool {self._variables}"

    def copy(self):
        return self.__class__(self._variables)

    def as_dict(self):
        return dict(self._variables)
